"""Tests for the /record endpoints."""

from datetime import date
from uuid import uuid4


class TestCreateRecord:
    async def test_create(self, client):
        response = await client.post(
            "/record",
            json={
                "user_id": "mom1",
                "date": "2025-10-10",
                "title": "힘든 하루",
                "notes": "아이가 밤새 울었다",
                "fatigue": 8,
                "emotion": "지침",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Record saved"
        assert body["record"]["user_id"] == "mom1"
        assert body["record"]["date"] == "2025-10-10"
        assert body["record"]["fatigue"] == 8
        assert "id" in body["record"]

    async def test_fatigue_out_of_range(self, client):
        response = await client.post(
            "/record",
            json={"user_id": "mom1", "date": "2025-10-10", "fatigue": 11},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"

    async def test_user_id_required(self, client):
        response = await client.post("/record", json={"date": "2025-10-10", "fatigue": 3})

        assert response.status_code == 400


class TestListRecords:
    async def test_newest_first_and_scoped(self, client, make_record):
        await make_record(date=date(2025, 10, 1))
        await make_record(date=date(2025, 10, 5))
        await make_record(user_id="dad2", date=date(2025, 10, 3))

        response = await client.get("/record", params={"user_id": "mom1"})

        assert response.status_code == 200
        assert [r["date"] for r in response.json()] == ["2025-10-05", "2025-10-01"]

    async def test_user_id_required(self, client):
        response = await client.get("/record")

        assert response.status_code == 400
        assert response.json() == {"error": "user_id is required"}


class TestDeleteRecord:
    async def test_delete_returns_removed_row(self, client, make_record):
        record = await make_record(date=date(2025, 10, 2), fatigue=6)

        response = await client.delete(f"/record/{record.id}", params={"user_id": "mom1"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["deletedRecord"]["id"] == str(record.id)

        remaining = await client.get("/record", params={"user_id": "mom1"})
        assert remaining.json() == []

    async def test_other_users_record_not_found(self, client, make_record):
        record = await make_record(user_id="mom1")

        response = await client.delete(f"/record/{record.id}", params={"user_id": "dad2"})

        assert response.status_code == 404
        assert response.json() == {"error": "Record not found"}

    async def test_unknown_id(self, client):
        response = await client.delete(f"/record/{uuid4()}", params={"user_id": "mom1"})

        assert response.status_code == 404

    async def test_user_id_required(self, client, make_record):
        record = await make_record()

        response = await client.delete(f"/record/{record.id}")

        assert response.status_code == 400
