"""Tests for rule-based chart generation."""

import pytest

from app.db.models import ChartType
from app.services.chart_generator import (
    NO_CHART_DATA_MESSAGE,
    NO_VALID_CHART_DATA_MESSAGE,
    UNKNOWN_EMOTION,
    filter_valid_rows,
    generate_chart_data,
    generate_emotion_chart,
    select_chart_type,
)

ROWS = [
    {"date": "2025-10-12", "fatigue": 4, "emotion": "기쁨"},
    {"date": "2025-10-10", "fatigue": 7, "emotion": "불안"},
    {"date": "2025-10-11", "fatigue": 8, "emotion": "불안"},
    {"date": "2025-10-13", "fatigue": 3, "emotion": None},
]


@pytest.mark.parametrize(
    ("question", "chart_type"),
    [
        ("이번 주 피곤함 변화 보여줘", ChartType.LINE),
        ("감정 추이가 궁금해", ChartType.LINE),
        ("감정 분포 알려줘", ChartType.BAR),
        ("불안이 몇번 있었어?", ChartType.BAR),
        ("감정 비율은?", ChartType.PIE),
        ("지난주랑 비교해줘", ChartType.RADAR),
        ("A vs B", ChartType.RADAR),
        ("그냥 보여줘", ChartType.LINE),
        ("", ChartType.LINE),
    ],
)
def test_select_chart_type(question, chart_type):
    assert select_chart_type(question) is chart_type


def test_first_keyword_group_wins():
    assert select_chart_type("변화 비율") is ChartType.LINE


class TestFilterValidRows:
    def test_drops_incomplete_and_bad_dates(self):
        rows = [
            {"date": "2025-10-01", "fatigue": 5},
            {"date": "2025-10-02"},
            {"fatigue": 6},
            {"date": "2025-13-40", "fatigue": 3},
            "garbage",
        ]
        assert filter_valid_rows(rows) == [{"date": "2025-10-01", "fatigue": 5}]


class TestGenerateEmotionChart:
    def test_line_chart_sorted_by_date(self):
        chart = generate_emotion_chart(ROWS, "피곤함 변화")

        assert chart.type == "line"
        assert chart.no_data is False
        assert chart.data["labels"] == ["2025-10-10", "2025-10-11", "2025-10-12", "2025-10-13"]
        assert chart.data["datasets"][0]["data"] == [7, 8, 4, 3]
        assert chart.data["datasets"][0]["label"] == "피로도"
        assert chart.options["plugins"]["title"]["text"] == "주간 감정 변화 추이"

    def test_bar_chart_counts_emotions(self):
        chart = generate_emotion_chart(ROWS, "감정 분포")

        assert chart.type == "bar"
        counts = dict(zip(chart.data["labels"], chart.data["datasets"][0]["data"]))
        assert counts == {"기쁨": 1, "불안": 2, UNKNOWN_EMOTION: 1}
        assert chart.data["datasets"][0]["label"] == "빈도"

    def test_pie_chart_has_palette_and_no_label(self):
        chart = generate_emotion_chart(ROWS, "감정 비율")

        dataset = chart.data["datasets"][0]
        assert chart.type == "pie"
        assert "label" not in dataset
        assert isinstance(dataset["backgroundColor"], list)

    def test_radar_chart_single_series(self):
        chart = generate_emotion_chart(ROWS, "비교")

        assert chart.type == "radar"
        assert len(chart.data["datasets"]) == 1
        assert chart.data["datasets"][0]["label"] == "감정 빈도"

    @pytest.mark.parametrize("rows", [None, []])
    def test_no_rows(self, rows):
        chart = generate_emotion_chart(rows, "변화")

        assert chart.no_data is True
        assert chart.type == "message"
        assert chart.message == NO_CHART_DATA_MESSAGE

    def test_no_valid_rows(self):
        chart = generate_emotion_chart([{"date": "bad", "fatigue": 5}, {"date": "2025-10-01"}], "변화")

        assert chart.no_data is True
        assert chart.message == NO_VALID_CHART_DATA_MESSAGE

    def test_serialises_camel_case(self):
        body = generate_emotion_chart([], "변화").model_dump(by_alias=True)
        assert body["noData"] is True


def test_generate_chart_data_empty():
    assert generate_chart_data([], ChartType.PIE).no_data is True
