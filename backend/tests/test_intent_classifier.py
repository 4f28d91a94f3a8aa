"""Tests for intent classification and the needs-data check."""

from datetime import date, datetime
from unittest.mock import AsyncMock

import pytest

from app.schemas.intent import Intent
from app.services.intent_classifier import (
    DataNeedClassifier,
    FallbackIntentClassifier,
    KeywordIntentClassifier,
    LLMIntentClassifier,
    extract_json_object,
)
from app.services.llm import LLMError
from tests.fakes import FakeLLMClient

NOW = datetime(2025, 10, 15, 14, 30)


class TestExtractJsonObject:
    def test_plain_object(self):
        assert extract_json_object('{"needsData": true}') == {"needsData": True}

    def test_fenced_object(self):
        reply = '```json\n{"isAnalysisRequest": false, "topic": "대화"}\n```'
        assert extract_json_object(reply) == {"isAnalysisRequest": False, "topic": "대화"}

    def test_object_surrounded_by_prose(self):
        reply = '결과입니다: {"needsData": false} 참고하세요.'
        assert extract_json_object(reply) == {"needsData": False}

    @pytest.mark.parametrize("reply", ["", "없음", "[1, 2]", "{not json}"])
    def test_rejects_non_objects(self, reply):
        with pytest.raises(ValueError):
            extract_json_object(reply)


class TestIntentSchema:
    def test_parses_camel_case_reply(self):
        intent = Intent.model_validate(
            {
                "isAnalysisRequest": True,
                "needsChart": True,
                "timeRange": "custom",
                "analysisType": "custom",
                "fromDate": "2025-09-01",
                "toDate": "2025-09-30",
            }
        )
        assert intent.is_analysis_request is True
        assert intent.needs_chart is True
        assert intent.from_date == date(2025, 9, 1)
        assert intent.to_date == date(2025, 9, 30)

    def test_invalid_values_dropped(self):
        intent = Intent.model_validate(
            {
                "timeRange": "fortnight",
                "analysisType": "deep",
                "periodType": "quarter",
                "periodValue": "숫자",
                "topic": "null",
                "fromDate": "not-a-date",
            }
        )
        assert intent.time_range is None
        assert intent.analysis_type is None
        assert intent.period_type is None
        assert intent.period_value is None
        assert intent.topic is None
        assert intent.from_date is None

    def test_non_positive_period_value_dropped(self):
        assert Intent(period_value=0).period_value is None
        assert Intent(period_value=-3).period_value is None

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_period_value_dropped(self, value):
        assert Intent(period_value=value).period_value is None


class TestKeywordIntentClassifier:
    def setup_method(self):
        self.classifier = KeywordIntentClassifier()

    def test_analysis_words(self):
        intent = self.classifier.analyze("이번 달 피곤함 차트 보여줘")
        assert intent.is_analysis_request is True
        assert intent.needs_records is True
        assert intent.needs_chart is True
        assert intent.analysis_type == "specific"
        assert intent.topic == "분석"

    def test_record_words_without_analysis(self):
        intent = self.classifier.analyze("기록 좀 볼래")
        assert intent.is_analysis_request is False
        assert intent.needs_records is True
        assert intent.topic == "기록"
        assert intent.needs_chart is False

    @pytest.mark.parametrize(
        ("message", "time_range"),
        [
            ("오늘 기록", "today"),
            ("Yesterday data", "yesterday"),
            ("이번 주 기록", "last_week"),
            ("지난 달 기록", "last_month"),
            ("기록", "recent"),
        ],
    )
    def test_time_range(self, message, time_range):
        assert self.classifier.analyze(message).time_range == time_range

    def test_greeting(self):
        intent = self.classifier.analyze("안녕하세요")
        assert intent.is_simple_greeting is True
        assert intent.needs_chat_history is True
        assert intent.needs_records is False

    def test_feeling_is_not_a_greeting(self):
        assert self.classifier.analyze("기분이 안 좋아").is_simple_greeting is False


class TestLLMIntentClassifier:
    def test_prompt_carries_reference_dates(self):
        prompt = LLMIntentClassifier(FakeLLMClient()).build_prompt("저번에 어땠지?", NOW)
        assert "2025-10-15" in prompt
        assert "2025-10-08" in prompt  # seven days back
        assert '"저번에 어땠지?"' in prompt

    def test_prompt_lists_past_and_hourly_expressions(self):
        prompt = LLMIntentClassifier(FakeLLMClient()).build_prompt("얼마 전에 힘들었어", NOW)
        for phrase in ("시간대별", "시간별", "얼마 전에", "요전에", "과거 기록과 현재 상황 비교"):
            assert phrase in prompt

    async def test_infinite_period_value_ignored(self):
        llm = FakeLLMClient({"intent": '{"isAnalysisRequest": true, "periodType": "day", "periodValue": Infinity}'})
        intent = await FallbackIntentClassifier(primary=LLMIntentClassifier(llm)).classify("분석", NOW)

        assert intent.period_type == "day"
        assert intent.period_value is None

    async def test_classifies_from_fenced_json(self):
        llm = FakeLLMClient(
            {"intent": '```json\n{"isAnalysisRequest": true, "periodType": "week", "periodValue": 2}\n```'}
        )
        intent = await LLMIntentClassifier(llm).classify("2주 분석", NOW)

        assert intent.is_analysis_request is True
        assert intent.period_type == "week"
        assert intent.period_value == 2
        assert llm.purposes() == ["intent"]


class TestFallbackIntentClassifier:
    async def test_primary_result_used(self):
        primary = AsyncMock()
        primary.classify.return_value = Intent(topic="감정")
        classifier = FallbackIntentClassifier(primary=primary)

        intent = await classifier.classify("요즘 어때", NOW)

        assert intent.topic == "감정"

    @pytest.mark.parametrize(
        "reply",
        [LLMError("timeout"), "그런 거 몰라요", "[]"],
    )
    async def test_falls_back_to_keywords(self, reply):
        classifier = FallbackIntentClassifier(primary=LLMIntentClassifier(FakeLLMClient({"intent": reply})))

        intent = await classifier.classify("오늘 기록 분석해줘", NOW)

        assert intent.is_analysis_request is True
        assert intent.time_range == "today"


class TestDataNeedClassifier:
    async def test_true_reply(self):
        classifier = DataNeedClassifier(FakeLLMClient({"needs_data": '{"needsData": true}'}))
        assert await classifier.needs_data("10월 보여줘", Intent()) is True

    async def test_false_reply(self):
        classifier = DataNeedClassifier(FakeLLMClient({"needs_data": '{"needsData": false}'}))
        assert await classifier.needs_data("오늘 몇일이야?", Intent(needs_records=True)) is False

    async def test_sends_question_with_system_prompt(self):
        llm = FakeLLMClient({"needs_data": '{"needsData": false}'})
        await DataNeedClassifier(llm).needs_data("안녕", Intent())

        call = llm.calls[0]
        assert call["user_message"] == '질문: "안녕"'
        assert "needsData" in call["system"]

    @pytest.mark.parametrize(
        ("intent", "expected"),
        [
            (Intent(needs_records=True), True),
            (Intent(is_analysis_request=True), True),
            (Intent(), False),
        ],
    )
    async def test_failure_falls_back_to_intent_flags(self, intent, expected):
        classifier = DataNeedClassifier(FakeLLMClient({"needs_data": LLMError("down")}))
        assert await classifier.needs_data("아무거나", intent) is expected

    async def test_unparseable_reply_falls_back(self):
        classifier = DataNeedClassifier(FakeLLMClient({"needs_data": "네 필요해요"}))
        assert await classifier.needs_data("기록", Intent(needs_records=True)) is True

    @pytest.mark.parametrize(
        ("reply", "expected"),
        [
            ('{"needsData": "true"}', True),
            ('{"needsData": "false"}', False),
            ('{"needsData": 1}', True),
        ],
    )
    async def test_coercible_values_accepted(self, reply, expected):
        classifier = DataNeedClassifier(FakeLLMClient({"needs_data": reply}))
        assert await classifier.needs_data("오늘 기록 분석해줘", Intent()) is expected

    @pytest.mark.parametrize(
        "reply",
        ['{"answer": true}', '{"needsData": null}', '{"needsData": "아마도"}'],
    )
    async def test_missing_or_invalid_value_falls_back(self, reply):
        classifier = DataNeedClassifier(FakeLLMClient({"needs_data": reply}))
        intent = Intent(needs_records=True, is_analysis_request=True)
        assert await classifier.needs_data("오늘 기록 분석해줘", intent) is True
