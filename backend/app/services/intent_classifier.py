"""Intent classification for chat messages.

Two interchangeable classifiers produce an Intent: one backed by the
language model and a deterministic keyword scan. FallbackIntentClassifier
runs the first and drops to the second on any failure, so classification
never fails a request.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from pydantic import ValidationError

from app.config import get_settings
from app.schemas.intent import DataNeed, Intent
from app.services.llm import LLMClient, LLMError, llm_client

logger = logging.getLogger(__name__)
settings = get_settings()

_LEADING_FENCE = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```\s*$")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str) -> dict:
    """
    Pull the JSON object out of a model reply.

    Strips a leading/trailing code fence, then parses the span from the
    first ``{`` to the last ``}``.

    Raises:
        ValueError: If no object is found or it does not parse
    """
    cleaned = _TRAILING_FENCE.sub("", _LEADING_FENCE.sub("", text))
    match = _JSON_OBJECT.search(cleaned)
    if match is None:
        raise ValueError("No JSON object in model reply")
    parsed = json.loads(match.group(0).strip())
    if not isinstance(parsed, dict):
        raise ValueError("Model reply is not a JSON object")
    return parsed


class IntentClassifier(ABC):
    """Turns a message into an Intent."""

    @abstractmethod
    async def classify(self, message: str, now: datetime) -> Intent:
        ...


class KeywordIntentClassifier(IntentClassifier):
    """Deterministic keyword scan. Always returns a complete Intent."""

    ANALYSIS_WORDS = ("분석", "차트", "그래프")
    RECORD_WORDS = ("기록", "데이터")
    TODAY_WORDS = ("오늘", "today")
    YESTERDAY_WORDS = ("어제", "yesterday")
    WEEK_WORDS = ("주", "week")
    MONTH_WORDS = ("달", "월", "month")
    FEELING_WORD = "기분"

    def analyze(self, message: str) -> Intent:
        text = message.lower()

        def has(words: tuple[str, ...]) -> bool:
            return any(word in text for word in words)

        has_analysis = has(self.ANALYSIS_WORDS)
        has_records = has(self.RECORD_WORDS)

        if has(self.TODAY_WORDS):
            time_range = "today"
        elif has(self.YESTERDAY_WORDS):
            time_range = "yesterday"
        elif has(self.WEEK_WORDS):
            time_range = "last_week"
        elif has(self.MONTH_WORDS):
            time_range = "last_month"
        else:
            time_range = "recent"

        if has_analysis:
            topic = "분석"
        elif has_records:
            topic = "기록"
        else:
            topic = None

        return Intent(
            is_analysis_request=has_analysis,
            needs_records=has_records or has_analysis,
            needs_chat_history=not has_analysis and not has_records,
            needs_chart=has_analysis,
            is_simple_greeting=not has_records and not has_analysis and self.FEELING_WORD not in text,
            time_range=time_range,
            topic=topic,
            analysis_type="specific" if has_analysis else None,
        )

    async def classify(self, message: str, now: datetime) -> Intent:
        return self.analyze(message)


INTENT_PROMPT = """사용자 메시지를 분석해서 의도를 파악해주세요.

**현재 날짜 정보:**
- 오늘: {today} ({year}년 {month}월 {day}일)
- 현재 년도: {year}

메시지: "{message}"

다음 JSON 형식으로만 답변해주세요:
{{
  "isAnalysisRequest": true/false,
  "needsRecords": true/false,
  "needsChatHistory": true/false,
  "needsChart": true/false,
  "isSimpleGreeting": true/false,
  "timeRange": "today|yesterday|last_week|last_month|recent|custom",
  "topic": "감정|분석|대화|기분|아이|피로|기록|null",
  "analysisType": "period|custom|specific",
  "periodType": "day|week|month|year",
  "periodValue": 숫자,
  "fromDate": "YYYY-MM-DD",
  "toDate": "YYYY-MM-DD"
}}

구분 기준:
- "분석해줘", "보여줘", "차트", "그래프", "트렌드", "패턴", "시간대별", "시간별", "확인", "조회", "알려줘" → isAnalysisRequest: true, needsChart: true
- "어떻게 지냈어?", "기분이 안 좋아", "안녕" 같은 대화 → isAnalysisRequest: false, needsChart: false

기간 표현 (오늘 {today} 기준):
- "X일동안/X일간" → periodType: "day", periodValue: X
- "X주동안/X주간" → periodType: "day", periodValue: X*7
- "X개월동안/X달동안/한달동안" → periodType: "day", periodValue: X*30
- "X년동안/X년간" → periodType: "day", periodValue: X*365
- 특정 월 언급 → analysisType: "custom", 현재 년도의 해당 월 1일~말일
- "오늘" → timeRange: "today", "어제" → timeRange: "yesterday" (날짜 계산은 하지 마세요)

과거 표현 (analysisType: "custom", timeRange: "custom", isAnalysisRequest: true, needsChart: true):
- "저번에", "근래에", "최근에", "이전에", "과거에", "지난번에", "얼마 전에", "요전에", "전에" → 과거 기록 참조
- "저번에 ~했을 때는", "이전에는", "과거에는" → 과거 기록 참조
- 과거 기록과 현재 상황 비교 ("과거에 비해 달라진 점") → 과거 기록 참조
- "저번에" → fromDate: {ago_7}, toDate: {ago_3}
- "근래에" → fromDate: {ago_14}, toDate: {ago_1}
- "최근에" → fromDate: {ago_5}, toDate: {ago_1}
- "이전에", "과거에" → fromDate: {ago_28}, toDate: {ago_7}
- "지난번에" → fromDate: {ago_14}, toDate: {ago_7}

모든 기간은 오늘({today})을 기준으로 계산하세요."""


class LLMIntentClassifier(IntentClassifier):
    """Asks the language model for a JSON intent and validates it."""

    def __init__(self, client: LLMClient | None = None):
        self.client = client or llm_client

    def build_prompt(self, message: str, now: datetime) -> str:
        today = now.date()

        def ago(days: int) -> str:
            return (today - timedelta(days=days)).isoformat()

        return INTENT_PROMPT.format(
            today=today.isoformat(),
            year=today.strftime("%Y"),
            month=today.strftime("%m"),
            day=today.strftime("%d"),
            message=message,
            ago_1=ago(1),
            ago_3=ago(3),
            ago_5=ago(5),
            ago_7=ago(7),
            ago_14=ago(14),
            ago_28=ago(28),
        )

    async def classify(self, message: str, now: datetime) -> Intent:
        """
        Raises:
            LLMError: The model call failed
            ValueError: The reply held no valid intent object
        """
        reply = await self.client.complete(
            self.build_prompt(message, now),
            max_tokens=settings.llm_intent_max_tokens,
            temperature=settings.llm_intent_temperature,
            purpose="intent",
        )
        return Intent.model_validate(extract_json_object(reply))


class FallbackIntentClassifier(IntentClassifier):
    """Primary classifier with a total keyword fallback."""

    def __init__(
        self,
        primary: IntentClassifier | None = None,
        fallback: KeywordIntentClassifier | None = None,
    ):
        self.primary = primary or LLMIntentClassifier()
        self.fallback = fallback or KeywordIntentClassifier()

    async def classify(self, message: str, now: datetime) -> Intent:
        try:
            intent = await self.primary.classify(message, now)
        except (LLMError, ValidationError, ValueError) as e:
            logger.warning("Intent classification fell back to keywords: %s", e)
            return await self.fallback.classify(message, now)
        logger.info("Intent classified: %s", intent.model_dump(exclude_none=True))
        return intent


NEEDS_DATA_PROMPT = """사용자 질문을 보고 데이터베이스(부모의 피곤함/감정 기록) 조회가 필요한지 판단해주세요.

데이터 조회 필요:
- "오늘 기록 분석해줘", "10월 보여줘", "어제 피곤함은?", "이번 주 패턴은?"
- 기록, 분석, 차트, 데이터, 피곤함, 감정 추이에 관한 질문

데이터 조회 불필요:
- "오늘 몇일이야?", "안녕하세요", "고마워", "날씨는?", "지금 몇시야?"
- 일반 대화, 날짜/시간 질문, 인사

JSON 형식으로만 답변: {"needsData": true/false}"""


class DataNeedClassifier:
    """Decides whether answering requires a records lookup."""

    def __init__(self, client: LLMClient | None = None):
        self.client = client or llm_client

    async def needs_data(self, message: str, intent: Intent) -> bool:
        try:
            reply = await self.client.complete(
                f'질문: "{message}"',
                system=NEEDS_DATA_PROMPT,
                max_tokens=settings.llm_needs_data_max_tokens,
                temperature=settings.llm_intent_temperature,
                purpose="needs_data",
            )
            return DataNeed.model_validate(extract_json_object(reply)).needs_data
        except (LLMError, ValidationError, ValueError) as e:
            logger.warning("Needs-data check fell back to intent flags: %s", e)
            return intent.needs_records or intent.is_analysis_request


# Singleton instances
intent_classifier = FallbackIntentClassifier()
data_need_classifier = DataNeedClassifier()
