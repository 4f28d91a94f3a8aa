"""Natural-language replies: direct conversation and record analysis."""

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from app.config import get_settings
from app.services.clock import korean_weekday
from app.services.llm import LLMClient, LLMError, llm_client

logger = logging.getLogger(__name__)
settings = get_settings()

NO_RECORDS_REPLY = "해당 기간에 기록이 없습니다. 먼저 기록을 추가해주세요."
DIRECT_REPLY_FALLBACK = "죄송하지만 다시 시도해 주시면 감사하겠습니다."
ANALYSIS_FALLBACK = "분석을 생성할 수 없습니다."

# (minimum score, label) on the 1-10 scale, highest first
FATIGUE_LEVELS = (
    (9, "극도로 피곤"),
    (7, "매우 피곤"),
    (5, "보통 피곤"),
    (3, "약간 피곤"),
)
FATIGUE_LOWEST_LABEL = "전혀 안 피곤"
FATIGUE_MISSING_LABEL = "점수 없음"

PERSONA = "너는 한국어로 답하는 따뜻한 부모 상담 AI야."

DIRECT_SYSTEM_PROMPT = """{persona} 간단한 질문에 친근하게 답변해줘.

**현재 정보:**
- 오늘 날짜: {date}
- 현재 시간: {time}
- 요일: {weekday}

날짜나 시간 관련 질문이면 위 정보를 사용해서 정확하게 답변해줘."""

ANALYSIS_SYSTEM_PROMPT = f"""{PERSONA} 항상 한국어만 사용하고, 영어 등급이나 내부 코드 라벨은 쓰지 마.
사용자는 일반 부모이거나 자폐/발달장애/ADHD 등 특별한 필요가 있는 아동의 부모일 수 있어.
피곤함 점수는 1~10이고 숫자가 클수록 더 피곤해(1=전혀, 10=극도로).
부모님의 노고를 인정하고 격려하며, 실용적인 조언을 제공해줘.

**절대 금지 사항:**
- 제공된 기록에 없는 데이터나 기록을 절대 만들어내지 마.
- 추측이나 가정으로 데이터를 생성하지 마.
- 제공된 기록만 사용하고, 없는 내용은 없다고 분명히 말해.
- "아마도", "추정으로는" 같은 표현으로 없는 정보를 만들지 마."""

ANALYSIS_USER_PROMPT = """다음은 부모의 피곤함 기록(1~10, 높을수록 피곤)입니다:
{records}

요구사항:
- 1문장 요약
- 관찰된 패턴 2~3개 (증가/감소/반복 시점, 주말/평일 차이 등)
- 실행 계획 3가지 (아동 지원 2개, 부모 자기돌봄 1개: 작게 시작)
- 격려와 응원 메시지"""


def fatigue_label(score: Any) -> str:
    """Qualitative label for a 1-10 fatigue score."""
    try:
        value = float(score)
    except (TypeError, ValueError):
        return FATIGUE_MISSING_LABEL
    for minimum, label in FATIGUE_LEVELS:
        if value >= minimum:
            return label
    return FATIGUE_LOWEST_LABEL


def _format_score(score: Any) -> str:
    if isinstance(score, float) and score.is_integer():
        return str(int(score))
    return str(score) if score is not None else "-"


def format_record_line(row: Mapping[str, Any]) -> str:
    """One descriptive line per record, e.g. ``2025-10-01: 피곤함 7점(매우 피곤) (메모) | 감정: 불안``."""
    score = row.get("fatigue")
    notes = (row.get("notes") or "").strip() or "기록 없음"
    line = f"{row.get('date')}: 피곤함 {_format_score(score)}점({fatigue_label(score)}) ({notes})"
    if row.get("emotion"):
        line += f" | 감정: {row['emotion']}"
    return line


def format_records(rows: Sequence[Mapping[str, Any]]) -> str:
    ordered = sorted(rows, key=lambda row: str(row.get("date") or ""))
    return "\n".join(format_record_line(row) for row in ordered)


class ResponseComposer:
    """Builds reply text with the language model, falling back to fixed texts."""

    def __init__(self, client: LLMClient | None = None):
        self.client = client or llm_client

    def direct_system_prompt(self, now: datetime) -> str:
        return DIRECT_SYSTEM_PROMPT.format(
            persona=PERSONA,
            date=now.strftime("%Y년 %m월 %d일"),
            time=now.strftime("%H:%M"),
            weekday=korean_weekday(now),
        )

    async def reply_directly(self, message: str, now: datetime) -> str:
        """Conversational answer that needs no stored records."""
        try:
            return await self.client.complete(
                message,
                system=self.direct_system_prompt(now),
                max_tokens=settings.llm_reply_max_tokens,
                temperature=settings.llm_reply_temperature,
                purpose="reply",
            )
        except LLMError:
            logger.exception("Direct reply generation failed")
            return DIRECT_REPLY_FALLBACK

    async def analyze_records(self, rows: Sequence[Mapping[str, Any]]) -> str:
        """
        Analysis of the given records.

        Never called with an empty sequence; the caller answers
        NO_RECORDS_REPLY itself without contacting the model.
        """
        try:
            return await self.client.complete(
                ANALYSIS_USER_PROMPT.format(records=format_records(rows)),
                system=ANALYSIS_SYSTEM_PROMPT,
                max_tokens=settings.llm_analysis_max_tokens,
                temperature=settings.llm_analysis_temperature,
                purpose="analysis",
            )
        except LLMError:
            logger.exception("Record analysis failed")
            return ANALYSIS_FALLBACK


# Singleton instance
response_composer = ResponseComposer()
