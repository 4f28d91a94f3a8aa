"""Rule-based chart synthesis from mood records.

Chart type is chosen from keywords in the question; the shape of each chart
type is a fixed template. Nothing here raises: bad input yields the
"no data" descriptor.
"""

import logging
from collections import Counter
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any

from app.db.models import ChartType
from app.schemas.charts import ChartDescriptor

logger = logging.getLogger(__name__)

NO_CHART_DATA_MESSAGE = "해당 기간에 차트를 생성할 수 있는 데이터가 없습니다."
NO_VALID_CHART_DATA_MESSAGE = "해당 기간에 유효한 데이터가 없어서 차트를 생성할 수 없습니다."
UNKNOWN_EMOTION = "정보없음"

# First matching group wins
CHART_KEYWORDS: tuple[tuple[ChartType, tuple[str, ...]], ...] = (
    (ChartType.LINE, ("변화", "추이", "흐름", "패턴")),
    (ChartType.BAR, ("분포", "빈도", "얼마나", "몇번")),
    (ChartType.PIE, ("비율", "구성", "퍼센트", "비중")),
    (ChartType.RADAR, ("비교", "대조", "vs", "대비")),
)

CHART_TITLES = {
    ChartType.LINE: "주간 감정 변화 추이",
    ChartType.BAR: "월간 감정 분포",
    ChartType.PIE: "일일 감정 비율",
    ChartType.RADAR: "감정 비교 분석",
}

LINE_COLOR = "rgb(255, 99, 132)"
LINE_FILL = "rgba(255, 99, 132, 0.2)"
PALETTE = [
    "rgba(255, 99, 132, 0.8)",
    "rgba(54, 162, 235, 0.8)",
    "rgba(255, 205, 86, 0.8)",
    "rgba(75, 192, 192, 0.8)",
    "rgba(153, 102, 255, 0.8)",
]


def chart_options(chart_type: ChartType) -> dict[str, Any]:
    return {
        "responsive": True,
        "maintainAspectRatio": False,
        "plugins": {"title": {"display": True, "text": CHART_TITLES[chart_type]}},
    }


def select_chart_type(question: str) -> ChartType:
    """Chart type for a free-text question; line when nothing matches."""
    text = (question or "").lower()
    for chart_type, keywords in CHART_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return chart_type
    return ChartType.LINE


def parse_row_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def filter_valid_rows(rows: Sequence[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Rows that have a fatigue value and a real calendar date."""
    valid = []
    for row in rows:
        if not isinstance(row, Mapping) or not row.get("date") or not row.get("fatigue"):
            logger.warning("Chart: skipping row without date/fatigue: %s", row)
            continue
        if parse_row_date(row["date"]) is None:
            logger.warning("Chart: skipping row with invalid date: %s", row["date"])
            continue
        valid.append(row)
    return valid


def _emotion_counts(rows: Sequence[Mapping[str, Any]]) -> Counter:
    return Counter(row.get("emotion") or UNKNOWN_EMOTION for row in rows)


def _line_chart(rows: Sequence[Mapping[str, Any]]) -> ChartDescriptor:
    ordered = sorted(rows, key=lambda row: parse_row_date(row["date"]))
    return ChartDescriptor(
        type=ChartType.LINE.value,
        data={
            "labels": [parse_row_date(row["date"]).isoformat() for row in ordered],
            "datasets": [
                {
                    "label": "피로도",
                    "data": [row.get("fatigue") or 0 for row in ordered],
                    "borderColor": LINE_COLOR,
                    "backgroundColor": LINE_FILL,
                    "tension": 0.1,
                }
            ],
        },
        options=chart_options(ChartType.LINE),
    )


def _count_chart(rows: Sequence[Mapping[str, Any]], chart_type: ChartType) -> ChartDescriptor:
    counts = _emotion_counts(rows)
    dataset: dict[str, Any] = {"data": list(counts.values())}
    if chart_type is ChartType.RADAR:
        dataset.update(label="감정 빈도", borderColor=LINE_COLOR, backgroundColor=LINE_FILL)
    else:
        if chart_type is ChartType.BAR:
            dataset["label"] = "빈도"
        dataset["backgroundColor"] = PALETTE
    return ChartDescriptor(
        type=chart_type.value,
        data={"labels": list(counts.keys()), "datasets": [dataset]},
        options=chart_options(chart_type),
    )


def generate_chart_data(rows: Sequence[Mapping[str, Any]], chart_type: ChartType) -> ChartDescriptor:
    """Shape already-validated rows into the given chart type."""
    if not rows:
        return ChartDescriptor.empty(NO_CHART_DATA_MESSAGE)
    if chart_type is ChartType.LINE:
        return _line_chart(rows)
    if chart_type in (ChartType.BAR, ChartType.PIE, ChartType.RADAR):
        return _count_chart(rows, chart_type)
    return _line_chart(rows)


def generate_emotion_chart(rows: Sequence[Mapping[str, Any]] | None, question: str) -> ChartDescriptor:
    """
    Validate rows, pick a chart type from the question and build the chart.

    Args:
        rows: Record rows with date, fatigue and optional emotion
        question: The user's message

    Returns:
        A chart descriptor, or the no-data descriptor
    """
    if not rows:
        return ChartDescriptor.empty(NO_CHART_DATA_MESSAGE)

    valid = filter_valid_rows(rows)
    if not valid:
        return ChartDescriptor.empty(NO_VALID_CHART_DATA_MESSAGE)

    return generate_chart_data(valid, select_chart_type(question))
