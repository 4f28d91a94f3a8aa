"""Chart descriptor returned with analysis answers."""

from typing import Any, Literal

from app.schemas.base import CamelSchema


class ChartDescriptor(CamelSchema):
    """Chart.js-style descriptor rendered by the mobile client."""

    type: Literal["line", "bar", "pie", "radar", "message"]
    data: dict[str, Any] | None = None
    options: dict[str, Any] | None = None
    message: str | None = None
    no_data: bool = False

    @classmethod
    def empty(cls, message: str) -> "ChartDescriptor":
        """Descriptor shown instead of a chart when there is nothing to plot."""
        return cls(type="message", message=message, no_data=True)
