"""Usage analytics.

Data points follow a blobs/doubles/indexes shape. The default sink writes each
point as one line on the nomoji.analytics logger; tracking never raises.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Protocol

from nomoji.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class DataPoint:
    blobs: list[str] = field(default_factory=list)
    doubles: list[float] = field(default_factory=list)
    indexes: list[str] = field(default_factory=list)


class AnalyticsSink(Protocol):
    def write_data_point(self, point: DataPoint) -> None: ...


class LoggingAnalyticsSink:
    """Writes data points as JSON to the nomoji.analytics logger."""

    def __init__(self, logger_name: str = "nomoji.analytics") -> None:
        self._logger = logging.getLogger(logger_name)

    def write_data_point(self, point: DataPoint) -> None:
        self._logger.info("%s", json.dumps(asdict(point), ensure_ascii=False))


class Analytics:
    """Tracking facade over a sink. Disabled analytics make every call a no-op."""

    def __init__(self, sink: AnalyticsSink | None = None, enabled: bool | None = None) -> None:
        self.sink = sink if sink is not None else LoggingAnalyticsSink()
        self.enabled = get_settings().analytics_enabled if enabled is None else enabled

    def _write(self, point: DataPoint) -> None:
        if not self.enabled:
            return
        try:
            self.sink.write_data_point(point)
        except Exception:
            logger.exception("Failed to write analytics: index=%s", point.indexes)

    def track_request(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        duration_ms: float,
        user_id: str | None = None,
        user_agent: str | None = None,
        country: str | None = None,
    ) -> None:
        self._write(
            DataPoint(
                blobs=[
                    endpoint,
                    method,
                    user_id or "anonymous",
                    user_agent or "unknown",
                    country or "unknown",
                ],
                doubles=[status_code, duration_ms],
                indexes=[endpoint],
            )
        )

    def track_config_change(self, user_id: str, action: str, preset: str | None = None) -> None:
        """action is one of create, update, delete."""
        self._write(
            DataPoint(
                blobs=["config_change", action, user_id, preset or "custom"],
                indexes=["config_change"],
            )
        )

    def track_analysis(self, has_emojis: bool, emoji_count: int, text_length: int) -> None:
        self._write(
            DataPoint(
                blobs=["emoji_analysis", "has_emojis" if has_emojis else "clean"],
                doubles=[emoji_count, text_length],
                indexes=["emoji_analysis"],
            )
        )

    def track_error(self, endpoint: str, error: str, status_code: int) -> None:
        self._write(
            DataPoint(
                blobs=["error", endpoint, error],
                doubles=[status_code],
                indexes=["error"],
            )
        )


def get_analytics() -> Analytics:
    """Dependency for FastAPI to get the analytics facade."""
    return Analytics()
