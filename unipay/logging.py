from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping

from unipay.config import settings

# Record attributes copied into the JSON line when a call passes them via extra=
LOG_FIELDS = (
    "provider",
    "operation",
    "order_id",
    "reference_id",
    "status",
    "amount",
    "currency",
    "event",
    "context",
    "endpoint",
)


def to_jsonable(value: Any) -> Any:
    """Turn payment values (Decimal amounts, status enums, nested maps) into JSON types."""
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(item) for item in value]
    return value


class JsonFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message and payment fields."""

    def __init__(self, fields: tuple[str, ...] = LOG_FIELDS) -> None:
        super().__init__()
        self.fields = fields

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            {name: to_jsonable(getattr(record, name)) for name in self.fields if hasattr(record, name)}
        )
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: int | None = None) -> None:
    """Route the root logger through :class:`JsonFormatter`.

    The level defaults to DEBUG when ``settings.debug`` is set, INFO otherwise.
    Calling it again does not stack a second JSON handler.
    """
    if level is None:
        level = logging.DEBUG if settings.debug else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)
    if any(isinstance(h.formatter, JsonFormatter) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
