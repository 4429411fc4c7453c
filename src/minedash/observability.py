"""Observability helpers for structured logging."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from minedash.settings import Settings, get_settings

_LOGGER = logging.getLogger("minedash.observability")


class Observability:
    """Emit structured log events tagged with the emitting component."""

    def __init__(
        self,
        *,
        settings: Settings,
        component: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings
        self.component = component or "core"
        self._logger = logger or _LOGGER
        self._structured_logging = bool(settings.observability.structured_logging)

    def emit_event(self, event: str, **fields: Any) -> None:
        """Emit a structured log if enabled."""

        payload = {
            "event": event,
            "component": self.component,
            "service": self.settings.observability.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **_sanitize_dict(fields),
        }
        if self._structured_logging:
            message = json.dumps(payload, default=_serialize)
            self._logger.info(message)
        else:
            self._logger.info("%s | %s", event, payload)


def get_observability(*, component: str | None = None, settings: Settings | None = None) -> Observability:
    """Return an :class:`Observability` instance for the requested component."""

    resolved = settings or get_settings()
    return Observability(settings=resolved, component=component, logger=_LOGGER)


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured log level to the ``minedash`` logger tree."""

    resolved = settings or get_settings()
    level = logging.getLevelName(resolved.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.getLogger("minedash").setLevel(level)


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------


def _serialize(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _serialize(val) for key, val in value.items()}
    return str(value)


def _sanitize_dict(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    sanitized: dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, Mapping):
            sanitized[str(key)] = _sanitize_dict(value)
        else:
            sanitized[str(key)] = value
    return sanitized


__all__ = ["Observability", "configure_logging", "get_observability"]
