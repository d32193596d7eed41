from __future__ import annotations

import json
import logging
import re
import traceback
from typing import Any

_DEFAULT_LOGGER_NAME = "autoshutdown.observability"


class LogManager:
    """Structured logging sink: one JSON event line per call."""

    def __init__(self, logger_name: str = _DEFAULT_LOGGER_NAME) -> None:
        self._logger = logging.getLogger(logger_name)

    def emit(
        self,
        *,
        level: str = "info",
        event: str,
        message: str | None = None,
        component: str | None = None,
        status: str | None = None,
        error_code: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        normalized_level = str(level or "info").lower()
        event_payload: dict[str, Any] = {
            "level": normalized_level,
            "event": str(event or "unknown_event"),
            "component": component,
            "status": status,
            "error_code": error_code,
            "message": message,
        }
        if isinstance(payload, dict) and payload:
            event_payload.update(payload)
        self._log_text_line(level=normalized_level, payload=event_payload)

    def emit_exception(
        self,
        *,
        event: str,
        exc: BaseException,
        message: str | None = None,
        component: str | None = None,
        status: str | None = None,
        error_code: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        merged_payload = dict(payload or {})
        merged_payload.update(
            {
                "exception_type": type(exc).__name__,
                "exception_message": str(exc),
                "stack_excerpt": "".join(
                    traceback.format_exception(type(exc), exc, exc.__traceback__, limit=10)
                ),
            }
        )
        self.emit(
            level="error",
            event=event,
            message=message or str(exc),
            component=component,
            status=status,
            error_code=error_code or type(exc).__name__,
            payload=merged_payload,
        )

    def _log_text_line(self, *, level: str, payload: dict[str, Any]) -> None:
        line = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)
        if level in {"warning", "warn"}:
            self._logger.warning("event %s", line)
        elif level == "error":
            self._logger.error("event %s", line)
        else:
            self._logger.info("event %s", line)


class StructuredLoggerAdapter:
    """Logger-style adapter that writes via LogManager.

    ``key=value`` pairs in the formatted message and the ``extra`` mapping
    become structured fields of the event.
    """

    def __init__(self, *, manager: LogManager, component: str) -> None:
        self._manager = manager
        self._component = component

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._emit(level="info", msg=msg, args=args, kwargs=kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._emit(level="warning", msg=msg, args=args, kwargs=kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._emit(level="error", msg=msg, args=args, kwargs=kwargs)

    def exception(self, msg: str, *args: Any, exc_info: BaseException, **kwargs: Any) -> None:
        text = self._format(msg, args)
        context = self._extract_context(text=text, kwargs=kwargs)
        self._manager.emit_exception(
            event=context["event"],
            exc=exc_info,
            component=self._component,
            status=context["status"],
            error_code=context["error_code"],
            message=text,
            payload=context["payload"],
        )

    def _emit(self, *, level: str, msg: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        text = self._format(msg, args)
        context = self._extract_context(text=text, kwargs=kwargs)
        self._manager.emit(
            level=level,
            event=context["event"],
            component=self._component,
            status=context["status"],
            error_code=context["error_code"],
            message=text,
            payload=context["payload"],
        )

    @staticmethod
    def _format(msg: str, args: tuple[Any, ...]) -> str:
        if not args:
            return str(msg)
        try:
            return str(msg) % args
        except (TypeError, ValueError):
            arg_text = ", ".join(str(v) for v in args)
            return f"{msg} | args={arg_text}"

    def _extract_context(self, *, text: str, kwargs: dict[str, Any]) -> dict[str, Any]:
        extra = kwargs.get("extra")
        extra_map = extra if isinstance(extra, dict) else {}
        merged: dict[str, Any] = {**_extract_kv_pairs(text), **extra_map}
        event = str(merged.pop("event", None) or f"{self._component}.log")
        status = _as_text_or_none(merged.pop("status", None))
        error_code = _as_text_or_none(merged.pop("error_code", None))
        return {
            "event": event,
            "status": status,
            "error_code": error_code,
            "payload": {"fields": merged} if merged else {},
        }


_DEFAULT_MANAGER: LogManager | None = None


def get_log_manager() -> LogManager:
    global _DEFAULT_MANAGER
    if _DEFAULT_MANAGER is None:
        _DEFAULT_MANAGER = LogManager()
    return _DEFAULT_MANAGER


def get_component_logger(component: str) -> StructuredLoggerAdapter:
    return StructuredLoggerAdapter(manager=get_log_manager(), component=component)


_KEY_VALUE_PATTERN = re.compile(r"([A-Za-z_][A-Za-z0-9_.-]*)=([^\s]+)")


def _extract_kv_pairs(text: str) -> dict[str, str]:
    result: dict[str, str] = {}
    for key, raw_value in _KEY_VALUE_PATTERN.findall(str(text or "")):
        value = raw_value.strip().strip(",")
        if value.startswith(("'", '"')) and value.endswith(("'", '"')) and len(value) >= 2:
            value = value[1:-1]
        result[key] = value
    return result


def _as_text_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
