from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StructuredLogger(Protocol):
    def debug(self, message: str, *fields: dict[str, Any]) -> None: ...

    def info(self, message: str, *fields: dict[str, Any]) -> None: ...

    def warn(self, message: str, *fields: dict[str, Any]) -> None: ...

    def error(self, message: str, *fields: dict[str, Any]) -> None: ...

    def with_field(self, key: str, value: Any) -> StructuredLogger: ...

    def with_fields(self, fields: dict[str, Any]) -> StructuredLogger: ...

    def with_request_id(self, request_id: str) -> StructuredLogger: ...


class NoOpLogger:
    def debug(self, _message: str, *fields: dict[str, Any]) -> None:
        return None

    def info(self, _message: str, *fields: dict[str, Any]) -> None:
        return None

    def warn(self, _message: str, *fields: dict[str, Any]) -> None:
        return None

    def error(self, _message: str, *fields: dict[str, Any]) -> None:
        return None

    def with_field(self, _key: str, _value: Any) -> StructuredLogger:
        return self

    def with_fields(self, _fields: dict[str, Any]) -> StructuredLogger:
        return self

    def with_request_id(self, _request_id: str) -> StructuredLogger:
        return self


class StdlibLogger:
    """Forwards structured events to a :mod:`logging` logger.

    Bound and per-call fields are merged (per-call wins) and attached to the
    record as ``extra={"fields": ...}``.
    """

    def __init__(self, logger: logging.Logger | str | None = None, *, fields: dict[str, Any] | None = None) -> None:
        if isinstance(logger, logging.Logger):
            self._logger = logger
        else:
            self._logger = logging.getLogger(logger or "saferoute")
        self._fields = dict(fields or {})

    def _emit(self, level: int, message: str, fields: tuple[dict[str, Any], ...]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        merged = dict(self._fields)
        for extra in fields:
            merged.update(extra or {})
        self._logger.log(level, message, extra={"fields": merged})

    def debug(self, message: str, *fields: dict[str, Any]) -> None:
        self._emit(logging.DEBUG, message, fields)

    def info(self, message: str, *fields: dict[str, Any]) -> None:
        self._emit(logging.INFO, message, fields)

    def warn(self, message: str, *fields: dict[str, Any]) -> None:
        self._emit(logging.WARNING, message, fields)

    def error(self, message: str, *fields: dict[str, Any]) -> None:
        self._emit(logging.ERROR, message, fields)

    def with_field(self, key: str, value: Any) -> StructuredLogger:
        return self.with_fields({key: value})

    def with_fields(self, fields: dict[str, Any]) -> StructuredLogger:
        return StdlibLogger(self._logger, fields={**self._fields, **dict(fields or {})})

    def with_request_id(self, request_id: str) -> StructuredLogger:
        return self.with_field("request_id", str(request_id))


_global_logger: StructuredLogger = NoOpLogger()


def get_logger() -> StructuredLogger:
    return _global_logger


def set_logger(logger: StructuredLogger | None) -> None:
    global _global_logger
    _global_logger = logger if logger is not None else NoOpLogger()


__all__ = [
    "NoOpLogger",
    "StdlibLogger",
    "StructuredLogger",
    "get_logger",
    "set_logger",
]
