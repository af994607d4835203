from __future__ import annotations

import datetime as dt
import json as jsonlib
from dataclasses import dataclass, field
from typing import Any

from saferoute.builder import RouteHandlerBuilder, create_route
from saferoute.clock import ManualClock
from saferoute.context import Middleware
from saferoute.ids import SequenceIdGenerator
from saferoute.logger import NoOpLogger
from saferoute.middleware import request_id_middleware, request_logging_middleware
from saferoute.pipeline import RawParamsSource, RouteHandler
from saferoute.request import Request, build_request
from saferoute.response import Response


@dataclass(slots=True)
class LogEntry:
    level: str
    message: str
    fields: dict[str, Any]


class RecordingLogger(NoOpLogger):
    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    def _record(self, level: str, message: str, fields: tuple[dict[str, Any], ...]) -> None:
        merged: dict[str, Any] = {}
        for extra in fields:
            merged.update(extra or {})
        self.entries.append(LogEntry(level=level, message=message, fields=merged))

    def debug(self, message: str, *fields: dict[str, Any]) -> None:
        self._record("debug", message, fields)

    def info(self, message: str, *fields: dict[str, Any]) -> None:
        self._record("info", message, fields)

    def warn(self, message: str, *fields: dict[str, Any]) -> None:
        self._record("warn", message, fields)

    def error(self, message: str, *fields: dict[str, Any]) -> None:
        self._record("error", message, fields)

    def messages(self, level: str | None = None) -> list[str]:
        return [e.message for e in self.entries if level is None or e.level == level]


@dataclass(slots=True)
class TestEnv:
    """Deterministic ids, a manual clock and a recording logger for route tests.

    Builders from ``route()`` and the stock middleware from ``request_id()`` /
    ``request_logging()`` are wired to this environment's collaborators.
    """

    __test__ = False

    ids: SequenceIdGenerator = field(default_factory=SequenceIdGenerator)
    logger: RecordingLogger = field(default_factory=RecordingLogger)
    clock: ManualClock = field(default_factory=ManualClock)

    def route(self, **options: Any) -> RouteHandlerBuilder:
        options.setdefault("logger", self.logger)
        return create_route(**options)

    def request_id(self, *, header: str = "x-request-id") -> Middleware:
        return request_id_middleware(self.ids, header=header)

    def request_logging(self) -> Middleware:
        return request_logging_middleware(self.logger, clock=self.clock)

    def request(
        self,
        method: str,
        url: str = "/",
        *,
        headers: dict[str, object] | None = None,
        body: object = b"",
        json_body: Any = None,
    ) -> Request:
        return build_request(method, url, headers=headers, body=body, json_body=json_body)

    def invoke(self, route: RouteHandler, request: Request, *, params: RawParamsSource = None) -> Response:
        return route.invoke(request, params=params)


def create_test_env(*, id_prefix: str = "req", now: dt.datetime | None = None) -> TestEnv:
    return TestEnv(ids=SequenceIdGenerator(prefix=id_prefix), clock=ManualClock(now))


def response_json(resp: Response) -> Any:
    if not resp.body:
        return None
    return jsonlib.loads(bytes(resp.body).decode("utf-8"))
