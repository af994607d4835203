from __future__ import annotations

from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from saferoute.request import Request
from saferoute.response import Response


@dataclass(slots=True, frozen=True)
class HandlerArgs:
    params: Any
    query: Any
    body: Any
    ctx: Mapping[str, Any]
    metadata: Any = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.ctx.get(key, default)


@dataclass(slots=True, frozen=True)
class MiddlewareArgs:
    request: Request
    params: Any
    query: Any
    body: Any
    ctx: Mapping[str, Any]
    metadata: Any = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.ctx.get(key, default)


class Next(Protocol):
    def __call__(self, *, ctx: Mapping[str, Any] | None = None) -> Awaitable[Response]: ...


Middleware = Callable[[MiddlewareArgs, Next], Any]
Handler = Callable[[Request, HandlerArgs], Any]
FormDataDecoder = Callable[[list[tuple[str, Any]]], Any]
