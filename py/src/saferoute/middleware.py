from __future__ import annotations

from typing import Any

from saferoute.clock import Clock, RealClock, elapsed_ms
from saferoute.context import Middleware, MiddlewareArgs, Next
from saferoute.ids import IdGenerator, UuidIdGenerator
from saferoute.logger import StructuredLogger, get_logger
from saferoute.response import Response, normalize_response

REQUEST_ID_HEADER = "x-request-id"


def request_id_middleware(
    id_generator: IdGenerator | None = None,
    *,
    header: str = REQUEST_ID_HEADER,
) -> Middleware:
    """Adds ``request_id`` to the context and echoes it on the response."""
    ids = id_generator or UuidIdGenerator()
    header_name = str(header or "").strip().lower() or REQUEST_ID_HEADER

    async def mw(args: MiddlewareArgs, next_: Next) -> Response:
        request_id = args.request.header(header_name) or ids.new_id()
        resp = normalize_response(await next_(ctx={"request_id": request_id}))
        resp.headers[header_name] = [request_id]
        return resp

    return mw


def request_logging_middleware(
    logger: StructuredLogger | None = None,
    *,
    clock: Clock | None = None,
) -> Middleware:
    """Logs one ``request.completed`` record per invocation that reaches it."""
    clk = clock or RealClock()

    async def mw(args: MiddlewareArgs, next_: Next) -> Response:
        started = clk.now()
        resp = await next_()
        fields: dict[str, Any] = {
            "method": str(args.request.method or "").strip().upper(),
            "path": args.request.path,
            "status": int(resp.status),
            "duration_ms": elapsed_ms(clk, started),
        }
        request_id = args.get("request_id")
        if request_id:
            fields["request_id"] = str(request_id)

        log = logger or get_logger()
        if resp.status >= 500:
            log.error("request.completed", fields)
        elif resp.status >= 400:
            log.warn("request.completed", fields)
        else:
            log.info("request.completed", fields)
        return resp

    return mw
