from __future__ import annotations

import asyncio
import inspect
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from saferoute.config import NO_BODY_METHODS, RouteConfig
from saferoute.context import Handler, HandlerArgs, MiddlewareArgs
from saferoute.errors import ValidationFailed, internal_error_response, validation_error_response
from saferoute.logger import StructuredLogger, get_logger
from saferoute.request import Request
from saferoute.response import Response, empty, is_response, json
from saferoute.util import is_form_content_type
from saferoute.validation import Validator

RawParamsSource = Any


class RouteHandler:
    """A configured route: validation, middleware chain and handler in one callable.

    Calling it never raises for ordinary failures. Validation failures become
    400 responses, anything else goes through the error translator (or the
    generic 500 when none is configured).
    """

    __slots__ = ("config", "fn")

    def __init__(self, config: RouteConfig, fn: Handler) -> None:
        self.config = config
        self.fn = fn

    async def __call__(self, request: Request, *, params: RawParamsSource = None) -> Response:
        logger = self.config.logger or get_logger()
        method = str(request.method or "").strip().upper()
        try:
            invocation = await self._prepare(request, method, params, logger)
        except Exception as exc:  # noqa: BLE001
            return await self.response_for_error(exc, method, logger)
        return await invocation.step(0, {})

    def invoke(self, request: Request, *, params: RawParamsSource = None) -> Response:
        return asyncio.run(self(request, params=params))

    async def _prepare(
        self,
        request: Request,
        method: str,
        raw_params_source: RawParamsSource,
        logger: StructuredLogger,
    ) -> _Invocation:
        cfg = self.config

        params = await _resolve_params(raw_params_source)
        query: Any = request.query()
        body: Any = {}
        decode_error: Exception | None = None
        reads_body = method not in NO_BODY_METHODS
        if reads_body:
            try:
                body = await self._decode_body(request)
            except Exception as exc:  # noqa: BLE001
                decode_error = exc
                body = {}

        if cfg.params_validator is not None:
            params = await _validate(cfg.params_validator, params, "Invalid params")

        if cfg.query_validator is not None:
            query = await _validate(cfg.query_validator, query, "Invalid query")

        if decode_error is not None:
            if cfg.body_validator is not None:
                raise ValidationFailed(
                    "Invalid body",
                    [{"type": "decode_error", "loc": [], "msg": str(decode_error)}],
                ) from decode_error
            logger.debug(
                "route.body_decode_failed",
                {"method": method, "error_type": type(decode_error).__name__},
            )

        if reads_body and cfg.body_validator is not None:
            body = await _validate(cfg.body_validator, body, "Invalid body")

        metadata = cfg.metadata_value
        if cfg.metadata_validator is not None and metadata is not None:
            metadata = await _validate(cfg.metadata_validator, metadata, "Invalid metadata")

        return _Invocation(
            route=self,
            request=request,
            method=method,
            params=params,
            query=query,
            body=body,
            metadata=metadata,
            logger=logger,
        )

    async def _decode_body(self, request: Request) -> Any:
        if is_form_content_type(request.content_type):
            entries = await request.form()
            decoder = self.config.form_data_decoder
            if decoder is not None:
                return await _resolve(decoder(entries))
            return dict(entries)
        return await request.json()

    def normalize(self, method: str, result: Any) -> Response:
        status = self.config.status_for_method(method)
        if status == 204:
            return empty(204)
        return json(status, result)

    async def response_for_error(self, exc: Exception, method: str, logger: StructuredLogger) -> Response:
        if isinstance(exc, ValidationFailed):
            logger.debug(
                "route.validation_failed",
                {"method": method, "message": exc.message, "issues": len(exc.issues)},
            )
            return validation_error_response(exc)

        logger.error("route.unhandled_error", {"method": method, "error_type": type(exc).__name__})

        translator = self.config.error_translator
        if translator is None:
            return internal_error_response()

        try:
            resp = await _resolve(translator(exc))
        except Exception as translate_exc:  # noqa: BLE001
            logger.error(
                "route.error_translator_failed",
                {"method": method, "error_type": type(translate_exc).__name__},
            )
            return internal_error_response()

        if not is_response(resp):
            logger.error(
                "route.error_translator_failed",
                {"method": method, "error_type": "InvalidTranslatorResult"},
            )
            return internal_error_response()
        return resp


@dataclass(slots=True)
class _Invocation:
    route: RouteHandler
    request: Request
    method: str
    params: Any
    query: Any
    body: Any
    metadata: Any
    logger: StructuredLogger

    async def step(self, index: int, current: dict[str, Any]) -> Response:
        middlewares = self.route.config.middlewares
        if index >= len(middlewares):
            return await self._terminal(current)

        called = False
        downstream: Response | None = None

        async def next_(*, ctx: Mapping[str, Any] | None = None) -> Response:
            nonlocal called, downstream
            called = True
            merged = {**current, **dict(ctx or {})}
            downstream = await self.step(index + 1, merged)
            return downstream

        args = MiddlewareArgs(
            request=self.request,
            params=self.params,
            query=self.query,
            body=self.body,
            ctx=MappingProxyType(dict(current)),
            metadata=self.metadata,
        )
        try:
            out = await _resolve(middlewares[index](args, next_))
            if is_response(out):
                return out
            if out is None and called and downstream is not None:
                return downstream
            return self.route.normalize(self.method, out)
        except Exception as exc:  # noqa: BLE001
            return await self.route.response_for_error(exc, self.method, self.logger)

    async def _terminal(self, current: dict[str, Any]) -> Response:
        args = HandlerArgs(
            params=self.params,
            query=self.query,
            body=self.body,
            ctx=MappingProxyType(dict(current)),
            metadata=self.metadata,
        )
        try:
            result = await _resolve(self.route.fn(self.request, args))
            if is_response(result):
                return result
            return self.route.normalize(self.method, result)
        except Exception as exc:  # noqa: BLE001
            return await self.route.response_for_error(exc, self.method, self.logger)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _resolve_params(source: RawParamsSource) -> Any:
    if source is None:
        return {}
    if callable(source):
        source = source()
    source = await _resolve(source)
    return {} if source is None else source


async def _validate(validator: Validator, raw: Any, message: str) -> Any:
    result = await _resolve(validator.validate(raw))
    if isinstance(result, Mapping) and "ok" in result:
        ok, value, issues = result["ok"], result.get("value"), result.get("issues")
    elif hasattr(result, "ok"):
        ok, value, issues = result.ok, getattr(result, "value", None), getattr(result, "issues", None)
    else:
        raise TypeError(f"validator returned unsupported result: {type(result).__name__}")
    if not ok:
        raise ValidationFailed(message, list(issues or []))
    return value
