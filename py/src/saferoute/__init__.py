"""saferoute: validated, middleware-driven route handlers."""

from __future__ import annotations

from saferoute.builder import RouteHandlerBuilder, create_route
from saferoute.clock import Clock, ManualClock, RealClock
from saferoute.config import DEFAULT_STATUS_BY_METHOD, RouteConfig
from saferoute.context import HandlerArgs, MiddlewareArgs, Next
from saferoute.errors import (
    AppError,
    ValidationFailed,
    app_error_translator,
    internal_error_response,
    status_for_error_code,
    validation_error_response,
)
from saferoute.ids import IdGenerator, SequenceIdGenerator, UuidIdGenerator
from saferoute.logger import NoOpLogger, StdlibLogger, StructuredLogger, get_logger, set_logger
from saferoute.middleware import request_id_middleware, request_logging_middleware
from saferoute.pipeline import RouteHandler
from saferoute.request import Request, build_request, normalize_request
from saferoute.response import Response, empty, is_response, json, text
from saferoute.testkit import RecordingLogger, TestEnv, create_test_env, response_json
from saferoute.util import UploadFile
from saferoute.validation import (
    FunctionValidator,
    PydanticValidator,
    ValidationResult,
    Validator,
    as_validator,
    merge_validators,
    schema,
    validator,
)

__all__ = [
    "DEFAULT_STATUS_BY_METHOD",
    "AppError",
    "Clock",
    "FunctionValidator",
    "HandlerArgs",
    "IdGenerator",
    "ManualClock",
    "MiddlewareArgs",
    "Next",
    "NoOpLogger",
    "PydanticValidator",
    "RealClock",
    "RecordingLogger",
    "Request",
    "Response",
    "RouteConfig",
    "RouteHandler",
    "RouteHandlerBuilder",
    "SequenceIdGenerator",
    "StdlibLogger",
    "StructuredLogger",
    "TestEnv",
    "UploadFile",
    "UuidIdGenerator",
    "ValidationFailed",
    "ValidationResult",
    "Validator",
    "app_error_translator",
    "as_validator",
    "build_request",
    "create_route",
    "create_test_env",
    "empty",
    "get_logger",
    "internal_error_response",
    "is_response",
    "json",
    "merge_validators",
    "normalize_request",
    "request_id_middleware",
    "request_logging_middleware",
    "response_json",
    "schema",
    "set_logger",
    "status_for_error_code",
    "text",
    "validation_error_response",
    "validator",
]
