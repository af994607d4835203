from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from saferoute.response import Response, json

ErrorTranslator = Callable[[Exception], Response]

INTERNAL_ERROR_MESSAGE = "Internal server error"


@dataclass(slots=True)
class ValidationFailed(Exception):
    """Raised inside a route invocation when an input slot fails validation.

    Always rendered as a 400 response and never handed to an error translator.
    """

    message: str
    issues: list[dict[str, Any]] = field(default_factory=list)

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class AppError(Exception):
    code: str
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


def status_for_error_code(code: str) -> int:
    match code:
        case "app.bad_request" | "app.validation_failed":
            return 400
        case "app.unauthorized":
            return 401
        case "app.forbidden":
            return 403
        case "app.not_found":
            return 404
        case "app.conflict":
            return 409
        case "app.too_large":
            return 413
        case "app.timeout":
            return 408
        case "app.rate_limited":
            return 429
        case "app.overloaded":
            return 503
        case _:
            return 500


def validation_error_response(exc: ValidationFailed) -> Response:
    return json(400, {"message": exc.message, "errors": list(exc.issues)})


def internal_error_response() -> Response:
    return json(500, {"message": INTERNAL_ERROR_MESSAGE})


def app_error_translator(exc: Exception) -> Response:
    if not isinstance(exc, AppError):
        return internal_error_response()

    code = str(exc.code or "").strip() or "app.internal"
    payload: dict[str, Any] = {"message": str(exc.message), "code": code}
    if exc.details is not None:
        payload["details"] = exc.details
    return json(status_for_error_code(code), payload)
