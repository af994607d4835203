from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from saferoute.context import FormDataDecoder, Middleware
from saferoute.errors import ErrorTranslator
from saferoute.logger import StructuredLogger
from saferoute.validation import Validator

DEFAULT_STATUS_BY_METHOD: Mapping[str, int] = MappingProxyType(
    {
        "GET": 200,
        "POST": 201,
        "PUT": 200,
        "PATCH": 200,
        "DELETE": 204,
    }
)

NO_BODY_METHODS = frozenset({"GET", "HEAD", "DELETE"})


@dataclass(slots=True, frozen=True)
class RouteConfig:
    params_validator: Validator | None = None
    query_validator: Validator | None = None
    body_validator: Validator | None = None
    metadata_validator: Validator | None = None
    middlewares: tuple[Middleware, ...] = ()
    metadata_value: Any = None
    error_translator: ErrorTranslator | None = None
    form_data_decoder: FormDataDecoder | None = None
    status_by_method: Mapping[str, int] = field(default_factory=lambda: DEFAULT_STATUS_BY_METHOD)
    logger: StructuredLogger | None = None

    def status_for_method(self, method: str) -> int:
        return int(self.status_by_method.get(str(method or "").strip().upper(), 200))


def normalize_status_by_method(overrides: Mapping[str, int] | None) -> Mapping[str, int]:
    if not overrides:
        return DEFAULT_STATUS_BY_METHOD
    merged = dict(DEFAULT_STATUS_BY_METHOD)
    for method, status in overrides.items():
        key = str(method or "").strip().upper()
        if not key:
            continue
        merged[key] = int(status)
    return MappingProxyType(merged)
