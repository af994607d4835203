from __future__ import annotations

import functools
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

from pydantic import BaseModel, TypeAdapter, ValidationError, create_model
from pydantic_core import to_jsonable_python

from saferoute.logger import get_logger

Issue = dict[str, Any]


@dataclass(slots=True, frozen=True)
class ValidationResult:
    ok: bool
    value: Any = None
    issues: list[Issue] = field(default_factory=list)

    @classmethod
    def success(cls, value: Any) -> ValidationResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, issues: list[Issue]) -> ValidationResult:
        return cls(ok=False, issues=list(issues))


@runtime_checkable
class Validator(Protocol):
    def validate(self, raw: Any) -> ValidationResult: ...


class PydanticValidator:
    """Validates raw input with a pydantic model or any type ``TypeAdapter`` accepts.

    Successful validation yields the converted value (a model instance for
    ``BaseModel`` targets). Failures carry pydantic's error list, made
    JSON-safe so it can be written straight into a response payload.
    """

    __slots__ = ("target", "_adapter")

    def __init__(self, target: Any) -> None:
        self.target = target
        self._adapter = TypeAdapter(target)

    @property
    def model(self) -> type[BaseModel] | None:
        try:
            is_model = isinstance(self.target, type) and issubclass(self.target, BaseModel)
        except TypeError:
            is_model = False
        return self.target if is_model else None

    def validate(self, raw: Any) -> ValidationResult:
        try:
            value = self._adapter.validate_python(raw)
        except ValidationError as exc:
            return ValidationResult.failure(issues_from_pydantic(exc))
        return ValidationResult.success(value)

    def __repr__(self) -> str:
        return f"PydanticValidator({getattr(self.target, '__name__', self.target)!r})"


class FunctionValidator:
    """Adapts a plain callable into a validator.

    The callable returns either a ``ValidationResult`` or the converted value.
    ``ValueError``/``TypeError``/pydantic ``ValidationError`` raised by it are
    reported as issues; anything else propagates.
    """

    __slots__ = ("fn",)

    def __init__(self, fn: Callable[[Any], Any]) -> None:
        self.fn = fn

    def validate(self, raw: Any) -> Any:
        try:
            out = self.fn(raw)
        except ValidationError as exc:
            return ValidationResult.failure(issues_from_pydantic(exc))
        except (ValueError, TypeError) as exc:
            return ValidationResult.failure([value_error_issue(exc)])

        if inspect.isawaitable(out):
            return self._finish(out)
        return _as_result(out)

    async def _finish(self, pending: Any) -> ValidationResult:
        try:
            out = await pending
        except ValidationError as exc:
            return ValidationResult.failure(issues_from_pydantic(exc))
        except (ValueError, TypeError) as exc:
            return ValidationResult.failure([value_error_issue(exc)])
        return _as_result(out)


def schema(target: Any) -> PydanticValidator:
    return PydanticValidator(target)


def validator(fn: Callable[[Any], Any]) -> FunctionValidator:
    return FunctionValidator(fn)


def as_validator(value: Any) -> Validator | None:
    if value is None:
        return None
    if isinstance(value, (PydanticValidator, FunctionValidator)):
        return value
    if isinstance(value, type):
        return PydanticValidator(value)
    if callable(getattr(value, "validate", None)):
        return value
    if inspect.isroutine(value) or isinstance(value, functools.partial):
        return FunctionValidator(value)
    return PydanticValidator(value)


def merge_validators(base: Validator | None, extra: Validator) -> Validator:
    if base is None:
        return extra

    base_model = base.model if isinstance(base, PydanticValidator) else None
    extra_model = extra.model if isinstance(extra, PydanticValidator) else None
    if base_model is None or extra_model is None:
        get_logger().debug(
            "route.params_extend_replaced",
            {"base": repr(base), "extra": repr(extra)},
        )
        return extra

    if issubclass(extra_model, base_model):
        return extra
    if issubclass(base_model, extra_model):
        # base already inherits extra; re-declare extra's fields so they win.
        overrides = {name: (info.annotation, info) for name, info in extra_model.model_fields.items()}
        merged = create_model(base_model.__name__, __base__=base_model, **overrides)
        return PydanticValidator(merged)

    # MRO puts extra first so its fields win on name collisions.
    merged = create_model(extra_model.__name__, __base__=(extra_model, base_model))
    return PydanticValidator(merged)


def issues_from_pydantic(exc: ValidationError) -> list[Issue]:
    return to_jsonable_python(exc.errors(include_url=False), fallback=str)


def value_error_issue(exc: Exception, loc: list[Any] | None = None) -> Issue:
    return {"type": "value_error", "loc": list(loc or []), "msg": str(exc)}


def _as_result(out: Any) -> ValidationResult:
    if isinstance(out, ValidationResult):
        return out
    return ValidationResult.success(out)
