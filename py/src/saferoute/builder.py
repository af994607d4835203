from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from saferoute.config import RouteConfig, normalize_status_by_method
from saferoute.context import FormDataDecoder, Handler, Middleware
from saferoute.errors import ErrorTranslator
from saferoute.logger import StructuredLogger
from saferoute.pipeline import RouteHandler
from saferoute.validation import as_validator, merge_validators


class RouteHandlerBuilder:
    """Immutable, chainable route configuration.

    Every configuration method returns a new builder; the receiver is left
    untouched, so a partially configured builder can be shared and forked::

        authed = create_route().use(require_user)
        get_post = authed.params(PostParams).handler(read_post)
        delete_post = authed.params(PostParams).handler(remove_post)
    """

    __slots__ = ("config",)

    def __init__(self, config: RouteConfig | None = None) -> None:
        self.config = config or RouteConfig()

    def _with(self, **changes: Any) -> RouteHandlerBuilder:
        return RouteHandlerBuilder(replace(self.config, **changes))

    def params(self, validator: Any, *, extend: bool = False) -> RouteHandlerBuilder:
        """Validate path params with ``validator``.

        With ``extend=True`` the fields of an existing model validator are kept
        and augmented (new fields win on collision), and the middleware chain
        is reset to empty so the result starts a fresh nested-route lineage.
        """
        new = _require_validator(validator, "params")
        if not extend:
            return self._with(params_validator=new)
        return self._with(
            params_validator=merge_validators(self.config.params_validator, new),
            middlewares=(),
        )

    def query(self, validator: Any) -> RouteHandlerBuilder:
        return self._with(query_validator=_require_validator(validator, "query"))

    def body(self, validator: Any) -> RouteHandlerBuilder:
        return self._with(body_validator=_require_validator(validator, "body"))

    def define_metadata(self, validator: Any) -> RouteHandlerBuilder:
        # A new metadata shape drops the bound value and the middleware chain.
        return self._with(
            metadata_validator=_require_validator(validator, "metadata"),
            metadata_value=None,
            middlewares=(),
        )

    def metadata(self, value: Any) -> RouteHandlerBuilder:
        return self._with(metadata_value=value)

    def use(self, middleware: Middleware) -> RouteHandlerBuilder:
        if not callable(middleware):
            raise TypeError("middleware must be callable")
        return self._with(middlewares=(*self.config.middlewares, middleware))

    def handler(self, fn: Handler) -> RouteHandler:
        if not callable(fn):
            raise TypeError("handler must be callable")
        return RouteHandler(self.config, fn)


def create_route(
    *,
    error_translator: ErrorTranslator | None = None,
    form_data_decoder: FormDataDecoder | None = None,
    status_by_method: Mapping[str, int] | None = None,
    logger: StructuredLogger | None = None,
) -> RouteHandlerBuilder:
    return RouteHandlerBuilder(
        RouteConfig(
            error_translator=error_translator,
            form_data_decoder=form_data_decoder,
            status_by_method=normalize_status_by_method(status_by_method),
            logger=logger,
        )
    )


def _require_validator(value: Any, slot: str) -> Any:
    validator = as_validator(value)
    if validator is None:
        raise TypeError(f"{slot} validator is required")
    return validator
