from __future__ import annotations

import json as jsonlib
from dataclasses import dataclass, field
from typing import Any

from pydantic_core import to_jsonable_python

from saferoute.util import canonicalize_headers, first_header_value, to_bytes

JSON_CONTENT_TYPE = "application/json"


@dataclass(slots=True)
class Response:
    status: int
    headers: dict[str, Any] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> str:
        return first_header_value(canonicalize_headers(self.headers), name)

    def json(self) -> Any:
        if not self.body:
            return None
        return jsonlib.loads(to_bytes(self.body).decode("utf-8"))


def is_response(value: Any) -> bool:
    return isinstance(value, Response)


def json(status: int, value: Any, *, headers: dict[str, Any] | None = None) -> Response:
    headers_out = canonicalize_headers(headers or {})
    headers_out["content-type"] = [JSON_CONTENT_TYPE]
    body = jsonlib.dumps(value, ensure_ascii=False, default=_json_default).encode("utf-8")
    return normalize_response(Response(status=status, headers=headers_out, body=body))


def text(status: int, body: str) -> Response:
    return normalize_response(
        Response(
            status=status,
            headers={"content-type": ["text/plain; charset=utf-8"]},
            body=str(body).encode("utf-8"),
        )
    )


def empty(status: int = 204, *, headers: dict[str, Any] | None = None) -> Response:
    return normalize_response(Response(status=status, headers=dict(headers or {}), body=b""))


def normalize_response(resp: Response) -> Response:
    status = int(resp.status or 200)
    headers = canonicalize_headers(resp.headers)
    body = to_bytes(resp.body)
    return Response(status=status, headers=headers, body=body)


def _json_default(value: Any) -> Any:
    return to_jsonable_python(value, fallback=str)
