from __future__ import annotations

import json as jsonlib
from dataclasses import dataclass, field
from typing import Any

from saferoute.util import (
    canonicalize_headers,
    first_header_value,
    group_query,
    parse_content_type,
    parse_multipart,
    parse_urlencoded,
    split_url,
    to_bytes,
)


@dataclass(slots=True)
class Request:
    method: str
    url: str = "/"
    headers: dict[str, object] = field(default_factory=dict)
    body: object = b""

    @property
    def path(self) -> str:
        return split_url(self.url)[0]

    def header(self, name: str) -> str:
        return first_header_value(canonicalize_headers(self.headers), name)

    @property
    def content_type(self) -> str:
        return self.header("content-type")

    def query(self) -> dict[str, Any]:
        return group_query(split_url(self.url)[1])

    def body_bytes(self) -> bytes:
        return to_bytes(self.body)

    async def form(self) -> list[tuple[str, Any]]:
        media_type, params = parse_content_type(self.content_type)
        charset = params.get("charset", "utf-8")
        data = self.body_bytes()
        if media_type == "multipart/form-data":
            return parse_multipart(data, params.get("boundary", ""), charset)
        if media_type == "application/x-www-form-urlencoded":
            return parse_urlencoded(data, charset)
        raise ValueError(f"unsupported form content type: {media_type or 'none'}")

    async def json(self) -> Any:
        _, params = parse_content_type(self.content_type)
        return jsonlib.loads(self.body_bytes().decode(params.get("charset", "utf-8")))


def normalize_request(req: Request) -> Request:
    return Request(
        method=str(req.method or "").strip().upper(),
        url=str(req.url or "").strip() or "/",
        headers=canonicalize_headers(req.headers),
        body=to_bytes(req.body),
    )


def build_request(
    method: str,
    url: str = "/",
    *,
    headers: dict[str, object] | None = None,
    body: object = b"",
    json_body: Any = None,
) -> Request:
    headers_out = canonicalize_headers(headers or {})
    if json_body is not None:
        body = jsonlib.dumps(json_body, ensure_ascii=False).encode("utf-8")
        headers_out.setdefault("content-type", ["application/json"])
    return normalize_request(Request(method=method, url=url, headers=headers_out, body=body))
