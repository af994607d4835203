from __future__ import annotations

import urllib.parse
from dataclasses import dataclass
from typing import Any

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


@dataclass(slots=True, frozen=True)
class UploadFile:
    filename: str
    content_type: str
    data: bytes


def canonicalize_headers(headers: dict[str, Any] | None) -> dict[str, list[str]]:
    if not headers:
        return {}
    out: dict[str, list[str]] = {}
    for key in sorted(headers.keys()):
        lower = str(key).strip().lower()
        if not lower:
            continue
        value = headers[key]
        values = value if isinstance(value, (list, tuple)) else [value]
        out.setdefault(lower, []).extend([str(v) for v in values])
    return out


def first_header_value(headers: dict[str, list[str]], key: str) -> str:
    values = headers.get(str(key or "").strip().lower(), [])
    return values[0] if values else ""


def to_bytes(value: Any) -> bytes:
    if value is None:
        return b""
    if isinstance(value, bytes):
        return bytes(value)
    if isinstance(value, bytearray):
        return bytes(value)
    if isinstance(value, memoryview):
        return value.tobytes()
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError("body must be bytes-like or str")


def parse_content_type(value: str) -> tuple[str, dict[str, str]]:
    parts = [p.strip() for p in str(value or "").split(";")]
    media_type = parts[0].lower() if parts else ""
    params: dict[str, str] = {}
    for item in parts[1:]:
        if "=" not in item:
            continue
        k, v = item.split("=", 1)
        k = k.strip().lower()
        if not k:
            continue
        params[k] = v.strip().strip('"')
    return media_type, params


def is_form_content_type(value: str) -> bool:
    lowered = str(value or "").lower()
    return any(marker in lowered for marker in FORM_CONTENT_TYPES)


def split_url(url: str) -> tuple[str, str]:
    parts = urllib.parse.urlsplit(str(url or ""))
    path = parts.path or "/"
    if not path.startswith("/"):
        path = "/" + path
    return path, parts.query


def group_query(query_string: str) -> dict[str, Any]:
    grouped: dict[str, list[str]] = {}
    for key, value in urllib.parse.parse_qsl(str(query_string or ""), keep_blank_values=True):
        grouped.setdefault(key, []).append(value)
    return {key: values[0] if len(values) == 1 else values for key, values in grouped.items()}


def parse_urlencoded(body: bytes, charset: str = "utf-8") -> list[tuple[str, Any]]:
    text = body.decode(charset or "utf-8")
    return list(urllib.parse.parse_qsl(text, keep_blank_values=True))


def parse_multipart(body: bytes, boundary: str, charset: str = "utf-8") -> list[tuple[str, Any]]:
    if not boundary:
        raise ValueError("multipart body is missing a boundary")

    delimiter = b"--" + boundary.encode("latin-1")
    chunks = body.split(delimiter)
    if len(chunks) < 3:
        raise ValueError("multipart body has no parts")

    entries: list[tuple[str, Any]] = []
    for chunk in chunks[1:]:
        if chunk.startswith(b"--"):
            break
        chunk = chunk.removeprefix(b"\r\n")
        if chunk.endswith(b"\r\n"):
            chunk = chunk[:-2]
        if b"\r\n\r\n" not in chunk:
            raise ValueError("multipart part is missing headers")
        header_block, content = chunk.split(b"\r\n\r\n", 1)

        part_headers: dict[str, str] = {}
        for line in header_block.decode("latin-1").split("\r\n"):
            if ":" not in line:
                continue
            name, value = line.split(":", 1)
            part_headers[name.strip().lower()] = value.strip()

        disposition, params = parse_content_type(part_headers.get("content-disposition", ""))
        name = params.get("name", "")
        if disposition != "form-data" or not name:
            raise ValueError("multipart part is missing a form-data name")

        if "filename" in params:
            entries.append(
                (
                    name,
                    UploadFile(
                        filename=params["filename"],
                        content_type=part_headers.get("content-type", "application/octet-stream"),
                        data=bytes(content),
                    ),
                )
            )
        else:
            entries.append((name, content.decode(charset or "utf-8")))
    return entries
