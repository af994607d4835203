from __future__ import annotations

import asyncio
import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(REPO_ROOT / "py" / "src"))

from saferoute.request import Request, build_request, normalize_request  # noqa: E402
from saferoute.util import (  # noqa: E402
    UploadFile,
    canonicalize_headers,
    group_query,
    is_form_content_type,
    parse_content_type,
    parse_multipart,
    parse_urlencoded,
    split_url,
    to_bytes,
)


class TestUtil(unittest.TestCase):
    def test_canonicalize_headers_skips_empty_keys_and_normalizes_values(self) -> None:
        out = canonicalize_headers({"": "skip", "X-One": "1", "X-Two": ["2", 3]})
        self.assertNotIn("", out)
        self.assertEqual(out["x-one"], ["1"])
        self.assertEqual(out["x-two"], ["2", "3"])

    def test_to_bytes_supports_common_types_and_errors_for_other_values(self) -> None:
        self.assertEqual(to_bytes(None), b"")
        self.assertEqual(to_bytes("x"), b"x")
        self.assertEqual(to_bytes(bytearray(b"x")), b"x")
        self.assertEqual(to_bytes(memoryview(b"y")), b"y")
        with self.assertRaisesRegex(TypeError, "bytes-like or str"):
            to_bytes(123)

    def test_parse_content_type(self) -> None:
        media, params = parse_content_type('Multipart/Form-Data; boundary="abc"; charset=utf-8; junk')
        self.assertEqual(media, "multipart/form-data")
        self.assertEqual(params, {"boundary": "abc", "charset": "utf-8"})
        self.assertEqual(parse_content_type(""), ("", {}))

    def test_is_form_content_type(self) -> None:
        self.assertTrue(is_form_content_type("application/x-www-form-urlencoded; charset=utf-8"))
        self.assertTrue(is_form_content_type("multipart/form-data; boundary=x"))
        self.assertFalse(is_form_content_type("application/json"))
        self.assertFalse(is_form_content_type(""))

    def test_split_url_and_group_query(self) -> None:
        self.assertEqual(split_url("http://localhost/a/b?x=1"), ("/a/b", "x=1"))
        self.assertEqual(split_url(""), ("/", ""))
        self.assertEqual(split_url("a?b=1"), ("/a", "b=1"))
        self.assertEqual(group_query("a=1&b=2&a=3&empty="), {"a": ["1", "3"], "b": "2", "empty": ""})
        self.assertEqual(group_query(""), {})

    def test_parse_urlencoded(self) -> None:
        self.assertEqual(parse_urlencoded(b"a=1&b=hello+world&a=2"), [("a", "1"), ("b", "hello world"), ("a", "2")])

    def test_parse_multipart_rejects_malformed_bodies(self) -> None:
        with self.assertRaisesRegex(ValueError, "boundary"):
            parse_multipart(b"", "")
        with self.assertRaisesRegex(ValueError, "no parts"):
            parse_multipart(b"nothing here", "B")
        with self.assertRaisesRegex(ValueError, "form-data name"):
            parse_multipart(b"--B\r\nContent-Type: text/plain\r\n\r\nx\r\n--B--\r\n", "B")

    def test_parse_multipart_fields_and_files(self) -> None:
        body = (
            b"preamble\r\n"
            b"--B\r\n"
            b'Content-Disposition: form-data; name="a"\r\n\r\n'
            b"1\r\n"
            b"--B\r\n"
            b'Content-Disposition: form-data; name="up"; filename="x.bin"\r\n\r\n'
            b"\x00\x01\r\n"
            b"--B--\r\n"
        )
        entries = parse_multipart(body, "B")
        self.assertEqual(entries[0], ("a", "1"))
        self.assertEqual(entries[1], ("up", UploadFile("x.bin", "application/octet-stream", b"\x00\x01")))


class TestRequest(unittest.TestCase):
    def test_header_lookup_is_case_insensitive(self) -> None:
        req = Request(method="GET", url="/", headers={"X-Token": "abc"})
        self.assertEqual(req.header("x-token"), "abc")
        self.assertEqual(req.header("X-TOKEN"), "abc")
        self.assertEqual(req.header("missing"), "")

    def test_query_and_path(self) -> None:
        req = Request(method="GET", url="https://example.com/items?id=1&id=2&q=x")
        self.assertEqual(req.path, "/items")
        self.assertEqual(req.query(), {"id": ["1", "2"], "q": "x"})

    def test_json_body(self) -> None:
        req = Request(method="POST", url="/", headers={"content-type": "application/json"}, body='{"a": [1, 2]}')
        self.assertEqual(asyncio.run(req.json()), {"a": [1, 2]})

        empty = Request(method="POST", url="/")
        with self.assertRaises(ValueError):
            asyncio.run(empty.json())

    def test_form_body(self) -> None:
        req = Request(
            method="POST",
            url="/",
            headers={"content-type": "application/x-www-form-urlencoded"},
            body=b"a=1&b=2",
        )
        self.assertEqual(asyncio.run(req.form()), [("a", "1"), ("b", "2")])

        not_form = Request(method="POST", url="/", headers={"content-type": "text/plain"}, body=b"a=1")
        with self.assertRaisesRegex(ValueError, "unsupported form content type"):
            asyncio.run(not_form.form())

    def test_normalize_request(self) -> None:
        raw = Request(method=" patch ", url="  ", headers={"X-Trace": ["a", 1]}, body="hé")
        req = normalize_request(raw)
        self.assertEqual(req.method, "PATCH")
        self.assertEqual(req.url, "/")
        self.assertEqual(req.headers, {"x-trace": ["a", "1"]})
        self.assertEqual(req.body, "hé".encode())
        self.assertEqual(raw.method, " patch ")

        with self.assertRaisesRegex(TypeError, "bytes-like or str"):
            normalize_request(Request(method="POST", body=object()))

    def test_build_request_normalizes_inputs(self) -> None:
        req = build_request(" post ", "", headers={"X-A": "1"}, json_body={"k": "v"})
        self.assertEqual(req.method, "POST")
        self.assertEqual(req.url, "/")
        self.assertEqual(req.headers["x-a"], ["1"])
        self.assertEqual(req.headers["content-type"], ["application/json"])
        self.assertEqual(req.body, b'{"k": "v"}')

        explicit = build_request("PUT", "/", headers={"content-type": "application/merge-patch+json"}, json_body=[])
        self.assertEqual(explicit.headers["content-type"], ["application/merge-patch+json"])


if __name__ == "__main__":
    unittest.main()
