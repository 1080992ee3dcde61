"""Tests for trellis.server.sender — Response to ASGI messages."""

from typing import Any

import pytest

from trellis.http.response import Response
from trellis.server.sender import send_response


async def _send(response: Response, method: str = "GET") -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []

    async def send(message: dict[str, Any]) -> None:
        messages.append(message)

    await send_response(response, send, method=method)
    return messages


class TestSendResponse:
    async def test_start_and_body(self) -> None:
        start, body = await _send(Response("hello", status=201))
        assert start["type"] == "http.response.start"
        assert start["status"] == 201
        assert (b"content-length", b"5") in start["headers"]
        assert body == {"type": "http.response.body", "body": b"hello"}

    async def test_header_names_lowercased(self) -> None:
        start, _ = await _send(Response().with_header("X-Trace", "abc"))
        assert (b"x-trace", b"abc") in start["headers"]

    async def test_head_keeps_length_drops_body(self) -> None:
        start, body = await _send(Response("hello"), method="HEAD")
        assert (b"content-length", b"5") in start["headers"]
        assert body["body"] == b""

    @pytest.mark.parametrize("status", [101, 204, 304])
    async def test_bodyless_statuses(self, status: int) -> None:
        start, body = await _send(Response("ignored", status=status))
        assert (b"content-length", b"0") in start["headers"]
        assert body["body"] == b""
