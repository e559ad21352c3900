"""Tests for wren.server: negotiation and response sending."""

import pytest

from wren.http.response import Response
from wren.server.negotiation import negotiate
from wren.server.sender import send_response


async def _send(response: Response, method: str = "GET") -> list[dict]:
    messages: list[dict] = []

    async def send(message: dict) -> None:
        messages.append(message)

    await send_response(response, send, method=method)
    return messages


class TestNegotiate:
    def test_passthrough(self) -> None:
        response = Response("x")
        assert negotiate(response) is response

    def test_bytes(self) -> None:
        assert negotiate(b"\x00").content_type == "application/octet-stream"

    def test_list(self) -> None:
        response = negotiate([1, 2])
        assert response.text == "[1, 2]"
        assert response.content_type.startswith("application/json")

    def test_tuple_with_headers(self) -> None:
        response = negotiate(("made", 201, {"Location": "/pets/1"}))
        assert response.status == 201
        assert response.header("location") == "/pets/1"

    def test_unsupported(self) -> None:
        with pytest.raises(TypeError, match="object"):
            negotiate(object())


class TestSendResponse:
    @pytest.mark.asyncio
    async def test_204_has_no_body(self) -> None:
        messages = await _send(Response("unexpected").with_status(204))
        assert dict(messages[0]["headers"])[b"content-length"] == b"0"
        assert messages[1]["body"] == b""

    @pytest.mark.asyncio
    async def test_head_keeps_length(self) -> None:
        messages = await _send(Response("hello"), method="HEAD")
        assert dict(messages[0]["headers"])[b"content-length"] == b"5"
        assert messages[1]["body"] == b""

    @pytest.mark.asyncio
    async def test_headers_lowercased(self) -> None:
        messages = await _send(Response("ok").with_header("X-Trace", "abc"))
        assert (b"x-trace", b"abc") in messages[0]["headers"]
