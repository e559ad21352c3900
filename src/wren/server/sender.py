"""ASGI response sending: translates a Response into ASGI messages."""

from wren._internal.asgi import Send
from wren.http.response import Response


def _body_allowed(status: int, method: str) -> bool:
    """Whether a response body may be sent."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    if 100 <= status < 200 or status in {204, 304}:
        return False
    return method != "HEAD"


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Translate a wren Response into ASGI send() calls."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    raw_headers.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
    )

    full_body = response.body_bytes
    body = full_body if _body_allowed(response.status, method) else b""

    # HEAD reports the length the GET body would have
    length = len(full_body) if method == "HEAD" else len(body)
    raw_headers.append((b"content-length", str(length).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send({"type": "http.response.body", "body": body})
