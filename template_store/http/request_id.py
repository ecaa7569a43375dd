"""Request ID middleware.

Echoes the caller's X-Request-Id or assigns a fresh one, exposes it on
`scope["state"]["request_id"]` for handlers, and stamps it on the response.
"""

from __future__ import annotations

import uuid

HEADER_NAME = "X-Request-Id"


def _incoming_id(scope, header: bytes) -> str | None:  # type: ignore[no-untyped-def]
    for k, v in scope.get("headers") or []:
        if k.lower() == header:
            value = v.decode("latin-1").strip()
            return value or None
    return None


class RequestIdMiddleware:
    def __init__(self, app, header_name: str = HEADER_NAME) -> None:  # type: ignore[no-untyped-def]
        self.app = app
        self.header_name = header_name

    async def __call__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        header_bytes = self.header_name.lower().encode("latin-1")
        request_id = _incoming_id(scope, header_bytes) or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_wrapper(message):  # type: ignore[no-untyped-def]
            if message.get("type") == "http.response.start":
                headers = [
                    (k, v) for k, v in (message.get("headers") or []) if k.lower() != header_bytes
                ]
                headers.append((self.header_name.encode("latin-1"), request_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        await self.app(scope, receive, send_wrapper)


__all__ = ["HEADER_NAME", "RequestIdMiddleware"]
