"""HTTP responses sent over ASGI."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from collections.abc import Mapping

    from routekit._types import Send


class Response:
    """A complete, non-streaming HTTP response."""

    media_type: str | None = "text/plain; charset=utf-8"

    __slots__ = ("body", "headers", "status_code")

    def __init__(
        self,
        body: bytes | str = b"",
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
        media_type: str | None = None,
    ) -> None:
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.status_code = status_code
        self.headers: dict[str, str] = dict(headers or {})
        content_type = media_type or self.media_type
        if content_type and not any(k.lower() == "content-type" for k in self.headers):
            self.headers["content-type"] = content_type

    def raw_headers(self) -> list[tuple[bytes, bytes]]:
        headers = [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in self.headers.items()]
        headers.append((b"content-length", str(len(self.body)).encode("latin-1")))
        return headers

    async def send(self, send: Send) -> None:
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.raw_headers(),
            }
        )
        await send({"type": "http.response.body", "body": self.body})

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code})"


class JSONResponse(Response):
    """Response whose body is *content* serialised as JSON.

    Pydantic models are dumped in JSON mode first, at any nesting depth
    inside dicts and lists.
    """

    media_type = "application/json"

    __slots__ = ()

    def __init__(
        self,
        content: Any,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        body = json.dumps(_jsonable(content), separators=(",", ":"), ensure_ascii=False)
        super().__init__(body, status_code=status_code, headers=headers)


def _jsonable(content: Any) -> Any:
    if isinstance(content, BaseModel):
        return content.model_dump(mode="json")
    if isinstance(content, dict):
        return {k: _jsonable(v) for k, v in content.items()}
    if isinstance(content, list | tuple):
        return [_jsonable(v) for v in content]
    return content
