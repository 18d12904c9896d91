"""HTTP method vocabulary (RFC 9110 section 9, plus PATCH)."""

from __future__ import annotations

from enum import Enum


class HttpMethod(str, Enum):
    OPTIONS = "OPTIONS"
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    TRACE = "TRACE"
    CONNECT = "CONNECT"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, token: str) -> HttpMethod:
        """Return the member for *token* (case-insensitive).

        Raises :class:`ValueError` for tokens outside the vocabulary.
        """
        try:
            return cls(token.upper())
        except ValueError:
            msg = f"Unsupported HTTP method: {token!r}"
            raise ValueError(msg) from None


def normalize_method(method: HttpMethod | str) -> str:
    """Upper-case method token used as the router's registry key.

    Extension methods outside :class:`HttpMethod` pass through unchanged
    apart from case.
    """
    if isinstance(method, HttpMethod):
        return method.value
    token = method.strip().upper()
    if not token:
        msg = "HTTP method must be a non-empty token"
        raise ValueError(msg)
    return token
