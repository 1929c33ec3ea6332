"""Antbox client exceptions."""

from __future__ import annotations

import json


class AntboxError(Exception):
    """Base class for every failure talking to the Antbox server."""


class AuthenticationError(AntboxError):
    """Login was refused or could not be attempted."""


class HttpError(AntboxError):
    """The server answered with an unexpected status code."""

    def __init__(
        self,
        status_code: int,
        method: str,
        url: str,
        body: str = "",
        request_body: str = "",
        reason: str = "",
    ) -> None:
        self.status_code = status_code
        self.method = method
        self.url = url
        self.body = body
        self.request_body = request_body
        self.reason = reason
        super().__init__(f"{method} {url} - {status_code}")

    @property
    def message(self) -> str:
        """Best human-readable message from the response body."""
        try:
            data = json.loads(self.body)
        except (TypeError, ValueError):
            return self.body.strip() or self.reason
        if isinstance(data, dict):
            for key in ("message", "error", "detail"):
                value = data.get(key)
                if isinstance(value, str) and value:
                    return value
        return self.body.strip()

    def details(self) -> str:
        """Multi-section dump of request and response, for --debug output."""
        lines = [f"{self.method} {self.url} - {self.status_code} {self.reason}".rstrip(), ""]
        if self.request_body:
            lines += ["==> Request", _pretty(self.request_body), ""]
        if self.body:
            lines += ["Response <==", _pretty(self.body)]
        return "\n".join(lines)

    def __str__(self) -> str:
        message = self.message
        if message:
            return f"{self.status_code} {message}"
        return f"{self.method} {self.url} - {self.status_code}"


def _pretty(text: str) -> str:
    try:
        return json.dumps(json.loads(text), indent=2)
    except (TypeError, ValueError):
        return text
