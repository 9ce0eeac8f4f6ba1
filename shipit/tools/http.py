"""HTTP client abstraction for deploy, notification and release calls.

This module provides:
- HttpResponse: status code + body of a completed exchange
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing

A non-2xx status is still a completed exchange and comes back as
``Ok(HttpResponse)``; callers decide what a status means. ``Err(HttpError)``
is reserved for requests that never produced a response.
"""

from __future__ import annotations

import http.client
import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from shipit import __version__
from shipit.core.result import Err, Ok, Result

__all__ = [
    "HttpCall",
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """No usable response: DNS, TLS, refused connection, timeout or a malformed reply.

    Attributes:
        url: The URL that failed
        message: Human-readable error message
    """

    url: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    body: str

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for the two kinds of POST shipit makes."""

    def post_file(
        self,
        url: str,
        path: Path,
        headers: Mapping[str, str],
    ) -> Result[HttpResponse, HttpError]:
        """Stream the bytes of ``path`` as the request body."""
        ...

    def post_json(
        self,
        url: str,
        payload: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        """Send ``payload`` serialized as a JSON body."""
        ...


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


class RealHttpClient:
    """HTTP client using urllib.

    ``timeout`` is None by default: a POST waits until the remote side
    answers. Callers that need bounded latency pass a value.
    """

    def __init__(self, timeout: float | None = None, user_agent: str = f"shipit/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _send(self, req: urllib.request.Request) -> Result[HttpResponse, HttpError]:
        url = req.full_url
        try:
            with urllib.request.urlopen(req, timeout=self.timeout, context=self._ssl_context) as response:
                return Ok(HttpResponse(status=response.status, body=_decode(response.read())))
        except urllib.error.HTTPError as e:
            # Non-2xx: the server answered; keep its body as diagnostics.
            body = _decode(e.read()) if e.fp is not None else str(e.reason)
            return Ok(HttpResponse(status=e.code, body=body))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, message="Request timed out"))
        except http.client.HTTPException as e:
            # Malformed reply (bad status line, truncated body).
            return Err(HttpError(url=url, message=str(e) or type(e).__name__))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, message=str(e)))

    def post_file(
        self,
        url: str,
        path: Path,
        headers: Mapping[str, str],
    ) -> Result[HttpResponse, HttpError]:
        try:
            size = path.stat().st_size
            stream = path.open("rb")
        except OSError as e:
            return Err(HttpError(url=url, message=f"cannot read {path}: {e}"))

        with stream:
            req = urllib.request.Request(
                url,
                data=stream,
                method="POST",
                headers={
                    "User-Agent": self.user_agent,
                    "Content-Length": str(size),
                    **headers,
                },
            )
            return self._send(req)

    def post_json(
        self,
        url: str,
        payload: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        req = urllib.request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "User-Agent": self.user_agent,
                "Content-Type": "application/json",
                **(headers or {}),
            },
        )
        return self._send(req)


@dataclass(frozen=True, slots=True)
class HttpCall:
    method: str
    url: str
    headers: dict[str, str]
    body: bytes

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


def _empty_calls() -> list[HttpCall]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_response("https://app.example.net/api/zipdeploy", HttpResponse(200, "ok"))
        ...
        assert client.calls[0].headers["Authorization"].startswith("Basic ")

    Unknown URLs answer 404.
    """

    calls: list[HttpCall] = field(default_factory=_empty_calls)
    _responses: dict[str, HttpResponse | HttpError] = field(default_factory=dict)

    def set_response(self, url: str, response: HttpResponse | HttpError) -> None:
        self._responses[url] = response

    def _answer(self, url: str) -> Result[HttpResponse, HttpError]:
        response = self._responses.get(url, HttpResponse(status=404, body="Not found (mock)"))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def post_file(
        self,
        url: str,
        path: Path,
        headers: Mapping[str, str],
    ) -> Result[HttpResponse, HttpError]:
        self.calls.append(HttpCall("POST", url, dict(headers), path.read_bytes()))
        return self._answer(url)

    def post_json(
        self,
        url: str,
        payload: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        body = json.dumps(payload).encode("utf-8")
        self.calls.append(HttpCall("POST", url, dict(headers or {}), body))
        return self._answer(url)

    def calls_to(self, url: str) -> list[HttpCall]:
        return [c for c in self.calls if c.url == url]
