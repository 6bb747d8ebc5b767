"""HTTP client abstraction for the review server.

This module provides:
- HttpClient: Protocol for the JSON calls the branch service makes
- RealHttpClient: urllib implementation (optional HTTP basic auth)
- MockHttpClient: canned responses for tests

Gerrit prefixes every JSON body with the XSSI guard `)]}'`; it is stripped
before parsing.
"""

from __future__ import annotations

import base64
import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from mkbranch import __version__
from mkbranch.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "parse_gerrit_json",
]

XSSI_PREFIX = ")]}'"


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


def parse_gerrit_json(url: str, body: str) -> Result[object, HttpError]:
    """Parse a Gerrit JSON body, dropping the XSSI guard line."""
    text = body.lstrip()
    if text.startswith(XSSI_PREFIX):
        text = text[len(XSSI_PREFIX) :]
    try:
        data: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))
    return Ok(data)


@runtime_checkable
class HttpClient(Protocol):
    """JSON over HTTP, injectable so tests never touch the network."""

    def get_json(self, url: str) -> Result[object, HttpError]: ...

    def send_json(self, method: str, url: str, payload: object) -> Result[object, HttpError]:
        """Send `payload` as a JSON body with `method` and parse the reply."""
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        username: str | None = None,
        password: str | None = None,
        user_agent: str = f"mkbranch/{__version__}",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()
        self._auth: str | None = None
        if username and password:
            token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
            self._auth = f"Basic {token}"

    def get_json(self, url: str) -> Result[object, HttpError]:
        result = self._request("GET", url, None)
        if isinstance(result, Err):
            return result
        return parse_gerrit_json(url, result.value)

    def send_json(self, method: str, url: str, payload: object) -> Result[object, HttpError]:
        body = json.dumps(payload).encode("utf-8")
        result = self._request(method, url, body)
        if isinstance(result, Err):
            return result
        return parse_gerrit_json(url, result.value)

    def _request(self, method: str, url: str, body: bytes | None) -> Result[str, HttpError]:
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if body is not None:
            headers["Content-Type"] = "application/json; charset=UTF-8"
        if self._auth is not None:
            headers["Authorization"] = self._auth

        try:
            req = urllib.request.Request(url, data=body, headers=headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except UnicodeDecodeError as e:
            return Err(HttpError(url=url, status=0, message=f"Decode error: {e}"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_json("https://gerrit.example/projects/core/branches/", [...])
        client.set_send("PUT", "https://gerrit.example/projects/core/branches/b", {...})
    """

    def __init__(self) -> None:
        self._get_responses: dict[str, object | HttpError] = {}
        self._send_responses: dict[tuple[str, str], object | HttpError] = {}
        self.calls: list[tuple[str, str]] = []
        self.payloads: list[object] = []

    def set_json(self, url: str, response: object | HttpError) -> None:
        self._get_responses[url] = response

    def set_send(self, method: str, url: str, response: object | HttpError) -> None:
        self._send_responses[(method, url)] = response

    def get_json(self, url: str) -> Result[object, HttpError]:
        self.calls.append(("GET", url))
        if url not in self._get_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self._get_responses[url]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def send_json(self, method: str, url: str, payload: object) -> Result[object, HttpError]:
        self.calls.append((method, url))
        self.payloads.append(payload)
        key = (method, url)
        if key not in self._send_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self._send_responses[key]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
