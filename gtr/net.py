"""HTTP clients shared by the translation backends."""

from __future__ import annotations

import os
import threading
import time
from typing import Any, Mapping, Optional, Union

import requests

DEFAULT_TIMEOUT = 30.0
MAX_RETRIES = 3
BACKOFF_BASE = 0.5
_RETRYABLE_STATUS = range(429, 600)


def _env_user_agent() -> str:
    return os.environ.get("USER_AGENT", "").strip()


class HttpClient:
    """A thin wrapper over a requests session with timeout, retry and User-Agent."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry: bool = False,
        user_agent: Optional[str] = None,
        backoff_base: float = BACKOFF_BASE,
    ) -> None:
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.retry = retry
        self.user_agent = _env_user_agent() if user_agent is None else user_agent
        self.backoff_base = backoff_base

    def _headers(self, headers: Optional[Mapping[str, str]]) -> dict[str, str]:
        merged = dict(headers or {})
        if self.user_agent and not any(k.lower() == "user-agent" for k in merged):
            merged["User-Agent"] = self.user_agent
        return merged

    def _send(self, method: str, url: str, headers: dict[str, str], data: Any) -> requests.Response:
        return self.session.request(
            method, url, headers=headers, data=data, timeout=self.timeout
        )

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        data: Any = None,
    ) -> requests.Response:
        """Send a request; with retry enabled, retry on errors and 429-599 replies."""
        merged = self._headers(headers)
        if not self.retry:
            return self._send(method, url, merged, data)

        last_error: Union[Exception, str, None] = None
        for attempt in range(MAX_RETRIES + 1):
            if attempt:
                time.sleep(self.backoff_base * (1 << (attempt - 1)))
            try:
                response = self._send(method, url, merged, data)
            except requests.RequestException as exc:
                last_error = exc
                continue
            if response.status_code in _RETRYABLE_STATUS:
                response.close()
                last_error = f"HTTP {response.status_code}"
                continue
            return response
        message = f"retry exhausted after {MAX_RETRIES + 1} attempts: {last_error}"
        if isinstance(last_error, Exception):
            raise requests.exceptions.RetryError(message) from last_error
        raise requests.exceptions.RetryError(message)

    def get(self, url: str, headers: Optional[Mapping[str, str]] = None) -> requests.Response:
        """Send a GET request."""
        return self.request("GET", url, headers=headers)

    def post(
        self, url: str, headers: Optional[Mapping[str, str]] = None, data: Any = None
    ) -> requests.Response:
        """Send a POST request."""
        return self.request("POST", url, headers=headers, data=data)


class _SharedPool:
    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.session: Optional[requests.Session] = None
        self.user_agent = ""
        self.timeout = DEFAULT_TIMEOUT


_shared = _SharedPool()


def new_client() -> HttpClient:
    """Return a client with its own connection pool and the default timeout."""
    return HttpClient(timeout=DEFAULT_TIMEOUT)


def new_shared_client() -> HttpClient:
    """Return a retrying client backed by the process-wide connection pool."""
    with _shared.lock:
        if _shared.session is None:
            _shared.session = requests.Session()
            _shared.user_agent = _env_user_agent()
        return HttpClient(
            session=_shared.session,
            timeout=_shared.timeout,
            retry=True,
            user_agent=_shared.user_agent,
        )


def set_shared_timeout(seconds: float) -> None:
    """Set the timeout used by clients from new_shared_client()."""
    if seconds <= 0:
        raise ValueError("timeout must be positive")
    with _shared.lock:
        _shared.timeout = float(seconds)


def truncate(data: Union[bytes, str], limit: int) -> str:
    """Trim whitespace and cap at ``limit`` bytes, adding an ellipsis when cut."""
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    raw = raw.strip()
    if len(raw) <= limit:
        return raw.decode("utf-8", "replace")
    return raw[:limit].decode("utf-8", "ignore") + "…"