"""
HTTP fetching with bounded retries for remote image sources.

Each attempt runs under its own deadline. Failed attempts back off
exponentially: retry_delay_ms * 2 ** attempt. Exhausting the policy
returns None instead of raising, so callers treat an unreachable image
as "no placeholder" rather than an error.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Literal, Mapping, Protocol

import requests

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class FetchError(Exception):
    """Base exception for a failed fetch attempt."""
    pass


class HTTPStatusError(FetchError):
    """Raised when the server answers with a non-2xx status."""

    def __init__(self, status: int):
        self.status = status
        super().__init__(f"HTTP {status}")


class FetchTimeout(FetchError):
    """Raised when an attempt runs past its deadline."""
    pass


class BodyTooLarge(FetchError):
    """Raised when a response body exceeds the transport's size cap."""
    pass


@dataclass(frozen=True)
class FetchPolicy:
    """Retry, timeout and cache settings for one fetch."""

    retries: int = 2
    retry_delay_ms: int = 300
    timeout_ms: int = 30000
    revalidate_seconds: int | Literal[False] | None = None

    def backoff_seconds(self, attempt: int) -> float:
        """Delay after the given 0-indexed failed attempt."""
        return self.retry_delay_ms * (1 << attempt) / 1000

    def cache_headers(self) -> dict[str, str]:
        revalidate = self.revalidate_seconds
        if isinstance(revalidate, bool) or not isinstance(revalidate, (int, float)) or revalidate <= 0:
            return {}
        return {"Cache-Control": f"max-age={int(revalidate)}"}


@dataclass
class TransportResponse:
    status: int
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    """Network capability used by fetch_buffer."""

    def request(
        self, url: str, *, timeout: float, headers: Mapping[str, str]
    ) -> TransportResponse: ...


class RequestsTransport:
    """
    Transport backed by a requests.Session.

    requests applies timeout to the connect and to each socket read, so
    the total deadline is also checked once headers arrive and between
    body chunks. An attempt therefore ends within one read timeout of
    its deadline. max_bytes caps the streamed body; None reads it all.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        chunk_size: int = CHUNK_SIZE,
        max_bytes: int | None = None,
    ):
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._chunk_size = chunk_size
        self._max_bytes = max_bytes

    def request(
        self, url: str, *, timeout: float, headers: Mapping[str, str]
    ) -> TransportResponse:
        deadline = time.monotonic() + timeout
        with self._session.get(url, headers=dict(headers), timeout=timeout, stream=True) as response:
            chunks: list[bytes] = []
            received = 0
            self._check_deadline(deadline, timeout)
            for chunk in response.iter_content(self._chunk_size):
                self._check_deadline(deadline, timeout)
                received += len(chunk)
                if self._max_bytes is not None and received > self._max_bytes:
                    raise BodyTooLarge(f"Response body exceeds {self._max_bytes} bytes")
                chunks.append(chunk)
            return TransportResponse(status=response.status_code, content=b"".join(chunks))

    @staticmethod
    def _check_deadline(deadline: float, timeout: float) -> None:
        if time.monotonic() > deadline:
            raise FetchTimeout(f"Timed out after {timeout:.2f}s")

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def _attempt(url: str, policy: FetchPolicy, transport: Transport) -> bytes:
    response = transport.request(
        url,
        timeout=policy.timeout_ms / 1000,
        headers=policy.cache_headers(),
    )
    if not response.ok:
        raise HTTPStatusError(response.status)
    return response.content


def fetch_buffer(
    url: str,
    policy: FetchPolicy,
    transport: Transport | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> bytes | None:
    """
    Fetch url, retrying per policy.

    Returns the body bytes, or None once every attempt has failed.
    Without a transport a fresh session is opened for this call only.
    """
    if transport is None:
        with RequestsTransport() as owned:
            return fetch_buffer(url, policy, owned, sleep)

    for attempt in range(policy.retries + 1):
        try:
            content = _attempt(url, policy, transport)
            logger.debug("Fetched %s (%d bytes) on attempt %d", url, len(content), attempt + 1)
            return content
        except (FetchError, requests.RequestException, OSError) as e:
            remaining = policy.retries - attempt
            if remaining == 0:
                logger.warning(
                    "Fetch attempt %d failed: %s. No more attempts remaining.",
                    attempt + 1, e,
                )
                return None

            delay = policy.backoff_seconds(attempt)
            logger.warning(
                "Fetch attempt %d failed: %s. Will retry in %.2fs. %d attempt(s) remaining.",
                attempt + 1, e, delay, remaining,
            )
            sleep(delay)

    return None
