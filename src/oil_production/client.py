# file: src/oil_production/client.py
"""Thin HTTP layer: execute a SeriesRequest and return the raw response."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.oil_production.errors import ConfigurationError, TransientFetchError
from src.oil_production.request import SeriesRequest, scrub_key

logger = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)
# Rejected key: fatal for the whole run, not one state
AUTH_STATUSES = (401, 403)


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    content: bytes
    url: str  # sanitized

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def create_session(max_retries: int = 3, backoff_factor: float = 0.5) -> requests.Session:
    """Create requests Session with retry logic for transient errors."""
    session = requests.Session()
    if max_retries > 0:
        retries = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=RETRY_STATUSES,
            allowed_methods=frozenset(["GET"]),
            connect=max_retries,
            read=max_retries,
            raise_on_status=False,
        )
        session.mount("https://", HTTPAdapter(max_retries=retries))
    return session


def fetch_raw(session: requests.Session, request: SeriesRequest, *, timeout: float = 30.0) -> RawResponse:
    """
    GET one series. No retry here; the session carries the retry policy.

    Raises:
        ConfigurationError: 401/403, the API key was rejected
        TransientFetchError: network error or other non-2xx status
    """
    safe_url = request.safe_url
    try:
        resp = session.get(request.url, params=request.params, timeout=timeout)
    except requests.RequestException as e:
        # requests puts the full URL (with key) into some messages
        msg = scrub_key(str(e), request.params.get("api_key", ""))
        raise TransientFetchError(
            f"Request failed for {request.entity_code}: {type(e).__name__}: {msg}",
            entity_code=request.entity_code,
        ) from e

    raw = RawResponse(status_code=resp.status_code, content=resp.content, url=safe_url)
    if raw.status_code in AUTH_STATUSES:
        raise ConfigurationError(
            f"EIA rejected the API key (HTTP {resp.status_code}) for {request.entity_code} url={safe_url}"
        )
    if not raw.ok:
        raise TransientFetchError(
            f"HTTP {resp.status_code} for {request.entity_code} url={safe_url}",
            entity_code=request.entity_code,
            status_code=resp.status_code,
        )
    return raw
