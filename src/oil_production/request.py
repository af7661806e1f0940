# file: src/oil_production/request.py
"""Build one parameterized EIA series request per state."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from string import Formatter
from urllib.parse import parse_qsl, quote, quote_plus, urlencode, urlsplit, urlunsplit

import requests

from src.oil_production.config import DEFAULT_BASE_URL, DEFAULT_SERIES_TEMPLATE, mask_key
from src.oil_production.errors import ConfigurationError
from src.oil_production.states import validate_state


def _sanitize_url(url: str) -> str:
    parts = urlsplit(url)
    q = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k.lower() != "api_key"]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(q), parts.fragment))


_API_KEY_PARAM = re.compile(r"(api_key=)[^&\s'\"]+", re.IGNORECASE)


def scrub_key(text: str, api_key: str) -> str:
    """Mask the key in free text (exception messages), raw or URL-encoded."""
    text = _API_KEY_PARAM.sub(r"\1***", text)
    if api_key:
        for variant in sorted({api_key, quote_plus(api_key), quote(api_key, safe="")}, key=len, reverse=True):
            text = text.replace(variant, "***")
    return text


@dataclass(frozen=True)
class SeriesRequest:
    entity_code: str
    url: str
    series_id: str
    params: dict = field(repr=False)

    def __repr__(self) -> str:
        key = self.params.get("api_key", "")
        return (
            f"SeriesRequest(entity_code={self.entity_code!r}, series_id={self.series_id!r}, "
            f"url={self.url!r}, api_key={mask_key(key)!r})"
        )

    @property
    def safe_url(self) -> str:
        """Full request URL with api_key removed, for logs and diagnostics."""
        prepared = requests.Request("GET", self.url, params=self.params).prepare()
        return _sanitize_url(prepared.url)


def check_series_template(template: str) -> None:
    """Raise ConfigurationError unless template has exactly the {state} slot."""
    try:
        fields = {name for _, name, _, _ in Formatter().parse(template) if name is not None}
    except ValueError as e:
        raise ConfigurationError(f"Malformed series template {template!r}: {e}") from e

    if "state" not in fields:
        raise ConfigurationError(f"Series template {template!r} has no {{state}} slot")
    extra = fields - {"state"}
    if extra:
        raise ConfigurationError(f"Series template {template!r} has unknown slots: {sorted(extra)}")


def build_request(
    state: str,
    api_key: str,
    *,
    template: str = DEFAULT_SERIES_TEMPLATE,
    base_url: str = DEFAULT_BASE_URL,
) -> SeriesRequest:
    """
    Build the request descriptor for one state.

    Raises:
        ConfigurationError: empty key, bad template, or unknown state code
    """
    if not api_key or not api_key.strip():
        raise ConfigurationError("API key is empty")
    check_series_template(template)
    if not validate_state(state):
        raise ConfigurationError(f"Unknown state code: {state!r}")

    series_id = template.format(state=state)
    return SeriesRequest(
        entity_code=state,
        url=base_url,
        series_id=series_id,
        params={"api_key": api_key, "series_id": series_id},
    )
