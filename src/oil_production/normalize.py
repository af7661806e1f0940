# file: src/oil_production/normalize.py
"""
Response Normalizer

Turns one EIA payload into a list of SeriesRecord with string fields.
Typed coercion happens later, once, in prepare.build_dataset.

Accepted shapes:
- v1:  {"series": [{"data": [["202101", "1000"], ...]}]}
- v2:  {"response": {"data": [{"period": "2021-01", "value": 1000}, ...]}}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from src.oil_production.errors import MalformedResponseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeriesRecord:
    """One observation. period/value are None on a no-data placeholder."""
    entity_code: str
    period: Optional[str]
    value: Optional[str]

    @property
    def is_placeholder(self) -> bool:
        return self.period is None


def _as_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    return str(v)


def _find_error_text(payload: dict) -> Optional[str]:
    for container in (payload, payload.get("data"), payload.get("response")):
        if isinstance(container, dict) and container.get("error"):
            return str(container["error"])
    return None


def _v1_entries(payload: dict, entity_code: str) -> Optional[list]:
    series = payload.get("series")
    if not series:
        return None
    if not isinstance(series, list) or not isinstance(series[0], dict):
        raise MalformedResponseError(
            f"'series' is not a list of objects for {entity_code}. type={type(series).__name__}",
            entity_code=entity_code,
        )
    data = series[0].get("data")
    if data is None:
        return None
    if not isinstance(data, list):
        raise MalformedResponseError(
            f"series[0]['data'] is not a list for {entity_code}. type={type(data).__name__}",
            entity_code=entity_code,
        )
    return data


def _v2_entries(payload: dict, entity_code: str) -> Optional[list]:
    response = payload.get("response")
    if not isinstance(response, dict):
        return None
    data = response.get("data")
    if data is None:
        return None
    if not isinstance(data, list):
        raise MalformedResponseError(
            f"response['data'] is not a list for {entity_code}. type={type(data).__name__}",
            entity_code=entity_code,
        )
    return data


def _v1_record(entry: Any, entity_code: str, i: int) -> SeriesRecord:
    if not isinstance(entry, (list, tuple)) or len(entry) != 2:
        raise MalformedResponseError(
            f"Expected [period, value] pair at data[{i}] for {entity_code}, got {entry!r}",
            entity_code=entity_code,
        )
    period, value = entry
    return SeriesRecord(entity_code=entity_code, period=_as_str(period), value=_as_str(value))


def _v2_record(entry: Any, entity_code: str, i: int) -> SeriesRecord:
    if not isinstance(entry, dict):
        raise MalformedResponseError(
            f"Expected object at data[{i}] for {entity_code}, got {type(entry).__name__}",
            entity_code=entity_code,
        )
    missing = [k for k in ("period", "value") if k not in entry]
    if missing:
        raise MalformedResponseError(
            f"data[{i}] for {entity_code} missing keys {missing}. keys={sorted(entry.keys())}",
            entity_code=entity_code,
        )
    period = _as_str(entry["period"])
    if period is not None:
        # "2021-01" -> "202101"
        period = period.replace("-", "")
    return SeriesRecord(entity_code=entity_code, period=period, value=_as_str(entry["value"]))


def parse_series_payload(content: Union[bytes, str], entity_code: str) -> list[SeriesRecord]:
    """
    Parse a raw payload into SeriesRecord entries for one state.

    Returns:
        List of records in source order. Empty when the state has no series.

    Raises:
        MalformedResponseError: payload is not JSON or does not match either shape
    """
    try:
        payload = json.loads(content)
    except (ValueError, TypeError) as e:
        raise MalformedResponseError(
            f"Payload for {entity_code} is not valid JSON: {e}", entity_code=entity_code
        ) from e

    if not isinstance(payload, dict):
        raise MalformedResponseError(
            f"Payload for {entity_code} is not an object. type={type(payload).__name__}",
            entity_code=entity_code,
        )

    if "series" in payload:
        entries = _v1_entries(payload, entity_code)
        to_record = _v1_record
    else:
        entries = _v2_entries(payload, entity_code)
        to_record = _v2_record

    if not entries:
        error_text = _find_error_text(payload)
        if error_text:
            logger.info("[normalize][NO_SERIES] state=%s error=%s", entity_code, error_text)
        else:
            logger.info("[normalize][NO_SERIES] state=%s", entity_code)
        return []

    return [to_record(entry, entity_code, i) for i, entry in enumerate(entries)]
