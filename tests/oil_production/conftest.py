"""Shared fixtures: settings and a mocked requests.Session (no network)."""

import json
from unittest.mock import MagicMock

import pytest

from src.oil_production.config import Settings


def make_response(payload=None, *, status_code=200, content=None):
    resp = MagicMock()
    resp.status_code = status_code
    if content is None:
        content = json.dumps(payload).encode("utf-8")
    resp.content = content
    return resp


def v1_payload(rows):
    return {"series": [{"series_id": "PET.MCRFPXX1.M", "data": [list(r) for r in rows]}]}


def make_session(responses):
    """Session whose get() answers by series_id.

    responses maps state code -> response mock, or -> an exception to raise.
    States not in the map get an empty series.
    """
    session = MagicMock()

    def _get(url, params=None, timeout=None):
        state = params["series_id"][len("PET.MCRFP"):-len("1.M")]
        answer = responses.get(state, make_response({"series": [{"data": []}]}))
        if isinstance(answer, Exception):
            raise answer
        return answer

    session.get.side_effect = _get
    return session


@pytest.fixture
def settings():
    return Settings(api_key="test-key-1234567890", max_retries=0, timeout=5.0)


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def session_factory():
    return make_session


@pytest.fixture
def v1():
    return v1_payload
