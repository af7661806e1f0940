"""Tests for request building, the HTTP wrapper and configuration."""

from unittest.mock import MagicMock

import pytest
import requests

from src.oil_production.client import RawResponse, create_session, fetch_raw
from src.oil_production.config import Settings, load_api_key, load_settings, mask_key
from src.oil_production.errors import ConfigurationError, TransientFetchError
from src.oil_production.request import build_request, check_series_template, scrub_key
from src.oil_production.states import (
    STATES,
    get_state_info,
    get_state_name,
    list_states,
    parse_state_list,
    validate_state,
)


class TestStates:
    """Tests for the state code domain."""

    def test_fifty_states(self):
        assert len(STATES) == 50
        assert all(len(code) == 2 and code.isupper() for code in STATES)

    def test_list_states_sorted(self):
        states = list_states()
        assert states == sorted(states)
        assert states[0] == "AK"

    def test_get_state_name(self):
        assert get_state_name("TX") == "Texas"
        assert get_state_name("ND") == "North Dakota"

    def test_get_state_info(self):
        info = get_state_info("AK")
        assert info.name == "Alaska"
        assert info.region == "PADD 5"

    def test_get_state_name_invalid(self):
        with pytest.raises(KeyError):
            get_state_name("ZZ")

    def test_validate_state(self):
        assert validate_state("CT") is True
        assert validate_state("DC") is False
        assert validate_state("tx") is False

    def test_parse_state_list(self):
        assert parse_state_list("tx, nd,,NM ") == ["TX", "ND", "NM"]


class TestBuildRequest:
    """Request Builder: template substitution and fail-fast configuration."""

    def test_builds_series_id_and_params(self):
        req = build_request("TX", "abc123")
        assert req.entity_code == "TX"
        assert req.series_id == "PET.MCRFPTX1.M"
        assert req.url == "https://api.eia.gov/series/"
        assert req.params == {"api_key": "abc123", "series_id": "PET.MCRFPTX1.M"}

    def test_custom_template(self):
        req = build_request("ND", "abc123", template="PET.M_EPC0_FPF_S{state}_MBBLD.M")
        assert req.series_id == "PET.M_EPC0_FPF_SND_MBBLD.M"

    @pytest.mark.parametrize("key", ["", "   "])
    def test_empty_key_rejected(self, key):
        with pytest.raises(ConfigurationError, match="empty"):
            build_request("TX", key)

    def test_template_without_slot_rejected(self):
        with pytest.raises(ConfigurationError, match="no \\{state\\} slot"):
            build_request("TX", "abc123", template="PET.MCRFPUS1.M")

    def test_template_with_unknown_slot_rejected(self):
        with pytest.raises(ConfigurationError, match="unknown slots"):
            check_series_template("PET.MCRFP{state}{freq}.M")

    def test_template_unbalanced_brace_rejected(self):
        with pytest.raises(ConfigurationError, match="Malformed"):
            check_series_template("PET.MCRFP{state")

    def test_unknown_state_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown state"):
            build_request("ZZ", "abc123")

    def test_repr_masks_key(self):
        req = build_request("TX", "supersecretkey99")
        assert "supersecretkey99" not in repr(req)
        assert "supe...ey99" in repr(req)

    def test_safe_url_strips_key(self):
        req = build_request("TX", "supersecretkey99")
        assert "api_key" not in req.safe_url
        assert "series_id=PET.MCRFPTX1.M" in req.safe_url


class TestFetchRaw:
    """HTTP wrapper: status classification, no retries."""

    def test_success_returns_raw_response(self, response_factory):
        session = MagicMock()
        session.get.return_value = response_factory({"series": []})
        req = build_request("TX", "abc123")

        raw = fetch_raw(session, req, timeout=7)

        assert isinstance(raw, RawResponse)
        assert raw.ok
        assert raw.content == b'{"series": []}'
        assert "api_key" not in raw.url
        session.get.assert_called_once_with(req.url, params=req.params, timeout=7)

    def test_non_success_status_raises(self, response_factory):
        session = MagicMock()
        session.get.return_value = response_factory(content=b"not found", status_code=404)

        with pytest.raises(TransientFetchError) as exc_info:
            fetch_raw(session, build_request("TX", "abc123"))

        assert exc_info.value.status_code == 404
        assert exc_info.value.entity_code == "TX"
        assert session.get.call_count == 1

    def test_network_error_raises_without_leaking_key(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("failed url=...api_key=abc123secret")

        with pytest.raises(TransientFetchError) as exc_info:
            fetch_raw(session, build_request("OK", "abc123secret"))

        assert "abc123secret" not in str(exc_info.value)
        assert exc_info.value.status_code is None

    def test_network_error_masks_url_encoded_key(self):
        """Keys with URL-reserved characters appear percent-encoded in requests errors."""
        key = "ab+cd/ef=="
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError(
            "Max retries exceeded with url: /series/?api_key=ab%2Bcd%2Fef%3D%3D&series_id=PET.MCRFPTX1.M"
        )

        with pytest.raises(TransientFetchError) as exc_info:
            fetch_raw(session, build_request("TX", key))

        msg = str(exc_info.value)
        assert "ab%2Bcd%2Fef%3D%3D" not in msg
        assert key not in msg
        assert "api_key=***" in msg
        assert "series_id=PET.MCRFPTX1.M" in msg

    @pytest.mark.parametrize("status", [401, 403])
    def test_rejected_key_is_configuration_error(self, response_factory, status):
        session = MagicMock()
        session.get.return_value = response_factory(content=b"invalid api_key", status_code=status)

        with pytest.raises(ConfigurationError, match=f"HTTP {status}"):
            fetch_raw(session, build_request("TX", "abc123"))

    def test_scrub_key_variants(self):
        key = "k/y+1="
        text = f"raw={key} plus=k%2Fy%2B1%3D quoted=k%2Fy%2B1%3D url=?api_key=anything&x=1"
        scrubbed = scrub_key(text, key)
        assert "k/y+1=" not in scrubbed
        assert "k%2Fy%2B1%3D" not in scrubbed
        assert "api_key=***&x=1" in scrubbed

    def test_create_session_mounts_retry(self):
        session = create_session(max_retries=2, backoff_factor=0.1)
        adapter = session.get_adapter("https://api.eia.gov/series/")
        assert adapter.max_retries.total == 2
        assert 503 in adapter.max_retries.status_forcelist

    def test_create_session_without_retries(self):
        session = create_session(max_retries=0)
        adapter = session.get_adapter("https://api.eia.gov/series/")
        assert adapter.max_retries.total == 0


class TestConfig:
    """Key Provider and Settings."""

    @pytest.fixture(autouse=True)
    def _isolate_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for name in ("EIA_API_KEY", "OIL_MAX_WORKERS", "OIL_TIMEOUT", "OIL_OUTPUT_PATH"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setattr("src.oil_production.config.find_dotenv", lambda usecwd=True: "")

    def test_key_from_env(self, monkeypatch):
        monkeypatch.setenv("EIA_API_KEY", " envkey123 ")
        assert load_api_key() == "envkey123"

    def test_key_from_file(self, tmp_path):
        key_file = tmp_path / "eia.key"
        key_file.write_text("\n  filekey456\n")
        assert load_api_key(str(key_file)) == "filekey456"

    def test_missing_key_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_api_key(str(tmp_path / "nope.key"))

    def test_empty_key_file(self, tmp_path):
        key_file = tmp_path / "eia.key"
        key_file.write_text("\n\n")
        with pytest.raises(ConfigurationError, match="empty"):
            load_api_key(str(key_file))

    def test_no_key_anywhere(self):
        with pytest.raises(ConfigurationError, match="EIA API key required"):
            load_api_key()

    def test_load_settings_env_overrides(self, monkeypatch):
        monkeypatch.setenv("OIL_MAX_WORKERS", "4")
        monkeypatch.setenv("OIL_TIMEOUT", "12.5")
        monkeypatch.setenv("OIL_OUTPUT_PATH", "out/oil.csv")

        s = load_settings(api_key="k" * 10)

        assert s.max_workers == 4
        assert s.timeout == 12.5
        assert s.output_path == "out/oil.csv"
        assert str(s.meta_path()).endswith("oil.meta.json")

    def test_load_settings_rejects_bad_values(self):
        with pytest.raises(ConfigurationError):
            load_settings(api_key="k" * 10, max_workers=0)
        with pytest.raises(ConfigurationError):
            load_settings(api_key="k" * 10, timeout=0)
        with pytest.raises(ConfigurationError, match="Unknown state"):
            load_settings(api_key="k" * 10, states=["TX", "XX"])

    def test_load_settings_rejects_non_numeric_env(self, monkeypatch):
        monkeypatch.setenv("OIL_MAX_WORKERS", "many")
        with pytest.raises(ConfigurationError, match="OIL_MAX_WORKERS"):
            load_settings(api_key="k" * 10)

    @pytest.mark.parametrize("states", [[], parse_state_list(","), parse_state_list("  ")])
    def test_load_settings_rejects_empty_state_list(self, states):
        with pytest.raises(ConfigurationError, match="State list is empty"):
            load_settings(api_key="k" * 10, states=states)

    def test_settings_repr_hides_key(self):
        s = Settings(api_key="verysecretkey")
        assert "verysecretkey" not in repr(s)
        assert s.masked_key() == mask_key("verysecretkey") == "very...tkey"
