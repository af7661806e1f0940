"""
Configuration + Secrets

Keep EIA_API_KEY in env (prod) / .env (local), or point at a key file.
Use a Settings object so every run logs the same config.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from src.oil_production.errors import ConfigurationError
from src.oil_production.states import validate_state

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.eia.gov/series/"
# Crude oil field production by state, monthly (thousand barrels)
DEFAULT_SERIES_TEMPLATE = "PET.MCRFP{state}1.M"
DEFAULT_OUTPUT_PATH = "data/state_oil_production.csv"


@dataclass(frozen=True)
class Settings:
    """Configuration for the state oil production pipeline"""
    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    series_template: str = DEFAULT_SERIES_TEMPLATE
    timeout: float = 30.0
    max_workers: int = 1
    max_retries: int = 3
    backoff_factor: float = 0.5
    output_path: str = DEFAULT_OUTPUT_PATH
    states: Optional[tuple[str, ...]] = None

    def masked_key(self) -> str:
        return mask_key(self.api_key)

    def meta_path(self) -> Path:
        out = Path(self.output_path)
        return out.with_name(out.stem + ".meta.json")


def mask_key(api_key: str) -> str:
    return api_key[:4] + "..." + api_key[-4:] if len(api_key) >= 8 else "***"


def _load_env_once() -> Optional[str]:
    """Load .env walking up from the CWD. Returns the path loaded (or None)."""
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)
        logger.debug("Loaded .env via find_dotenv: %s", dotenv_path)
        return dotenv_path
    return None


def load_api_key(key_file: Optional[str] = None) -> str:
    """
    Return the EIA API key.

    Lookup order:
    1. EIA_API_KEY from the environment (after loading .env)
    2. First non-empty line of key_file

    Raises:
        ConfigurationError: if no key can be found
    """
    loaded_env = _load_env_once()

    api_key = (os.getenv("EIA_API_KEY") or "").strip()
    if api_key:
        return api_key

    if key_file:
        path = Path(key_file).expanduser()
        if not path.is_file():
            raise ConfigurationError(f"API key file not found: {path}")
        for line in path.read_text(encoding="utf-8").splitlines():
            if line.strip():
                return line.strip()
        raise ConfigurationError(f"API key file is empty: {path}")

    raise ConfigurationError(
        "EIA API key required but not found.\n"
        "- Set EIA_API_KEY in .env or the environment, OR\n"
        "- Pass a key file path.\n"
        f"Loaded .env path: {loaded_env}"
    )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def load_settings(
    *,
    api_key: Optional[str] = None,
    key_file: Optional[str] = None,
    states: Optional[list[str]] = None,
    max_workers: Optional[int] = None,
    timeout: Optional[float] = None,
    output_path: Optional[str] = None,
    base_url: str = DEFAULT_BASE_URL,
    series_template: str = DEFAULT_SERIES_TEMPLATE,
    max_retries: int = 3,
    backoff_factor: float = 0.5,
) -> Settings:
    """
    Build and validate Settings.

    Explicit arguments win over OIL_MAX_WORKERS / OIL_TIMEOUT / OIL_OUTPUT_PATH.
    """
    key = api_key if api_key is not None else load_api_key(key_file)
    if not key or not key.strip():
        raise ConfigurationError("API key is empty")

    workers = max_workers if max_workers is not None else _env_int("OIL_MAX_WORKERS", 1)
    req_timeout = timeout if timeout is not None else _env_float("OIL_TIMEOUT", 30.0)
    out = output_path or os.getenv("OIL_OUTPUT_PATH") or DEFAULT_OUTPUT_PATH

    if workers < 1:
        raise ConfigurationError(f"max_workers must be >= 1, got {workers}")
    if req_timeout <= 0:
        raise ConfigurationError(f"timeout must be > 0, got {req_timeout}")
    if max_retries < 0:
        raise ConfigurationError(f"max_retries must be >= 0, got {max_retries}")

    state_tuple: Optional[tuple[str, ...]] = None
    if states is not None:
        if not states:
            raise ConfigurationError("State list is empty; omit it to fetch all states")
        unknown = [s for s in states if not validate_state(s)]
        if unknown:
            raise ConfigurationError(f"Unknown state codes: {unknown}")
        state_tuple = tuple(states)

    settings = Settings(
        api_key=key.strip(),
        base_url=base_url,
        series_template=series_template,
        timeout=req_timeout,
        max_workers=workers,
        max_retries=max_retries,
        backoff_factor=backoff_factor,
        output_path=out,
        states=state_tuple,
    )
    logger.info(
        "[config] key=%s workers=%d timeout=%.1fs retries=%d output=%s states=%s",
        settings.masked_key(), settings.max_workers, settings.timeout,
        settings.max_retries, settings.output_path,
        "ALL" if state_tuple is None else ",".join(state_tuple),
    )
    return settings
