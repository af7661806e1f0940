# file: src/oil_production/fetch.py
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Optional, Sequence

import requests

from src.oil_production.client import create_session, fetch_raw
from src.oil_production.config import Settings
from src.oil_production.errors import ConfigurationError, MalformedResponseError, TransientFetchError
from src.oil_production.normalize import SeriesRecord, parse_series_payload
from src.oil_production.request import build_request, check_series_template
from src.oil_production.states import list_states, validate_state

logger = logging.getLogger(__name__)


@dataclass
class FetchSummary:
    """Per-run outcome of the batch fetch."""
    processed: int = 0
    rows: int = 0
    ok: list[str] = field(default_factory=list)
    empty: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    malformed: list[str] = field(default_factory=list)

    @property
    def zero_row_states(self) -> list[str]:
        return sorted(self.empty + list(self.failed))

    def as_dict(self) -> dict:
        return {
            "processed": self.processed,
            "rows": self.rows,
            "ok": len(self.ok),
            "empty": sorted(self.empty),
            "failed": dict(sorted(self.failed.items())),
        }


@dataclass
class FetchResult:
    records: list[SeriesRecord]
    summary: FetchSummary


class StateProductionFetcher:
    """Fetch monthly crude oil production for each state, one request per state."""

    def __init__(self, settings: Settings, *, session: Optional[requests.Session] = None):
        check_series_template(settings.series_template)
        self.settings = settings
        self.session = session or create_session(settings.max_retries, settings.backoff_factor)

    def fetch_state(self, state: str, *, diag: Optional[dict] = None) -> list[SeriesRecord]:
        """
        Build -> fetch -> normalize for one state.

        Raises:
            ConfigurationError: before any network call, for a bad state/key/template
            TransientFetchError, MalformedResponseError: per-state failures
        """
        request = build_request(
            state,
            self.settings.api_key,
            template=self.settings.series_template,
            base_url=self.settings.base_url,
        )
        if diag is not None:
            diag.update({
                "state": state,
                "series_id": request.series_id,
                "url": request.safe_url,
                "status_code": None,
                "rows": 0,
                "elapsed": None,
                "error": None,
            })

        start_ts = time.monotonic()
        try:
            raw = fetch_raw(self.session, request, timeout=self.settings.timeout)
            records = parse_series_payload(raw.content, state)
        except (TransientFetchError, MalformedResponseError) as e:
            elapsed = time.monotonic() - start_ts
            logger.warning(
                "[fetch_state][FAIL] state=%s elapsed=%.2fs error=%s", state, elapsed, e
            )
            if diag is not None:
                diag.update({
                    "status_code": getattr(e, "status_code", None),
                    "elapsed": round(elapsed, 3),
                    "error": f"{type(e).__name__}: {e}",
                })
            raise

        elapsed = time.monotonic() - start_ts
        logger.debug(
            "[fetch_state][OK] state=%s status=%s rows=%d elapsed=%.2fs url=%s",
            state, raw.status_code, len(records), elapsed, raw.url,
        )
        if diag is not None:
            diag.update({"status_code": raw.status_code, "rows": len(records), "elapsed": round(elapsed, 3)})
        return records

    def fetch_all_states(
        self,
        states: Optional[Sequence[str]] = None,
        *,
        max_workers: Optional[int] = None,
        diagnostics: Optional[list[dict]] = None,
    ) -> FetchResult:
        """Fetch every state, isolating per-state failures.

        Args:
            states: State codes (defaults to Settings.states, else all 50 sorted)
            max_workers: Parallel workers (1 = sequential)
            diagnostics: Optional list to collect one diagnostic dict per state

        Returns:
            FetchResult with records in input state order. States with no rows
            contribute one placeholder SeriesRecord(state, None, None).
        """
        if states is None:
            states = list(self.settings.states) if self.settings.states else list_states()
        states = list(dict.fromkeys(states))
        workers = max_workers if max_workers is not None else self.settings.max_workers

        # Reject the whole batch before the first request
        unknown = [s for s in states if not validate_state(s)]
        if unknown:
            raise ConfigurationError(f"Unknown state codes: {unknown}")

        summary = FetchSummary()
        by_state: dict[str, list[SeriesRecord]] = {}
        diag_map: dict[str, dict] = {s: {} for s in states}

        def _collect(state: str, records: Optional[list[SeriesRecord]], error: Optional[Exception]) -> None:
            summary.processed += 1
            if error is not None:
                summary.failed[state] = str(error)
                if isinstance(error, MalformedResponseError):
                    summary.malformed.append(state)
                print(f"[FAIL] {state}: {str(error)[:100]}")
                by_state[state] = [SeriesRecord(state, None, None)]
            elif not records:
                summary.empty.append(state)
                print(f"[EMPTY] {state}: 0 rows")
                by_state[state] = [SeriesRecord(state, None, None)]
            else:
                summary.ok.append(state)
                summary.rows += len(records)
                print(f"[OK] {state}: {len(records)} rows")
                by_state[state] = records

        logger.info("[fetch_all_states] states=%d max_workers=%d", len(states), workers)

        if workers <= 1:
            for state in states:
                try:
                    _collect(state, self.fetch_state(state, diag=diag_map[state]), None)
                except (TransientFetchError, MalformedResponseError) as e:
                    _collect(state, None, e)
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self.fetch_state, state, diag=diag_map[state]): state
                    for state in states
                }
                for future in as_completed(futures):
                    state = futures[future]
                    try:
                        _collect(state, future.result(), None)
                    except (TransientFetchError, MalformedResponseError) as e:
                        _collect(state, None, e)

        if diagnostics is not None:
            diagnostics.extend(diag_map[s] for s in states)

        records = [r for s in states for r in by_state[s]]

        if summary.failed:
            print(f"[WARNING] Partial fetch: {len(summary.failed)}/{len(states)} states failed")
            for state, msg in sorted(summary.failed.items()):
                print(f"  - {state}: {msg[:100]}")
        if states and len(summary.malformed) > len(states) / 2:
            logger.warning(
                "[fetch_all_states][SCHEMA] %d/%d payloads malformed; the API contract may have changed",
                len(summary.malformed), len(states),
            )
        if states and not summary.ok:
            logger.error(
                "[fetch_all_states] No state returned data. failed=%s empty=%s",
                sorted(summary.failed), sorted(summary.empty),
            )

        print(
            f"[SUMMARY] {len(summary.ok)} states with data, {summary.rows} rows, "
            f"{len(summary.zero_row_states)} states with zero rows"
        )
        return FetchResult(records=records, summary=summary)
