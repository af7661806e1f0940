"""
End-to-end run

key -> fetch (per state, isolated) -> prepare -> validate -> write

Fetch-stage problems are summarized; prepare/validate/write errors propagate
as PipelineStageError so callers see which stage failed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pandas as pd
import requests

from src.oil_production.config import Settings
from src.oil_production.errors import OilPipelineError, PipelineStageError
from src.oil_production.fetch import FetchSummary, StateProductionFetcher
from src.oil_production.io_utils import atomic_write_json, write_dataset_csv
from src.oil_production.prepare import build_dataset
from src.oil_production.validate import ValidationResult, validate_dataset

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    dataset: pd.DataFrame
    fetch_summary: FetchSummary
    validation: ValidationResult
    output_path: Optional[Path] = None

    def as_dict(self) -> dict:
        return {
            "rows": len(self.dataset),
            "states_with_data": len(self.fetch_summary.ok),
            "states_empty": ",".join(sorted(self.fetch_summary.empty)) or "-",
            "states_failed": ",".join(sorted(self.fetch_summary.failed)) or "-",
            "valid": self.validation.is_valid,
            "missing_months": self.validation.n_missing_months,
            "output": str(self.output_path) if self.output_path else "-",
        }


def _run_stage(stage: str, fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except (OilPipelineError, ValueError, LookupError, OSError) as e:
        logger.error("[pipeline][STAGE_FAIL] stage=%s error=%s: %s", stage, type(e).__name__, e)
        raise PipelineStageError(stage, e) from e


def run_pipeline(
    settings: Settings,
    *,
    session: Optional[requests.Session] = None,
    write: bool = True,
) -> PipelineResult:
    """Run the full pipeline for the configured states."""
    run_ts = datetime.now(timezone.utc)
    fetcher = StateProductionFetcher(settings, session=session)

    fetched = fetcher.fetch_all_states()
    summary = fetched.summary
    if summary.zero_row_states:
        logger.info(
            "[pipeline][FETCH] zero-row states=%d empty=%s failed=%s",
            len(summary.zero_row_states), sorted(summary.empty), sorted(summary.failed),
        )
    if not summary.ok:
        # Nothing usable: keep any previous output instead of overwriting it
        error_details = "; ".join(f"{s}({msg[:80]})" for s, msg in sorted(summary.failed.items()))
        raise PipelineStageError(
            "fetch",
            RuntimeError(
                f"No state returned data. failed={len(summary.failed)} empty={len(summary.empty)}. "
                f"Failures: {error_details or '-'}"
            ),
        )

    dataset = _run_stage("prepare", build_dataset, fetched.records)
    validation = _run_stage("validate", validate_dataset, dataset)
    if not validation.is_valid:
        raise PipelineStageError(
            "validate", ValueError(f"Dataset failed validation: {validation.as_dict()}")
        )

    output_path: Optional[Path] = None
    if write:
        output_path = _run_stage("write", write_dataset_csv, dataset, Path(settings.output_path))
        meta = {
            "run_at": run_ts.isoformat(),
            "series_template": settings.series_template,
            "rows": len(dataset),
            "states": sorted(dataset["entity_code"].unique().tolist()),
            "fetch": summary.as_dict(),
            "validation": validation.as_dict(),
        }
        _run_stage("write", atomic_write_json, meta, settings.meta_path())
        logger.info("[pipeline][WRITE] path=%s rows=%d", output_path, len(dataset))

    return PipelineResult(
        dataset=dataset,
        fetch_summary=summary,
        validation=validation,
        output_path=output_path,
    )
