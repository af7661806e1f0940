"""
Post-processing: combined SeriesRecord list -> tidy Dataset

Steps (pure; the input is never mutated):
1. Filter placeholder rows (period is None)
2. Coerce value -> float, period (YYYYMM) -> first-of-month Timestamp
3. Enrich with entity_name and year
4. Derive days_in_month and rate_per_day
5. Sort by (entity_code, period) and enforce uniqueness
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

import pandas as pd

from src.oil_production.errors import DataTypeError, EntityLookupError, IntegrityError
from src.oil_production.normalize import SeriesRecord
from src.oil_production.states import STATES

logger = logging.getLogger(__name__)

DATASET_COLUMNS = [
    "entity_code",
    "entity_name",
    "year",
    "period",
    "value",
    "days_in_month",
    "rate_per_day",
]
KEY_COLUMNS = ["entity_code", "period"]


def records_to_frame(records: Iterable[SeriesRecord]) -> pd.DataFrame:
    """Untyped frame: every field is a str or None."""
    rows = [{"entity_code": r.entity_code, "period": r.period, "value": r.value} for r in records]
    return pd.DataFrame(rows, columns=["entity_code", "period", "value"], dtype=object)


def empty_dataset() -> pd.DataFrame:
    return pd.DataFrame({
        "entity_code": pd.Series(dtype=object),
        "entity_name": pd.Series(dtype=object),
        "year": pd.Series(dtype="int64"),
        "period": pd.Series(dtype="datetime64[ns]"),
        "value": pd.Series(dtype="float64"),
        "days_in_month": pd.Series(dtype="int64"),
        "rate_per_day": pd.Series(dtype="float64"),
    })


def _coerce(df: pd.DataFrame) -> pd.DataFrame:
    bad_value = df["value"].isna()
    values = pd.to_numeric(df["value"].where(~bad_value), errors="coerce")
    bad_value |= values.isna()

    period_str = df["period"].astype(str)
    periods = pd.to_datetime(period_str, format="%Y%m", errors="coerce")
    bad_period = ~period_str.str.fullmatch(r"\d{6}") | periods.isna()

    if bad_value.any() or bad_period.any():
        bad = df[bad_value | bad_period]
        sample = bad.head(5).to_dict(orient="records")
        raise DataTypeError(
            f"Could not coerce {int(bad_value.sum())} values and {int(bad_period.sum())} periods. "
            f"states={sorted(bad['entity_code'].unique().tolist())} sample={sample}"
        )

    out = df.copy()
    out["value"] = values.astype("float64")
    out["period"] = periods
    return out


def add_days_in_month(df: pd.DataFrame) -> pd.DataFrame:
    """days_in_month = day of (first of next month - 1 day); rate_per_day = value / days."""
    df = df.copy()
    month_end = df["period"] + pd.offsets.MonthBegin(1) - pd.Timedelta(days=1)
    df["days_in_month"] = month_end.dt.day.astype("int64")
    df["rate_per_day"] = df["value"] / df["days_in_month"]
    return df


def build_dataset(
    records: Iterable[SeriesRecord],
    *,
    names: Optional[Mapping[str, str]] = None,
) -> pd.DataFrame:
    """
    Build the final Dataset from the combined fetch output.

    Args:
        records: SeriesRecord list from the batch fetch (placeholders included)
        names: state code -> display name (defaults to STATES)

    Returns:
        DataFrame with DATASET_COLUMNS, sorted and unique on (entity_code, period)

    Raises:
        DataTypeError: a kept record has an unparseable value or period
        EntityLookupError: a state code has no display name
        IntegrityError: duplicate (entity_code, period) keys
    """
    if names is None:
        names = {code: info.name for code, info in STATES.items()}

    records = list(records)
    n_raw = len(records)

    # Step 1: Filter no-data placeholders
    kept = records_to_frame(r for r in records if not r.is_placeholder)
    if kept.empty:
        logger.info("[prepare] rows_in=%d rows_kept=0", n_raw)
        return empty_dataset()

    # Step 2: Coercion
    df = _coerce(kept)

    # Step 3: Enrichment
    df["entity_name"] = df["entity_code"].map(names)
    unmapped = df.loc[df["entity_name"].isna(), "entity_code"].unique().tolist()
    if unmapped:
        raise EntityLookupError(f"No display name for state codes: {sorted(unmapped)}")
    df["year"] = df["period"].dt.year.astype("int64")

    # Step 4: Derived rate
    df = add_days_in_month(df)

    # Step 5: Ordering & keying
    dup_mask = df.duplicated(subset=KEY_COLUMNS, keep=False)
    if dup_mask.any():
        dups = (
            df.loc[dup_mask, KEY_COLUMNS]
            .drop_duplicates()
            .assign(period=lambda x: x["period"].dt.strftime("%Y-%m"))
            .head(10)
            .to_dict(orient="records")
        )
        raise IntegrityError(f"{int(dup_mask.sum())} rows share (entity_code, period) keys: {dups}")

    df = df.sort_values(KEY_COLUMNS, kind="mergesort").reset_index(drop=True)
    df = df[DATASET_COLUMNS]

    logger.info(
        "[prepare] rows_in=%d rows_kept=%d states=%d range=[%s, %s]",
        n_raw, len(df), df["entity_code"].nunique(),
        df["period"].min().strftime("%Y-%m"), df["period"].max().strftime("%Y-%m"),
    )
    return df
