"""
Validate the tidy Dataset

Hard gates (is_valid):
- Uniqueness: no duplicates on [entity_code, period]
- Ordering: sorted by [entity_code, period]
- Values: no nulls in period/value

Reported only:
- Missing months inside each state's observed range
- Negative production values
"""

from dataclasses import dataclass
from typing import List, Tuple

import pandas as pd


@dataclass
class ValidationResult:
    """Results of dataset validation"""
    is_valid: bool
    n_rows: int
    n_states: int
    n_duplicates: int
    n_missing_months: int
    missing_months: List[Tuple[str, pd.Timestamp]]
    n_nulls: int
    n_negative: int
    value_min: float
    value_max: float
    is_sorted: bool

    def as_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "n_rows": self.n_rows,
            "n_states": self.n_states,
            "n_duplicates": self.n_duplicates,
            "n_missing_months": self.n_missing_months,
            "n_nulls": self.n_nulls,
            "n_negative": self.n_negative,
            "is_sorted": self.is_sorted,
        }


def _missing_months(df: pd.DataFrame) -> List[Tuple[str, pd.Timestamp]]:
    missing = []
    for code, sub in df.groupby("entity_code", sort=True):
        periods = sub["period"].dropna()
        if periods.empty:
            continue
        expected = pd.date_range(periods.min(), periods.max(), freq="MS")
        for ts in sorted(set(expected) - set(periods)):
            missing.append((code, ts))
    return missing


def validate_dataset(df: pd.DataFrame) -> ValidationResult:
    """
    Validate the Dataset produced by build_dataset.

    Args:
        df: DataFrame with columns [entity_code, period, value, ...]

    Returns:
        ValidationResult with detailed findings
    """
    # Check 1: Duplicates
    n_duplicates = int(df.duplicated(subset=["entity_code", "period"], keep=False).sum())

    # Check 2: Ordering
    keys = list(zip(df["entity_code"], df["period"]))
    is_sorted = all(a <= b for a, b in zip(keys, keys[1:]))

    # Check 3: Nulls
    n_nulls = int(df["period"].isna().sum() + df["value"].isna().sum())

    # Check 4: Gaps and value range
    missing = _missing_months(df)
    n_negative = int((df["value"] < 0).sum())
    value_min = float(df["value"].min()) if len(df) else float("nan")
    value_max = float(df["value"].max()) if len(df) else float("nan")

    is_valid = (n_duplicates == 0) and (n_nulls == 0) and is_sorted

    return ValidationResult(
        is_valid=is_valid,
        n_rows=len(df),
        n_states=int(df["entity_code"].nunique()),
        n_duplicates=n_duplicates,
        n_missing_months=len(missing),
        missing_months=missing[:10],  # First 10 only
        n_nulls=n_nulls,
        n_negative=n_negative,
        value_min=value_min,
        value_max=value_max,
        is_sorted=is_sorted,
    )


def print_validation_report(result: ValidationResult) -> None:
    """Print a human-readable validation report"""
    status = "PASS" if result.is_valid else "FAIL"
    print(f"\n=== Validation Report: {status} ===")
    print(f"Rows: {result.n_rows} across {result.n_states} states")
    print(f"Duplicates: {result.n_duplicates}")
    print(f"Sorted: {result.is_sorted}")
    print(f"Missing months: {result.n_missing_months}")
    if result.missing_months:
        first = [f"{code} {ts:%Y-%m}" for code, ts in result.missing_months[:5]]
        print(f"  First missing: {first}")
    print(f"Null values: {result.n_nulls}")
    print(f"Negative values: {result.n_negative}")
    print(f"Value range: {result.value_min:.0f} to {result.value_max:.0f}")
