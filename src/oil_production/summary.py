# file: src/oil_production/summary.py
"""Aggregations over the tidy Dataset."""

from __future__ import annotations

from typing import Optional

import pandas as pd


def annual_production(df: pd.DataFrame) -> pd.DataFrame:
    """Total production per state and year, with month count and mean daily rate."""
    return (
        df.groupby(["entity_code", "entity_name", "year"], as_index=False)
        .agg(
            total=("value", "sum"),
            months=("value", "count"),
            mean_rate_per_day=("rate_per_day", "mean"),
        )
        .sort_values(["entity_code", "year"])
        .reset_index(drop=True)
    )


def top_producers(df: pd.DataFrame, year: Optional[int] = None, n: int = 10) -> pd.DataFrame:
    """Rank states by total production in one year (latest year present by default)."""
    if df.empty:
        return pd.DataFrame(columns=["rank", "entity_code", "entity_name", "year", "total"])

    if year is None:
        year = int(df["year"].max())

    annual = annual_production(df[df["year"] == year])
    ranked = annual.sort_values(["total", "entity_code"], ascending=[False, True]).head(n)
    ranked = ranked.reset_index(drop=True)
    ranked.insert(0, "rank", range(1, len(ranked) + 1))
    return ranked[["rank", "entity_code", "entity_name", "year", "total"]]


def national_monthly(df: pd.DataFrame) -> pd.DataFrame:
    """Sum of state production per month."""
    return (
        df.groupby("period", as_index=False)
        .agg(value=("value", "sum"), states=("entity_code", "nunique"))
        .sort_values("period")
        .reset_index(drop=True)
    )
