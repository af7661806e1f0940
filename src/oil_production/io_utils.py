# file: src/oil_production/io_utils.py
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

import pandas as pd

EXPORT_COLUMNS = ["entity_code", "entity_name", "year", "period", "value"]


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def write_dataset_csv(df: pd.DataFrame, path: Path) -> Path:
    """
    Atomic CSV write: write to temp in same directory, then replace.

    Columns are EXPORT_COLUMNS in that order; period is written as YYYY-MM-DD.
    """
    path = Path(path)
    ensure_dir(path.parent)
    out = df[EXPORT_COLUMNS].copy()
    out["period"] = pd.to_datetime(out["period"]).dt.strftime("%Y-%m-%d")
    tmp = path.with_suffix(path.suffix + ".tmp")
    out.to_csv(tmp, index=False)
    os.replace(tmp, path)
    return path


def atomic_write_json(payload: Dict[str, Any], path: Path) -> None:
    path = Path(path)
    ensure_dir(path.parent)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=str)
    os.replace(tmp, path)
