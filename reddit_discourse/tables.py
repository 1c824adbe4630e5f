"""Reading and writing the CSV tables passed between pipeline steps."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Iterable

import pandas as pd

from .config import REQUIRED_COMMENT_COLUMNS

# Read as text: "1" and "1_1" must not be coerced to numbers, nor a comment
# body that happens to look numeric.
_STRING_COLUMNS = {"url": str, "comment_id": str, "author": str, "comment": str}


def require_columns(df: pd.DataFrame, columns: Iterable[str], what: str = "table") -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{what} is missing required column(s): {', '.join(missing)}")


def load_comments(path: str) -> pd.DataFrame:
    """Load a comments CSV (one row per comment) and check its columns."""
    df = pd.read_csv(path, dtype=_STRING_COLUMNS, keep_default_na=True)
    require_columns(df, REQUIRED_COMMENT_COLUMNS, what=f"comments file {path}")
    return df


def write_table(df: pd.DataFrame, path: str) -> str:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    df.to_csv(path, index=False)
    print(f"[WRITE] {path} ({len(df)} rows)")
    return path


def write_json(data: Dict[str, Any], path: str) -> str:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    print(f"[WRITE] {path}")
    return path
