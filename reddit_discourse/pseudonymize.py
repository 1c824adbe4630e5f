"""One-way pseudonymization of Reddit usernames.

Applied once, at ingestion, so no table written to disk carries raw usernames.
"""

from __future__ import annotations

import hashlib
from typing import Iterable, Optional

import pandas as pd

from .config import AUTHOR_HASH_LENGTH, DELETED_AUTHOR


def hash_author(name: Optional[str], salt: str = "") -> str:
    """Return a stable pseudonym for `name`.

    Missing authors and Reddit's own "[deleted]" marker are kept as the marker
    so they do not collapse into one pseudonymous super-user.
    """
    if name is None or pd.isna(name):
        return DELETED_AUTHOR
    name = str(name).strip()
    if not name or name == DELETED_AUTHOR:
        return DELETED_AUTHOR
    digest = hashlib.sha256((salt + name).encode("utf-8")).hexdigest()
    return digest[:AUTHOR_HASH_LENGTH]


def pseudonymize_authors(df: pd.DataFrame, columns: Iterable[str] = ("author",), salt: str = "") -> pd.DataFrame:
    """Return a copy of `df` with the given author columns hashed."""
    out = df.copy()
    for col in columns:
        if col in out.columns:
            out[col] = out[col].map(lambda a: hash_author(a, salt))
    return out
