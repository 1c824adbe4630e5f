"""
Reply-tree reconstruction from flat comment tables.

Each comment id is an ancestry path ("1_4_2": 2nd reply under the 4th reply
under the 1st top-level comment). Parsing the id gives the parent directly, so
a thread's comment table can be turned into a directed edge list
(parent -> reply) without any lookups beyond "does the parent exist here".

Comment ids are only unique inside one thread, so reconstruction always works
on a single `url` at a time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import pandas as pd

from .config import COMMENT_ID_DELIMITER, EDGE_COLUMNS
from .tables import require_columns


@dataclass(frozen=True, order=True)
class CommentPath:
    """A parsed comment id: sibling positions from the thread root down."""

    segments: Tuple[int, ...]

    @classmethod
    def parse(cls, text: Any, delimiter: str = COMMENT_ID_DELIMITER) -> "CommentPath":
        if text is None or (not isinstance(text, str) and pd.isna(text)):
            raise ValueError("comment id is missing")
        raw = str(text).strip()
        if not raw:
            raise ValueError("comment id is empty")
        parts = raw.split(delimiter)
        if not all(p.isdigit() for p in parts):
            raise ValueError(f"malformed comment id: {raw!r}")
        return cls(tuple(int(p) for p in parts))

    @property
    def depth(self) -> int:
        return len(self.segments)

    @property
    def is_top_level(self) -> bool:
        return len(self.segments) == 1

    @property
    def parent(self) -> Optional["CommentPath"]:
        if self.is_top_level:
            return None
        return CommentPath(self.segments[:-1])

    def child(self, position: int) -> "CommentPath":
        return CommentPath(self.segments + (position,))

    def __str__(self) -> str:
        return COMMENT_ID_DELIMITER.join(str(s) for s in self.segments)


def try_parse(text: Any) -> Optional[CommentPath]:
    """Parse a comment id, or None when it carries no usable path."""
    try:
        return CommentPath.parse(text)
    except ValueError:
        return None


def comment_depth(text: Any) -> Optional[int]:
    """Nesting depth: number of delimiters plus one (None for a missing id)."""
    if text is None or (not isinstance(text, str) and pd.isna(text)):
        return None
    return str(text).count(COMMENT_ID_DELIMITER) + 1


def annotate_paths(comments: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with `depth` and `parent_id` columns.

    `parent_id` is None for top-level comments and for ids that do not parse.
    It is the parent record's own id when the parent is in the table, else
    the canonical form of the parent path.
    """
    require_columns(comments, ["comment_id"], what="comments")
    out = comments.copy()
    out["depth"] = out["comment_id"].map(comment_depth).astype("Int64")

    paths = [try_parse(cid) for cid in out["comment_id"]]
    ids = _ids_by_path(paths, out["comment_id"])
    parent_ids = []
    for path in paths:
        parent = path.parent if path is not None else None
        parent_ids.append(None if parent is None else ids.get(parent, str(parent)))
    # object dtype so top-level rows keep None rather than NaN
    out["parent_id"] = pd.Series(parent_ids, index=out.index, dtype=object)
    return out


def _ids_by_path(paths, ids) -> Dict[CommentPath, Any]:
    """Parsed path -> the id as written in the first record holding it."""
    lookup: Dict[CommentPath, Any] = {}
    for path, cid in zip(paths, ids):
        if path is not None and path not in lookup:
            lookup[path] = cid
    return lookup


def reconstruct_thread(comments: pd.DataFrame) -> pd.DataFrame:
    """Directed reply edges (`from` parent id, `to` reply id) for ONE thread.

    `author_from` carries the author of the replying comment. Replies whose
    parent is not in the table (deleted, never fetched) are dropped, as are
    top-level comments and ids that do not parse.

    Ids are matched by parsed path ("01_1" is a reply to "1") but emitted as
    written in the table, so every `from` and `to` is one of the thread's own
    comment ids. When several records share a path, the first one wins.
    """
    if comments.empty:
        return pd.DataFrame(columns=EDGE_COLUMNS)
    require_columns(comments, ["comment_id", "author"], what="comments")

    if "url" in comments.columns:
        urls = comments["url"].dropna().unique()
        if len(urls) > 1:
            raise ValueError(
                f"reconstruct_thread got {len(urls)} threads; use reconstruct_threads for multi-thread tables"
            )

    paths = [try_parse(cid) for cid in comments["comment_id"]]
    ids = _ids_by_path(paths, comments["comment_id"])

    rows = []
    seen = set()
    for path, cid, author in zip(paths, comments["comment_id"], comments["author"]):
        if path is None or path.is_top_level or path in seen:
            continue
        seen.add(path)
        parent = path.parent
        if parent not in ids:
            continue
        rows.append({"from": ids[parent], "to": cid, "author_from": author})

    return pd.DataFrame(rows, columns=EDGE_COLUMNS)


def reconstruct_threads(comments: pd.DataFrame) -> pd.DataFrame:
    """Apply `reconstruct_thread` per `url`; the result keeps a `url` column.

    Rows without a url cannot be assigned to a thread and are skipped.
    """
    columns = ["url"] + EDGE_COLUMNS
    if comments.empty:
        return pd.DataFrame(columns=columns)
    require_columns(comments, ["url", "comment_id", "author"], what="comments")

    frames = []
    for url, group in comments.groupby("url", sort=False):
        edges = reconstruct_thread(group)
        if edges.empty:
            continue
        edges.insert(0, "url", url)
        frames.append(edges)

    if not frames:
        return pd.DataFrame(columns=columns)
    return pd.concat(frames, ignore_index=True)[columns]
