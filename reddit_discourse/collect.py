"""
Reddit collection via PRAW.

Two steps, mirroring the usual "find threads, then pull each thread" workflow:

1. `find_thread_urls`: keyword search or a sorted listing inside a subreddit
   (or r/all), returning one row per thread.
2. `get_thread_content`: for each thread URL, expand the full comment forest
   and flatten it into a comments table whose `comment_id` is the ancestry
   path ("1", "1_1", "1_1_2", ...). Authors are pseudonymized here, before
   anything is written to disk.

OAuth, pagination and rate limiting are PRAW's job.
"""

from __future__ import annotations

import datetime as dt
import sys
import time
from collections import deque
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import pandas as pd
import praw
import prawcore
from praw.models import Comment, MoreComments, Submission
from tqdm import tqdm

from .config import (
    COMMENT_COLUMNS,
    DEFAULT_LIMIT,
    DEFAULT_PERIOD,
    DEFAULT_SEARCH_SORT,
    DEFAULT_SORT,
    SEARCH_SORTS,
    SLEEP_BETWEEN_THREADS,
    THREAD_COLUMNS,
    Settings,
)
from .pseudonymize import pseudonymize_authors
from .reply_tree import CommentPath

THREAD_URL_COLUMNS = ["date_utc", "timestamp", "title", "text", "subreddit", "comments", "url"]

# Listing sorts (config.LISTING_SORTS); keyword search takes config.SEARCH_SORTS
SORT_FUNCS = {
    "hot": lambda sr, limit, period: sr.hot(limit=limit),
    "new": lambda sr, limit, period: sr.new(limit=limit),
    "top": lambda sr, limit, period: sr.top(time_filter=period, limit=limit),
    "rising": lambda sr, limit, period: sr.rising(limit=limit),
    "controversial": lambda sr, limit, period: sr.controversial(time_filter=period, limit=limit),
}

SKIPPABLE_ERRORS = (
    prawcore.exceptions.NotFound,
    prawcore.exceptions.Forbidden,
    prawcore.exceptions.Redirect,
)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

def get_reddit_client(settings: Settings) -> praw.Reddit:
    """PRAW client; read-only unless username/password are configured."""
    kwargs: Dict[str, Any] = dict(
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        user_agent=settings.user_agent,
        check_for_async=False,
        ratelimit_seconds=5,
    )
    if settings.is_script_app:
        kwargs.update(username=settings.username, password=settings.password)
    reddit = praw.Reddit(**kwargs)
    if not settings.is_script_app:
        reddit.read_only = True
    return reddit


def _iso_date(ts: Optional[float]) -> Optional[str]:
    if ts is None:
        return None
    return dt.datetime.fromtimestamp(float(ts), tz=dt.timezone.utc).date().isoformat()


def _author_name(thing: Any) -> Optional[str]:
    author = getattr(thing, "author", None)
    return str(author) if author else None


# ---------------------------------------------------------------------------
# Thread discovery
# ---------------------------------------------------------------------------

def find_thread_urls(
    reddit: praw.Reddit,
    subreddit: Optional[str] = None,
    keywords: Optional[str] = None,
    sort: str = DEFAULT_SORT,
    period: str = DEFAULT_PERIOD,
    limit: int = DEFAULT_LIMIT,
) -> pd.DataFrame:
    """One row per thread found by keyword search or listing.

    With `keywords`, `sort` is passed to Reddit search (relevance, hot, top,
    new, comments); without, it selects the subreddit listing. A sort the
    mode does not support falls back to that mode's default with a warning.
    """
    sr = reddit.subreddit(subreddit or "all")
    rows: List[Dict[str, Any]] = []

    if keywords and sort not in SEARCH_SORTS:
        print(f"[WARN] Search does not support sort={sort!r}; using {DEFAULT_SEARCH_SORT!r}", file=sys.stderr)
        sort = DEFAULT_SEARCH_SORT
    elif not keywords and sort not in SORT_FUNCS:
        print(f"[WARN] Listing does not support sort={sort!r}; using {DEFAULT_SORT!r}", file=sys.stderr)
        sort = DEFAULT_SORT

    try:
        if keywords:
            iterator = sr.search(keywords, sort=sort, time_filter=period, limit=limit)
        else:
            iterator = SORT_FUNCS[sort](sr, limit, period)
        for sub in iterator:
            rows.append({
                "date_utc": _iso_date(sub.created_utc),
                "timestamp": int(sub.created_utc),
                "title": sub.title or "",
                "text": sub.selftext or "",
                "subreddit": str(sub.subreddit),
                "comments": int(sub.num_comments),
                "url": f"https://www.reddit.com{sub.permalink}",
            })
    except SKIPPABLE_ERRORS as e:
        print(f"[WARN] r/{subreddit or 'all'} unavailable: {e.__class__.__name__}", file=sys.stderr)
    except (prawcore.exceptions.PrawcoreException, praw.exceptions.PRAWException) as e:
        print(f"[ERROR] Fetching r/{subreddit or 'all'}: {e}", file=sys.stderr)

    return pd.DataFrame(rows, columns=THREAD_URL_COLUMNS)


# ---------------------------------------------------------------------------
# Thread content
# ---------------------------------------------------------------------------

def assign_comment_paths(forest: Iterable[Any]) -> Iterator[Tuple[CommentPath, Comment]]:
    """Yield (path, comment) breadth-first over a comment forest.

    Top-level comments are numbered 1..n in forest order; the k-th reply of a
    comment gets the parent's path extended by k. MoreComments stubs are
    skipped (expand them with `replace_more` first).
    """
    queue = deque()
    position = 0
    for c in forest:
        if isinstance(c, MoreComments):
            continue
        position += 1
        queue.append((CommentPath((position,)), c))

    while queue:
        path, c = queue.popleft()
        yield path, c
        position = 0
        for reply in getattr(c, "replies", []) or []:
            if isinstance(reply, MoreComments):
                continue
            position += 1
            queue.append((path.child(position), reply))


def submission_to_dict(sub: Submission, url: str) -> Dict[str, Any]:
    return {
        "url": url,
        "author": _author_name(sub),
        "date": _iso_date(sub.created_utc),
        "timestamp": int(sub.created_utc),
        "title": sub.title or "",
        "text": sub.selftext or "",
        "subreddit": str(sub.subreddit),
        "score": sub.score,
        "upvotes": getattr(sub, "ups", None),
        "downvotes": getattr(sub, "downs", None),
        "up_ratio": getattr(sub, "upvote_ratio", None),
        "total_awards_received": getattr(sub, "total_awards_received", 0),
        "golds": getattr(sub, "gilded", 0),
        "cross_posts": getattr(sub, "num_crossposts", 0),
        "comments": sub.num_comments,
    }


def comment_to_dict(com: Comment, path: CommentPath, url: str) -> Dict[str, Any]:
    created = getattr(com, "created_utc", None)
    return {
        "url": url,
        "author": _author_name(com),
        "date": _iso_date(created),
        "timestamp": int(created) if created is not None else None,
        "score": getattr(com, "score", None),
        "upvotes": getattr(com, "ups", None),
        "downvotes": getattr(com, "downs", None),
        "golds": getattr(com, "gilded", 0),
        "comment": com.body or "",
        "comment_id": str(path),
    }


def fetch_thread(reddit: praw.Reddit, url: str) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """Fetch one thread and its fully expanded, path-encoded comments."""
    sub = reddit.submission(url=url)
    sub.comment_sort = "old"
    sub.comments.replace_more(limit=None)
    thread = submission_to_dict(sub, url)
    comments = [comment_to_dict(c, path, url) for path, c in assign_comment_paths(sub.comments)]
    return thread, comments


def get_thread_content(
    reddit: praw.Reddit,
    urls: Iterable[str],
    hash_salt: str = "",
    sleep_seconds: float = SLEEP_BETWEEN_THREADS,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Return (threads, comments) for the given thread URLs, authors hashed.

    Threads that cannot be fetched are reported and skipped.
    """
    threads: List[Dict[str, Any]] = []
    comments: List[Dict[str, Any]] = []

    for url in tqdm(list(urls), desc="threads"):
        try:
            thread, thread_comments = fetch_thread(reddit, url)
        except SKIPPABLE_ERRORS as e:
            print(f"[WARN] Skipping {url}: {e.__class__.__name__}", file=sys.stderr)
            continue
        except prawcore.exceptions.TooManyRequests as e:
            wait = getattr(e, "sleep_time", None) or 5
            print(f"[WARN] Rate limited on {url}; sleeping {wait}s and skipping", file=sys.stderr)
            time.sleep(wait)
            continue
        except (prawcore.exceptions.PrawcoreException, praw.exceptions.PRAWException) as e:
            print(f"[ERROR] Fetching {url}: {e}", file=sys.stderr)
            continue
        threads.append(thread)
        comments.extend(thread_comments)
        if sleep_seconds:
            time.sleep(sleep_seconds)

    threads_df = pseudonymize_authors(pd.DataFrame(threads, columns=THREAD_COLUMNS), salt=hash_salt)
    comments_df = pseudonymize_authors(pd.DataFrame(comments, columns=COMMENT_COLUMNS), salt=hash_salt)
    return threads_df, comments_df
