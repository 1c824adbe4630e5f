"""
Configuration: credentials, defaults, and the knobs shared across the pipeline.

Credentials are read from the environment (optionally populated from a `.env`
file). Everything else is a module-level constant so the CLI can use them as
argparse defaults.

Expected `.env` keys
--------------------
REDDIT_CLIENT_ID=...
REDDIT_CLIENT_SECRET=...
REDDIT_USER_AGENT=reddit-discourse/0.1 by u/yourname
REDDIT_USERNAME=...              (optional; read-only access without it)
REDDIT_PASSWORD=...              (optional)
REDDIT_DISCOURSE_HASH_SALT=...   (optional; salt for author pseudonyms)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_USER_AGENT = "reddit-discourse/0.1"
DEFAULT_OUTPUT_DIR = "./reddit_discourse_out"

# Comment ids encode the ancestry path: "3_5_2" is the 2nd reply under the 5th
# reply under the 3rd top-level comment.
COMMENT_ID_DELIMITER = "_"

REQUIRED_COMMENT_COLUMNS = ["url", "comment_id", "author"]
COMMENT_COLUMNS = [
    "url", "author", "date", "timestamp", "score", "upvotes",
    "downvotes", "golds", "comment", "comment_id",
]
THREAD_COLUMNS = [
    "url", "author", "date", "timestamp", "title", "text", "subreddit",
    "score", "upvotes", "downvotes", "up_ratio", "total_awards_received",
    "golds", "cross_posts", "comments",
]
EDGE_COLUMNS = ["from", "to", "author_from"]

DELETED_AUTHOR = "[deleted]"
AUTHOR_HASH_LENGTH = 16

# Listing / search
LISTING_SORTS = ["hot", "new", "top", "rising", "controversial"]
SEARCH_SORTS = ["relevance", "hot", "top", "new", "comments"]
SORT_CHOICES = LISTING_SORTS + ["relevance", "comments"]
DEFAULT_SEARCH_SORT = "relevance"
PERIOD_CHOICES = ["hour", "day", "week", "month", "year", "all"]
DEFAULT_SORT = "top"
DEFAULT_PERIOD = "month"
DEFAULT_LIMIT = 100
SLEEP_BETWEEN_THREADS = 0.5

# Text analysis
SENTIMENT_POS_THRESHOLD = 0.05
SENTIMENT_NEG_THRESHOLD = -0.05
TOKEN_PATTERN = r"[a-z][a-z']+"
# Reddit boilerplate that survives the English stop word list
EXTRA_STOP_WORDS = [
    "deleted", "removed", "gt", "amp", "nbsp", "https", "http", "www", "com",
    "just", "like", "don't", "it's", "i'm", "im", "dont", "doesn't", "can't",
    "that's", "you're", "i've", "didn't", "isn't",
]

# Topic model
DEFAULT_N_TOPICS = 4
DEFAULT_TOP_TERMS = 10
LDA_SEED = 1234


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------

@dataclass
class Settings:
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    username: Optional[str] = None
    password: Optional[str] = None
    hash_salt: str = ""

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def is_script_app(self) -> bool:
        """True when username/password are set (authenticated, not read-only)."""
        return bool(self.username and self.password)


def load_settings(env_path: Optional[Path] = None) -> Settings:
    """Build Settings from the environment, loading a `.env` file first.

    With no `env_path`, a `.env` in the working directory is used if present.
    An explicit path that does not exist is an error.
    """
    if env_path is not None:
        env_path = Path(env_path)
        if not env_path.exists():
            raise FileNotFoundError(f".env not found at {env_path}")
        load_dotenv(env_path)
    elif Path(".env").exists():
        load_dotenv(Path(".env"))

    return Settings(
        client_id=os.getenv("REDDIT_CLIENT_ID"),
        client_secret=os.getenv("REDDIT_CLIENT_SECRET"),
        user_agent=os.getenv("REDDIT_USER_AGENT", DEFAULT_USER_AGENT),
        username=os.getenv("REDDIT_USERNAME"),
        password=os.getenv("REDDIT_PASSWORD"),
        hash_salt=os.getenv("REDDIT_DISCOURSE_HASH_SALT", ""),
    )
