import hashlib

import pandas as pd

from reddit_discourse.pseudonymize import hash_author, pseudonymize_authors


def test_hash_is_stable_and_one_way():
    h = hash_author("some_redditor")
    assert h == hash_author("some_redditor")
    assert len(h) == 16
    assert "some_redditor" not in h
    assert h == hashlib.sha256(b"some_redditor").hexdigest()[:16]


def test_salt_changes_pseudonym():
    assert hash_author("u", salt="a") != hash_author("u", salt="b")


def test_missing_and_deleted_authors_keep_marker():
    assert hash_author(None) == "[deleted]"
    assert hash_author(float("nan")) == "[deleted]"
    assert hash_author("") == "[deleted]"
    assert hash_author("[deleted]") == "[deleted]"


def test_pseudonymize_returns_hashed_copy():
    df = pd.DataFrame({"author": ["alice", "bob", None], "comment": ["x", "y", "z"]})
    out = pseudonymize_authors(df, salt="s")
    assert list(df["author"][:2]) == ["alice", "bob"]
    assert out.loc[0, "author"] == hash_author("alice", salt="s")
    assert out.loc[2, "author"] == "[deleted]"
    assert list(out["comment"]) == ["x", "y", "z"]


def test_unknown_columns_are_ignored():
    df = pd.DataFrame({"author": ["alice"]})
    out = pseudonymize_authors(df, columns=("author", "parent_author"))
    assert list(out.columns) == ["author"]
