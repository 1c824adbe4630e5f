"""
Text analysis over comment tables: cleaning, tokenization, word counts,
VADER sentiment (per comment and per token), and n-gram frequencies.

Token tables are "tidy": one row per (comment, word), carrying the comment's
`url` and `comment_id` so they can be joined back to anything else.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd
from nltk import download as nltk_download
from nltk.sentiment import SentimentIntensityAnalyzer
from nltk.tokenize import RegexpTokenizer
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS, CountVectorizer

from .config import (
    EXTRA_STOP_WORDS,
    SENTIMENT_NEG_THRESHOLD,
    SENTIMENT_POS_THRESHOLD,
    TOKEN_PATTERN,
)

STOP_WORDS = frozenset(ENGLISH_STOP_WORDS.union(EXTRA_STOP_WORDS))

URL_RE = re.compile(r"https?://\S+")
MARKDOWN_LINK_RE = re.compile(r"\[(.*?)\]\((.*?)\)")
HTML_TAG_RE = re.compile(r"<[^>]+>")
WHITESPACE_RE = re.compile(r"\s+")

_tokenizer = RegexpTokenizer(TOKEN_PATTERN)


# ---------------------------------------------------------------------------
# Cleaning & Tokenization
# ---------------------------------------------------------------------------

def clean_text(text: Optional[str]) -> str:
    if not isinstance(text, str) or not text:
        return ""
    # Markdown links keep their text
    text = MARKDOWN_LINK_RE.sub(r"\1", text)
    text = URL_RE.sub(" ", text)
    text = HTML_TAG_RE.sub(" ", text)
    text = text.replace("&amp;", "&").replace("&lt;", "<").replace("&gt;", ">")
    text = text.replace("’", "'")
    text = WHITESPACE_RE.sub(" ", text)
    return text.strip()


def tokenize(text: Optional[str], stop_words: Iterable[str] = STOP_WORDS) -> List[str]:
    """Lowercase word tokens of `text`, stop words removed."""
    stop = stop_words if isinstance(stop_words, (set, frozenset)) else set(stop_words)
    tokens = _tokenizer.tokenize(clean_text(text).lower())
    return [t for t in tokens if t not in stop]


def tokenize_comments(
    df: pd.DataFrame,
    text_col: str = "comment",
    id_cols: Sequence[str] = ("url", "comment_id"),
    stop_words: Iterable[str] = STOP_WORDS,
) -> pd.DataFrame:
    """One row per word token: `id_cols` + `word`."""
    stop = set(stop_words)
    keep = [c for c in id_cols if c in df.columns]
    rows = []
    for rec in df[keep + [text_col]].itertuples(index=False, name=None):
        ids, text = rec[:-1], rec[-1]
        for word in tokenize(text, stop):
            rows.append(ids + (word,))
    return pd.DataFrame(rows, columns=keep + ["word"])


def word_counts(tokens: pd.DataFrame, by: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Word frequencies, optionally within groups, most frequent first."""
    keys = list(by or []) + ["word"]
    if tokens.empty:
        return pd.DataFrame(columns=keys + ["n"])
    counts = tokens.groupby(keys).size().reset_index(name="n")
    sort_keys = list(by or []) + ["n", "word"]
    ascending = [True] * len(by or []) + [False, True]
    return counts.sort_values(sort_keys, ascending=ascending).reset_index(drop=True)


def top_ngrams(texts: Iterable[str], ngram_range=(1, 2), top_k: int = 50, min_df: int = 2) -> List[Tuple[str, int]]:
    """Return top_k most frequent ngrams across corpus."""
    cv = CountVectorizer(ngram_range=ngram_range, min_df=min_df, stop_words=list(STOP_WORDS))
    X = cv.fit_transform(texts)
    freqs = X.sum(axis=0).A1
    vocab = cv.get_feature_names_out()
    pairs = [(str(w), int(f)) for w, f in zip(vocab, freqs)]
    pairs.sort(key=lambda x: (-x[1], x[0]))
    return pairs[:top_k]


# ---------------------------------------------------------------------------
# Sentiment
# ---------------------------------------------------------------------------

def ensure_vader_downloaded():
    try:
        _ = SentimentIntensityAnalyzer()
    except LookupError:
        print("[INFO] Downloading VADER lexicon...")
        nltk_download("vader_lexicon", quiet=True)


def get_sentiment_analyzer() -> SentimentIntensityAnalyzer:
    ensure_vader_downloaded()
    return SentimentIntensityAnalyzer()


def score_sentiment(analyzer: SentimentIntensityAnalyzer, text: str) -> Dict[str, float]:
    if not text:
        return {"pos": 0.0, "neu": 0.0, "neg": 0.0, "compound": 0.0}
    return analyzer.polarity_scores(text)


def label_sentiment(compound: float) -> str:
    if compound >= SENTIMENT_POS_THRESHOLD:
        return "positive"
    if compound <= SENTIMENT_NEG_THRESHOLD:
        return "negative"
    return "neutral"


def score_comments(
    df: pd.DataFrame,
    analyzer: Optional[SentimentIntensityAnalyzer] = None,
    text_col: str = "comment",
) -> pd.DataFrame:
    """Copy of `df` with VADER `pos`, `neu`, `neg`, `compound` and a `sentiment` label."""
    analyzer = analyzer or get_sentiment_analyzer()
    out = df.reset_index(drop=True).copy()
    cleaned = out[text_col].map(clean_text)
    scores = pd.DataFrame(
        [score_sentiment(analyzer, t) for t in cleaned],
        columns=["pos", "neu", "neg", "compound"],
    )
    out = pd.concat([out, scores], axis=1)
    out["sentiment"] = out["compound"].map(label_sentiment)
    return out


def token_sentiment(tokens: pd.DataFrame, lexicon: Optional[Mapping[str, float]] = None) -> pd.DataFrame:
    """Inner-join tokens with a word -> valence lexicon (VADER's by default).

    Keeps only tokens found in the lexicon, adding `valence` and a
    positive/negative `sentiment` column.
    """
    if lexicon is None:
        lexicon = get_sentiment_analyzer().lexicon
    out = tokens[tokens["word"].isin(list(lexicon.keys()))].copy()
    out["valence"] = out["word"].map(lexicon).astype(float)
    out = out[out["valence"] != 0].copy()
    out["sentiment"] = out["valence"].map(lambda v: "positive" if v > 0 else "negative")
    return out.reset_index(drop=True)


def sentiment_by_thread(scored: pd.DataFrame, by: str = "url") -> pd.DataFrame:
    """Per-thread compound summary and positive/negative/neutral counts."""
    columns = [by, "n_comments", "compound_mean", "compound_median", "n_pos", "n_neg", "n_neu"]
    if scored.empty:
        return pd.DataFrame(columns=columns)

    agg = scored.groupby(by).agg(
        n_comments=("compound", "size"),
        compound_mean=("compound", "mean"),
        compound_median=("compound", "median"),
    ).reset_index()

    detail = []
    for key, grp in scored.groupby(by):
        pos_n = int((grp["compound"] >= SENTIMENT_POS_THRESHOLD).sum())
        neg_n = int((grp["compound"] <= SENTIMENT_NEG_THRESHOLD).sum())
        detail.append({by: key, "n_pos": pos_n, "n_neg": neg_n, "n_neu": len(grp) - pos_n - neg_n})

    summary = agg.merge(pd.DataFrame(detail), on=by, how="left")
    return summary[columns].sort_values("n_comments", ascending=False).reset_index(drop=True)
