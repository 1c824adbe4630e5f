"""
REDDIT DISCOURSE PIPELINE
===================================

Purpose
-------
Collect Reddit threads for a subreddit / keyword query, then analyze the
comments: word frequencies, sentiment, LDA topics, and the comment-reply
network of each discussion.

Usage
-----
Credentials come from the environment or a `.env` file (see `config.py`).

```bash
reddit-discourse collect --subreddit AskSocialScience --keywords "survey" \
    --sort top --period year --limit 25 --output-dir ./out

reddit-discourse analyze --comments ./out/comments.csv --topics 4 --output-dir ./out
```

Outputs
-------
collect:
- `threads.csv`              : one row per thread
- `comments.csv`             : one row per comment, `comment_id` = ancestry path
                               ("1", "1_1", ...), authors already hashed
analyze:
- `tokens.csv`, `word_counts.csv`
- `comment_sentiment.csv`, `thread_sentiment.csv`, `token_sentiment.csv`
- `topic_terms.csv`, `document_topics.csv`
- `edges.csv`                : url, from, to, author_from (reply edges)
- `author_edges.csv`         : weighted replier -> replied-to author edges
- `network_summary.json`
- `reply_network.graphml`, `reply_network.png` (one thread)
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Any, Dict, List, Optional

import pandas as pd

from .collect import find_thread_urls, get_reddit_client, get_thread_content
from .config import (
    DEFAULT_LIMIT,
    DEFAULT_N_TOPICS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PERIOD,
    DEFAULT_SORT,
    DEFAULT_TOP_TERMS,
    PERIOD_CHOICES,
    SORT_CHOICES,
    Settings,
    load_settings,
)
from .network import (
    author_edge_table,
    build_author_graph,
    build_reply_graph,
    draw_graph,
    graph_summary,
    save_graphml,
)
from .reply_tree import reconstruct_threads
from .tables import load_comments, write_json, write_table
from .text import (
    get_sentiment_analyzer,
    score_comments,
    sentiment_by_thread,
    token_sentiment,
    tokenize_comments,
    word_counts,
)
from .topics import fit_topics


# ---------------------------------------------------------------------------
# Collect
# ---------------------------------------------------------------------------

def run_collect(
    settings: Settings,
    subreddit: Optional[str],
    keywords: Optional[str],
    sort: str,
    period: str,
    limit: int,
    output_dir: str,
) -> Dict[str, pd.DataFrame]:
    os.makedirs(output_dir, exist_ok=True)
    reddit = get_reddit_client(settings)

    where = f"r/{subreddit}" if subreddit else "r/all"
    print(f"[INFO] Finding threads in {where} (keywords={keywords!r}, sort={sort}, period={period})...")
    found = find_thread_urls(reddit, subreddit=subreddit, keywords=keywords, sort=sort, period=period, limit=limit)
    print(f"  - {len(found)} threads")

    print("[INFO] Fetching thread content (this may take a while)...")
    threads_df, comments_df = get_thread_content(reddit, found["url"].tolist(), hash_salt=settings.hash_salt)

    write_table(threads_df, os.path.join(output_dir, "threads.csv"))
    write_table(comments_df, os.path.join(output_dir, "comments.csv"))
    print("[DONE] Collection complete.")
    return {"threads": threads_df, "comments": comments_df}


# ---------------------------------------------------------------------------
# Analyze
# ---------------------------------------------------------------------------

def _pick_thread(edges: pd.DataFrame, thread_url: Optional[str]) -> Optional[str]:
    if thread_url:
        return thread_url
    if edges.empty:
        return None
    return edges["url"].value_counts().index[0]


def run_analysis(
    comments_path: str,
    output_dir: str,
    n_topics: int = DEFAULT_N_TOPICS,
    top_terms: int = DEFAULT_TOP_TERMS,
    thread_url: Optional[str] = None,
    analyzer: Any = None,
    lexicon: Optional[Dict[str, float]] = None,
    draw: bool = True,
) -> Dict[str, Any]:
    """Run every analysis step over a comments CSV and write the outputs.

    `analyzer` / `lexicon` default to VADER's.
    """
    os.makedirs(output_dir, exist_ok=True)
    comments = load_comments(comments_path)
    comments["comment"] = comments["comment"].fillna("") if "comment" in comments.columns else ""
    print(f"[INFO] Loaded {len(comments)} comments from {comments_path}")
    results: Dict[str, Any] = {"comments": comments}

    # Words --------------------------------------------------------------------------------
    tokens = tokenize_comments(comments)
    results["tokens"] = tokens
    write_table(tokens, os.path.join(output_dir, "tokens.csv"))
    results["word_counts"] = word_counts(tokens)
    write_table(results["word_counts"], os.path.join(output_dir, "word_counts.csv"))

    # Sentiment ----------------------------------------------------------------------------
    if analyzer is None and lexicon is None:
        analyzer = get_sentiment_analyzer()
        lexicon = analyzer.lexicon
    elif lexicon is None:
        lexicon = getattr(analyzer, "lexicon", None)

    scored = score_comments(comments, analyzer=analyzer)
    results["comment_sentiment"] = scored
    write_table(scored, os.path.join(output_dir, "comment_sentiment.csv"))
    results["thread_sentiment"] = sentiment_by_thread(scored)
    write_table(results["thread_sentiment"], os.path.join(output_dir, "thread_sentiment.csv"))
    if lexicon is not None:
        results["token_sentiment"] = token_sentiment(tokens, lexicon)
        write_table(results["token_sentiment"], os.path.join(output_dir, "token_sentiment.csv"))

    # Topics -------------------------------------------------------------------------------
    docs = comments[comments["comment"].str.strip().astype(bool)]
    try:
        model = fit_topics(
            docs["comment"].tolist(),
            n_topics=n_topics,
            documents=(docs["url"].astype(str) + "#" + docs["comment_id"].astype(str)).tolist(),
        )
    except ValueError as e:
        print(f"[WARN] Topic model skipped: {e}", file=sys.stderr)
    else:
        results["topic_terms"] = model.top_terms(top_terms)
        results["document_topics"] = model.document_topics()
        write_table(results["topic_terms"], os.path.join(output_dir, "topic_terms.csv"))
        write_table(results["document_topics"], os.path.join(output_dir, "document_topics.csv"))

    # Network ------------------------------------------------------------------------------
    edges = reconstruct_threads(comments)
    results["edges"] = edges
    write_table(edges, os.path.join(output_dir, "edges.csv"))

    author_graph = build_author_graph(edges, comments)
    results["author_edges"] = author_edge_table(author_graph)
    write_table(results["author_edges"], os.path.join(output_dir, "author_edges.csv"))

    summary: Dict[str, Any] = {
        "threads": int(comments["url"].nunique()),
        "comments": int(len(comments)),
        "reply_edges": int(len(edges)),
        "author_network": graph_summary(author_graph),
    }

    chosen = _pick_thread(edges, thread_url)
    if chosen is not None:
        thread_edges = edges[edges["url"] == chosen]
        reply_graph = build_reply_graph(thread_edges, comments)
        results["reply_graph"] = reply_graph
        summary["reply_network"] = {"url": chosen, **graph_summary(reply_graph)}
        save_graphml(reply_graph, os.path.join(output_dir, "reply_network.graphml"))
        if draw and reply_graph.number_of_nodes():
            draw_graph(reply_graph, os.path.join(output_dir, "reply_network.png"), title=chosen)
    else:
        print("[INFO] No reply edges found; skipping reply network.")

    results["network_summary"] = summary
    write_json(summary, os.path.join(output_dir, "network_summary.json"))
    print("[DONE] Analysis complete.")
    return results


# ---------------------------------------------------------------------------
# CLI Entrypoint
# ---------------------------------------------------------------------------

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Collect Reddit threads and analyze their comments and reply networks.")
    sub = p.add_subparsers(dest="command", required=True)

    c = sub.add_parser("collect", help="Find threads and fetch their comments")
    c.add_argument("--env-file", default=None, help="Path to a .env file with Reddit credentials")
    c.add_argument("--client-id", default=os.getenv("REDDIT_CLIENT_ID"), help="Reddit API client ID (or env REDDIT_CLIENT_ID)")
    c.add_argument("--client-secret", default=os.getenv("REDDIT_CLIENT_SECRET"), help="Reddit API client secret (or env REDDIT_CLIENT_SECRET)")
    c.add_argument("--user-agent", default=os.getenv("REDDIT_USER_AGENT"), help="User agent string")
    c.add_argument("--subreddit", default=None, help="Subreddit to search (default: all)")
    c.add_argument("--keywords", default=None, help="Search query; omit to use the subreddit listing")
    c.add_argument("--sort", choices=SORT_CHOICES, default=DEFAULT_SORT, help="Listing or search sort")
    c.add_argument("--period", choices=PERIOD_CHOICES, default=DEFAULT_PERIOD, help="Time filter for top/search")
    c.add_argument("--limit", type=int, default=DEFAULT_LIMIT, help="Max threads")
    c.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR, help="Directory for outputs")

    a = sub.add_parser("analyze", help="Analyze a comments CSV")
    a.add_argument("--comments", required=True, help="Comments CSV (columns url, comment_id, author, comment)")
    a.add_argument("--topics", type=int, default=DEFAULT_N_TOPICS, help="Number of LDA topics")
    a.add_argument("--top-terms", type=int, default=DEFAULT_TOP_TERMS, help="Terms listed per topic")
    a.add_argument("--thread-url", default=None, help="Thread to draw (default: the one with most replies)")
    a.add_argument("--no-plot", action="store_true", help="Skip the network drawing")
    a.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR, help="Directory for outputs")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)

    if args.command == "collect":
        settings = load_settings(args.env_file)
        settings.client_id = args.client_id or settings.client_id
        settings.client_secret = args.client_secret or settings.client_secret
        settings.user_agent = args.user_agent or settings.user_agent
        if not settings.has_credentials:
            print("[FATAL] Reddit API credentials missing. Use --client-id/--client-secret, env vars or --env-file.", file=sys.stderr)
            sys.exit(1)
        run_collect(
            settings,
            subreddit=args.subreddit,
            keywords=args.keywords,
            sort=args.sort,
            period=args.period,
            limit=args.limit,
            output_dir=args.output_dir,
        )
    else:
        if not os.path.exists(args.comments):
            print(f"[FATAL] Comments file not found: {args.comments}", file=sys.stderr)
            sys.exit(1)
        run_analysis(
            comments_path=args.comments,
            output_dir=args.output_dir,
            n_topics=args.topics,
            top_terms=args.top_terms,
            thread_url=args.thread_url,
            draw=not args.no_plot,
        )


if __name__ == "__main__":
    main()
