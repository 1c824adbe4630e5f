"""
Discussion networks built from reply edge lists.

Two views of the same edges:
- reply graph: comment ids as nodes, parent -> reply (one thread at a time);
- author graph: who replies to whom, replier -> replied-to author, weighted
  by the number of replies. Authors are already pseudonyms at this point.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import networkx as nx  # noqa: E402
import pandas as pd  # noqa: E402

from .config import DELETED_AUTHOR  # noqa: E402
from .tables import require_columns  # noqa: E402


def _author_lookup(comments: pd.DataFrame) -> Dict[Any, str]:
    """(url, comment_id) -> author, or comment_id -> author without urls."""
    authors = comments["author"].fillna(DELETED_AUTHOR).astype(str)
    if "url" in comments.columns:
        keys = zip(comments["url"], comments["comment_id"].astype(str))
    else:
        keys = comments["comment_id"].astype(str)
    return dict(zip(keys, authors))


def build_reply_graph(edges: pd.DataFrame, comments: Optional[pd.DataFrame] = None) -> nx.DiGraph:
    """Comment-level DiGraph for a single thread's edges."""
    require_columns(edges, ["from", "to"], what="edges")
    if "url" in edges.columns and edges["url"].nunique() > 1:
        raise ValueError("build_reply_graph expects the edges of one thread")

    repliers = edges["author_from"] if "author_from" in edges.columns else [None] * len(edges)

    G = nx.DiGraph()
    for parent, child, replier in zip(edges["from"], edges["to"], repliers):
        attrs = {}
        if replier is not None and not pd.isna(replier):
            attrs["author_from"] = str(replier)
        G.add_edge(str(parent), str(child), **attrs)

    if comments is not None and not comments.empty:
        url = edges["url"].iloc[0] if "url" in edges.columns and not edges.empty else None
        thread = comments
        if url is not None and "url" in comments.columns:
            thread = comments[comments["url"] == url]
        authors = dict(zip(thread["comment_id"].astype(str), thread["author"].fillna(DELETED_AUTHOR).astype(str)))
        for node in G.nodes:
            if node in authors:
                G.nodes[node]["author"] = authors[node]
    return G


def build_author_graph(edges: pd.DataFrame, comments: pd.DataFrame) -> nx.DiGraph:
    """Author-level DiGraph: replier -> parent author, `weight` = reply count.

    Replies to oneself are kept as self-loops. Replies from or to a deleted
    author are left out: "[deleted]" stands for many people, not one node.
    """
    require_columns(edges, ["from", "author_from"], what="edges")
    require_columns(comments, ["comment_id", "author"], what="comments")
    lookup = _author_lookup(comments)
    by_thread = "url" in comments.columns and "url" in edges.columns

    G = nx.DiGraph()
    for _, row in edges.iterrows():
        key = (row["url"], str(row["from"])) if by_thread else str(row["from"])
        parent_author = lookup.get(key)
        replier = DELETED_AUTHOR if pd.isna(row["author_from"]) else str(row["author_from"])
        if parent_author is None or DELETED_AUTHOR in (replier, parent_author):
            continue
        if G.has_edge(replier, parent_author):
            G[replier][parent_author]["weight"] += 1
        else:
            G.add_edge(replier, parent_author, weight=1)
    return G


def author_edge_table(G: nx.DiGraph) -> pd.DataFrame:
    rows = [{"from": u, "to": v, "weight": d.get("weight", 1)} for u, v, d in G.edges(data=True)]
    df = pd.DataFrame(rows, columns=["from", "to", "weight"])
    return df.sort_values(["weight", "from", "to"], ascending=[False, True, True]).reset_index(drop=True)


def graph_summary(G: nx.DiGraph) -> Dict[str, Any]:
    n = G.number_of_nodes()
    return {
        "nodes": n,
        "edges": G.number_of_edges(),
        "density": nx.density(G),
        "weakly_connected_components": nx.number_weakly_connected_components(G) if n else 0,
        "self_loops": nx.number_of_selfloops(G),
        "max_in_degree": max((d for _, d in G.in_degree()), default=0),
        "max_out_degree": max((d for _, d in G.out_degree()), default=0),
    }


def draw_graph(G: nx.DiGraph, path: str, title: Optional[str] = None, seed: int = 42) -> str:
    """Force-directed (spring) layout drawing saved as an image."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    fig, ax = plt.subplots(figsize=(8, 6))
    pos = nx.spring_layout(G, seed=seed)
    widths = [d.get("weight", 1) for _, _, d in G.edges(data=True)]
    nx.draw_networkx_nodes(G, pos, ax=ax, node_size=120, node_color="#4c72b0", alpha=0.8)
    nx.draw_networkx_edges(G, pos, ax=ax, width=widths or 1.0, alpha=0.4, arrows=True, arrowsize=8)
    if G.number_of_nodes() <= 50:
        nx.draw_networkx_labels(G, pos, ax=ax, font_size=7)
    if title:
        ax.set_title(title)
    ax.axis("off")
    fig.tight_layout()
    fig.savefig(path, dpi=200)
    plt.close(fig)
    print(f"[WRITE] {path}")
    return path


def save_graphml(G: nx.DiGraph, path: str) -> str:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    nx.write_graphml(G, path)
    print(f"[WRITE] {path}")
    return path
