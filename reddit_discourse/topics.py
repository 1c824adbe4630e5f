"""LDA topic modelling over comment texts (scikit-learn)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.decomposition import LatentDirichletAllocation
from sklearn.feature_extraction.text import CountVectorizer

from .config import DEFAULT_N_TOPICS, DEFAULT_TOP_TERMS, LDA_SEED, TOKEN_PATTERN
from .text import STOP_WORDS, clean_text


@dataclass
class TopicModel:
    vectorizer: CountVectorizer
    lda: LatentDirichletAllocation
    doc_topic: np.ndarray
    documents: List[str]

    @property
    def n_topics(self) -> int:
        return self.lda.n_components

    def topic_term_weights(self) -> np.ndarray:
        """Per-topic word distribution (rows sum to 1), the usual LDA beta."""
        comp = self.lda.components_
        return comp / comp.sum(axis=1, keepdims=True)

    def top_terms(self, n: int = DEFAULT_TOP_TERMS) -> pd.DataFrame:
        vocab = self.vectorizer.get_feature_names_out()
        beta = self.topic_term_weights()
        rows = []
        for topic, weights in enumerate(beta, start=1):
            for idx in np.argsort(weights)[::-1][:n]:
                rows.append({"topic": topic, "term": str(vocab[idx]), "weight": float(weights[idx])})
        return pd.DataFrame(rows, columns=["topic", "term", "weight"])

    def document_topics(self) -> pd.DataFrame:
        """Long table of per-document topic proportions (gamma)."""
        n_docs, n_topics = self.doc_topic.shape
        return pd.DataFrame({
            "document": np.repeat(self.documents, n_topics),
            "topic": np.tile(np.arange(1, n_topics + 1), n_docs),
            "gamma": self.doc_topic.reshape(-1),
        })


def fit_topics(
    texts: Sequence[str],
    n_topics: int = DEFAULT_N_TOPICS,
    documents: Optional[Sequence[str]] = None,
    max_features: Optional[int] = None,
    min_df: int = 1,
    seed: int = LDA_SEED,
) -> TopicModel:
    """Build a document-term matrix and fit LDA.

    `documents` names each text (defaults to its position). Raises ValueError
    when the texts leave an empty vocabulary.
    """
    if n_topics < 1:
        raise ValueError("n_topics must be >= 1")
    cleaned = [clean_text(t).lower() for t in texts]
    names = [str(d) for d in documents] if documents is not None else [str(i) for i in range(len(cleaned))]
    if len(names) != len(cleaned):
        raise ValueError("documents and texts must have the same length")

    vectorizer = CountVectorizer(
        stop_words=list(STOP_WORDS),
        token_pattern=TOKEN_PATTERN,
        min_df=min_df,
        max_features=max_features,
    )
    dtm = vectorizer.fit_transform(cleaned)

    lda = LatentDirichletAllocation(
        n_components=n_topics,
        learning_method="batch",
        random_state=seed,
    )
    doc_topic = lda.fit_transform(dtm)
    return TopicModel(vectorizer=vectorizer, lda=lda, doc_topic=doc_topic, documents=names)
