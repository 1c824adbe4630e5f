import numpy as np
import pytest

from reddit_discourse.topics import fit_topics

DOCS = [
    "survey sampling weighting response rate survey",
    "survey response rate weighting sampling frame",
    "sampling frame survey weighting nonresponse",
    "ethnography fieldwork interviews notes coding",
    "fieldwork interviews ethnography participant observation",
    "interviews coding fieldwork notes ethnography",
]


def test_fit_topics_shapes():
    model = fit_topics(DOCS, n_topics=2, documents=[f"d{i}" for i in range(len(DOCS))])
    assert model.n_topics == 2
    assert model.doc_topic.shape == (6, 2)
    np.testing.assert_allclose(model.doc_topic.sum(axis=1), 1.0, rtol=1e-6)

    terms = model.top_terms(3)
    assert list(terms.columns) == ["topic", "term", "weight"]
    assert len(terms) == 6
    assert set(terms["topic"]) == {1, 2}
    assert (terms["weight"] > 0).all()

    docs = model.document_topics()
    assert len(docs) == 12
    assert set(docs["document"]) == {f"d{i}" for i in range(6)}
    np.testing.assert_allclose(docs.groupby("document")["gamma"].sum(), 1.0, rtol=1e-6)


def test_topic_term_weights_are_distributions():
    model = fit_topics(DOCS, n_topics=3)
    np.testing.assert_allclose(model.topic_term_weights().sum(axis=1), 1.0, rtol=1e-6)


def test_fit_topics_is_deterministic_for_a_seed():
    a = fit_topics(DOCS, n_topics=2, seed=7).top_terms(5)
    b = fit_topics(DOCS, n_topics=2, seed=7).top_terms(5)
    assert a.equals(b)


def test_stop_word_only_corpus_raises():
    with pytest.raises(ValueError):
        fit_topics(["the and of", "is was were"], n_topics=2)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        fit_topics(DOCS, n_topics=0)
    with pytest.raises(ValueError):
        fit_topics(DOCS, n_topics=2, documents=["only-one"])
