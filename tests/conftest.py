import pandas as pd
import pytest


class StubAnalyzer:
    """Stands in for VADER: +0.5 for 'good', -0.5 for 'bad', else 0."""

    lexicon = {"good": 1.9, "great": 3.1, "bad": -2.5, "awful": -2.0}

    def polarity_scores(self, text):
        text = text.lower()
        if "good" in text:
            return {"neg": 0.0, "neu": 0.5, "pos": 0.5, "compound": 0.5}
        if "bad" in text:
            return {"neg": 0.5, "neu": 0.5, "pos": 0.0, "compound": -0.5}
        return {"neg": 0.0, "neu": 1.0, "pos": 0.0, "compound": 0.0}


@pytest.fixture
def analyzer():
    return StubAnalyzer()


@pytest.fixture
def scenario_comments():
    # comment "2" was never fetched, so "2_1" has no parent
    return pd.DataFrame([
        {"url": "t1", "comment_id": "1", "author": "A", "comment": "Good point about survey design"},
        {"url": "t1", "comment_id": "1_1", "author": "B", "comment": "Bad sampling though"},
        {"url": "t1", "comment_id": "1_1_1", "author": "C", "comment": "Sampling frames are hard"},
        {"url": "t1", "comment_id": "2_1", "author": "D", "comment": "Orphaned reply"},
    ])


@pytest.fixture
def two_thread_comments():
    return pd.DataFrame([
        {"url": "t1", "comment_id": "1", "author": "A", "comment": "Good survey results overall"},
        {"url": "t1", "comment_id": "1_1", "author": "B", "comment": "Bad response rate in the survey"},
        {"url": "t1", "comment_id": "1_2", "author": "C", "comment": "Survey weighting helps response rate"},
        {"url": "t1", "comment_id": "1_2_1", "author": "A", "comment": "Weighting is good when done carefully"},
        {"url": "t2", "comment_id": "1_1", "author": "E", "comment": "Interviews beat surveys for depth"},
        {"url": "t2", "comment_id": "2", "author": "F", "comment": "Ethnography takes years of fieldwork"},
        {"url": "t2", "comment_id": "2_1", "author": "E", "comment": "Fieldwork notes are bad to code"},
    ])
