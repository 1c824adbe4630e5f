import json

import pytest

from reddit_discourse.pipeline import main, parse_args, run_analysis


@pytest.fixture
def comments_csv(tmp_path, two_thread_comments):
    path = tmp_path / "comments.csv"
    two_thread_comments.to_csv(path, index=False)
    return path


def test_run_analysis_writes_outputs(tmp_path, comments_csv, analyzer):
    out = tmp_path / "out"
    results = run_analysis(str(comments_csv), str(out), n_topics=2, top_terms=3,
                           analyzer=analyzer, lexicon=analyzer.lexicon)

    for name in ["tokens.csv", "word_counts.csv", "comment_sentiment.csv", "thread_sentiment.csv",
                 "token_sentiment.csv", "topic_terms.csv", "document_topics.csv", "edges.csv",
                 "author_edges.csv", "network_summary.json", "reply_network.graphml", "reply_network.png"]:
        assert (out / name).exists(), name

    edges = results["edges"]
    assert set(zip(edges["url"], edges["from"], edges["to"])) == {
        ("t1", "1", "1_1"), ("t1", "1", "1_2"), ("t1", "1_2", "1_2_1"), ("t2", "2", "2_1"),
    }

    summary = json.loads((out / "network_summary.json").read_text(encoding="utf-8"))
    assert summary["threads"] == 2
    assert summary["comments"] == 7
    assert summary["reply_edges"] == 4
    assert summary["reply_network"]["url"] == "t1"
    assert summary["reply_network"]["nodes"] == 4


def test_run_analysis_selected_thread_without_plot(tmp_path, comments_csv, analyzer):
    out = tmp_path / "out"
    results = run_analysis(str(comments_csv), str(out), n_topics=2, thread_url="t2",
                           analyzer=analyzer, lexicon=analyzer.lexicon, draw=False)
    assert set(results["reply_graph"].edges) == {("2", "2_1")}
    assert not (out / "reply_network.png").exists()


def test_run_analysis_without_replies(tmp_path, analyzer, capsys):
    path = tmp_path / "comments.csv"
    path.write_text("url,comment_id,author,comment\nt1,1,a,the and of\n", encoding="utf-8")
    results = run_analysis(str(path), str(tmp_path / "out"), analyzer=analyzer, lexicon={})
    assert results["edges"].empty
    assert "topic_terms" not in results
    captured = capsys.readouterr()
    assert "[WARN] Topic model skipped" in captured.err
    assert "No reply edges" in captured.out


def test_run_analysis_numeric_comment_bodies(tmp_path, analyzer):
    path = tmp_path / "comments.csv"
    path.write_text("url,comment_id,author,comment\nt1,1,a,42\nt1,1_1,b,17\n", encoding="utf-8")
    results = run_analysis(str(path), str(tmp_path / "out"), analyzer=analyzer, lexicon={}, draw=False)
    assert list(results["edges"]["to"]) == ["1_1"]


def test_parse_args_collect_defaults():
    args = parse_args(["collect", "--subreddit", "AskSocialScience"])
    assert args.command == "collect"
    assert args.sort == "top"
    assert args.period == "month"


def test_main_analyze_missing_file(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["analyze", "--comments", str(tmp_path / "missing.csv")])
    assert exc.value.code == 1


def test_main_collect_without_credentials(tmp_path, monkeypatch, capsys):
    for key in ["REDDIT_CLIENT_ID", "REDDIT_CLIENT_SECRET"]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc:
        main(["collect", "--subreddit", "AskSocialScience"])
    assert exc.value.code == 1
    assert "[FATAL]" in capsys.readouterr().err
