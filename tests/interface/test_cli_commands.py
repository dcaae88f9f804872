"""Tests for CLI commands: help, queue, preview, answer, unbury and config show."""

import json

import pytest
from typer.testing import CliRunner

from srs_engine.infrastructure.snapshot import load_snapshot
from srs_engine.interface.cli import app

runner = CliRunner()

NOW = 1_700_000_000
TODAY = NOW // 86400

SNAPSHOT = f"""
deck:
  id: 1
  name: Spanish
  config:
    learn_steps: [1, 10]
    relearn_steps: [10]
    desired_retention: 0.9
    new_card_sort_order: order-added
    bury_new: true
cards:
  - id: 1
    note_id: 1
    ctype: review
    queue: review
    due: {TODAY - 1}
    interval: 10
    reps: 5
    memory_state: {{stability: 10.0, difficulty: 5.0}}
    last_review: {NOW - 11 * 86400}
  - {{id: 2, note_id: 1}}
  - {{id: 3, note_id: 3}}
  - {{id: 4, note_id: 4, ctype: learn, queue: learn, due: {NOW + 300}, remaining_steps: 1}}
  - {{id: 5, note_id: 5, ctype: review, queue: sched-buried, due: {TODAY}, interval: 3}}
"""


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("SRS_LEARN_AHEAD_SECS", raising=False)


@pytest.fixture
def snapshot(tmp_path):
    path = tmp_path / "deck.yaml"
    path.write_text(SNAPSHOT)
    return path


# --- Help ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "srs-engine: spaced-repetition queue and scheduling inspector" in result.stdout
    for command in ("queue", "preview", "answer", "unbury", "config"):
        assert command in result.stdout


# --- Queue ---


def test_queue_json(snapshot):
    result = runner.invoke(app, ["queue", str(snapshot), "--now", str(NOW), "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["counts"] == {"new": 2, "learning": 0, "review": 1}
    assert [e["card_id"] for e in data["main_queue"]] == [2, 1, 3]
    assert [e["kind"] for e in data["main_queue"]] == ["new", "review", "new"]
    assert data["intraday_now"] == []
    assert data["intraday_ahead"] == [{"card_id": 4, "due": NOW + 300}]


def test_queue_learn_ahead_option(snapshot):
    result = runner.invoke(
        app, ["queue", str(snapshot), "--now", str(NOW), "--learn-ahead", "0", "--json"]
    )

    assert result.exit_code == 0
    assert json.loads(result.stdout)["intraday_ahead"] == []


def test_queue_learn_ahead_from_env(snapshot, monkeypatch):
    monkeypatch.setenv("SRS_LEARN_AHEAD_SECS", "0")
    result = runner.invoke(app, ["queue", str(snapshot), "--now", str(NOW), "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["intraday_ahead"] == []


def test_queue_text(snapshot):
    result = runner.invoke(app, ["queue", str(snapshot), "--now", str(NOW)])

    assert result.exit_code == 0
    assert "Deck: Spanish" in result.stdout
    assert "New: 2  Learning: 0  Review: 1" in result.stdout
    assert "card 1 (review)" in result.stdout


def test_queue_missing_snapshot(tmp_path):
    result = runner.invoke(app, ["queue", str(tmp_path / "missing.yaml")])
    assert result.exit_code == 2


def test_queue_malformed_snapshot(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("cards:\n  - {id: 1}\n")
    result = runner.invoke(app, ["queue", str(path)])
    assert result.exit_code == 2


# --- Preview ---


def test_preview_new_card(snapshot):
    result = runner.invoke(app, ["preview", str(snapshot), "3", "--now", str(NOW)])

    assert result.exit_code == 0
    labels = json.loads(result.stdout)
    assert labels["again"] == "1m"
    assert labels["hard"] == "6m"
    assert labels["good"] == "10m"
    assert labels["easy"].endswith("d")


def test_preview_unknown_card(snapshot):
    result = runner.invoke(app, ["preview", str(snapshot), "99", "--now", str(NOW)])
    assert result.exit_code == 1


# --- Answer ---


def test_answer_prints_patch_and_log(snapshot):
    result = runner.invoke(app, ["answer", str(snapshot), "3", "3", "--now", str(NOW)])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["card_patch"]["queue"] == "learn"
    assert data["card_patch"]["due"] == NOW + 600
    assert data["review_log"]["review_kind"] == "learning"
    assert data["review_log"]["button_chosen"] == 3
    assert data["leech"] is False

    # Without --write the snapshot is untouched
    assert load_snapshot(snapshot).get_card(3).reps == 0


def test_answer_failed_review(snapshot):
    result = runner.invoke(app, ["answer", str(snapshot), "1", "1", "--now", str(NOW)])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["card_patch"]["ctype"] == "relearn"
    assert data["card_patch"]["lapses"] == 1
    assert data["review_log"]["review_kind"] == "relearn"


def test_answer_write_updates_card_and_buries_siblings(snapshot):
    result = runner.invoke(
        app, ["answer", str(snapshot), "1", "3", "--now", str(NOW), "--write"]
    )

    assert result.exit_code == 0
    deck = load_snapshot(snapshot)
    assert deck.get_card(1).reps == 6
    assert deck.get_card(1).last_review == NOW
    assert deck.get_card(2).queue.name == "SCHED_BURIED"
    assert deck.get_card(3).queue.name == "NEW"


def test_answer_invalid_rating(snapshot):
    result = runner.invoke(app, ["answer", str(snapshot), "1", "5", "--now", str(NOW)])
    assert result.exit_code == 1


def test_answer_invalid_config(tmp_path):
    path = tmp_path / "deck.yaml"
    path.write_text(
        "deck:\n  config:\n    desired_retention: 1.5\ncards:\n  - {id: 1, note_id: 1}\n"
    )
    result = runner.invoke(app, ["answer", str(path), "1", "3"])
    assert result.exit_code == 1


# --- Unbury ---


def test_unbury_reports_count(snapshot):
    result = runner.invoke(app, ["unbury", str(snapshot)])

    assert result.exit_code == 0
    assert "Unburied 1 card(s)." in result.stdout
    assert load_snapshot(snapshot).get_card(5).queue.name == "SCHED_BURIED"


def test_unbury_write(snapshot):
    result = runner.invoke(app, ["unbury", str(snapshot), "--write"])

    assert result.exit_code == 0
    assert load_snapshot(snapshot).get_card(5).queue.name == "REVIEW"


# --- Config ---


def test_config_show(monkeypatch):
    monkeypatch.setenv("SRS_LEARN_AHEAD_SECS", "600")
    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["learn_ahead_secs"] == 600
    assert data["memory_model"] == "fsrs"
