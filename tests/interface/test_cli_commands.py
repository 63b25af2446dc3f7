"""Tests for CLI commands: help, import, grading, sessions, reports and config."""

import json
from types import SimpleNamespace

import pytest
from typer.testing import CliRunner

from medace.interface._common import _resolve_with_overrides
from medace.interface.cli import app

runner = CliRunner()

WORDS = [
    {
        "id": "duo_1",
        "bookId": "duo",
        "number": 1,
        "word": "abandon",
        "definition": "to give up",
        "exampleSentence": "They abandoned the plan.",
        "exampleMeaning": "彼らは計画を断念した。",
    },
    {"id": "duo_2", "bookId": "duo", "number": 2, "word": "abide", "definition": "to bear"},
    {"id": "duo_3", "bookId": "duo", "number": 3, "word": "abolish", "definition": "to end"},
]


@pytest.fixture
def data_file(tmp_path, mock_home):
    path = tmp_path / "store.json"
    words_file = tmp_path / "words.json"
    words_file.write_text(json.dumps(WORDS), encoding="utf-8")
    result = runner.invoke(app, ["--data-file", str(path), "import-words", str(words_file)])
    assert result.exit_code == 0, result.output
    assert "Imported 3 words." in result.output
    return path


def invoke(data_file, *args, **kwargs):
    return runner.invoke(app, ["--data-file", str(data_file), *args], **kwargs)


# --- Help ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "spaced-repetition vocabulary study" in result.stdout
    assert "study" in result.stdout
    assert "grade" in result.stdout


# --- Grading ---


def test_grade_command(data_file):
    result = invoke(data_file, "grade", "u1", "duo_1", "3")

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["newState"]["interval"] == 3
    assert data["newState"]["attemptCount"] == 1

    stored = json.loads(data_file.read_text(encoding="utf-8"))
    assert stored["reviewStates"]["u1"]["duo_1"]["interval"] == 3


def test_grade_invalid_rating_exits_2(data_file):
    result = invoke(data_file, "grade", "u1", "duo_1", "4")

    assert result.exit_code == 2
    assert "Rating must be one of" in result.output
    stored = json.loads(data_file.read_text(encoding="utf-8"))
    assert stored["reviewStates"] == {}


def test_grade_unknown_word_exits_2(data_file):
    result = invoke(data_file, "grade", "u1", "ghost", "2")
    assert result.exit_code == 2
    assert "word not found: ghost" in result.output


def test_quiz_command(data_file):
    result = invoke(data_file, "quiz", "u1", "duo_2", "--incorrect")

    assert result.exit_code == 0, result.output
    state = json.loads(result.stdout)["newState"]
    assert state["correctCount"] == 0
    assert state["attemptCount"] == 1


# --- Sessions ---


def test_session_command(data_file):
    result = invoke(data_file, "session", "u1", "duo", "--limit", "2")

    assert result.exit_code == 0, result.output
    assert [w["id"] for w in json.loads(result.stdout)] == ["duo_1", "duo_2"]


def test_session_unknown_book_is_empty(data_file):
    result = invoke(data_file, "session", "u1", "nope")
    assert result.exit_code == 0
    assert "Nothing to study right now." in result.output


def test_study_walks_through_queue(data_file):
    # reveal + rating for each of two cards, with one bad rating retried
    result = invoke(data_file, "study", "u1", "duo", "--limit", "2", input="\n9\n3\n\n2\n")

    assert result.exit_code == 0, result.output
    assert "abandon" in result.output
    assert "They abandoned the plan." in result.output
    assert "Rating must be one of" in result.output
    assert "next review in 3 day(s)" in result.output
    assert "next review in 1 day(s)" in result.output
    assert "Session complete! +22 XP (20 base + 2 streak bonus)" in result.output

    due = invoke(data_file, "due", "u1")
    assert due.stdout.strip() == "0"


def test_study_quit_awards_nothing(data_file):
    result = invoke(data_file, "study", "u1", "duo", input="\nq\n")

    assert result.exit_code == 0, result.output
    assert "Session abandoned." in result.output

    stored = json.loads(data_file.read_text(encoding="utf-8"))
    assert stored["reviewStates"] == {}
    assert stored["gamification"]["u1"]["xp"] == 0


# --- Reports ---


def test_progress_and_mastery(data_file):
    invoke(data_file, "grade", "u1", "duo_1", "2")

    progress = json.loads(invoke(data_file, "progress", "u1", "duo").stdout)
    mastery = json.loads(invoke(data_file, "mastery", "u1").stdout)

    assert progress == {"bookId": "duo", "learnedCount": 1, "totalCount": 3, "percentage": 33}
    assert mastery["learning"] == 1
    assert mastery["total"] == 1


def test_activity_and_students(data_file):
    invoke(data_file, "grade", "u1", "duo_1", "2")

    logs = json.loads(invoke(data_file, "activity", "u1", "--window-days", "7").stdout)
    summaries = json.loads(invoke(data_file, "students", "u1", "u2").stdout)

    assert len(logs) == 1
    assert logs[0]["count"] == 1
    assert [s["riskLevel"] for s in summaries] == ["SAFE", "DANGER"]


# --- Gamification ---


def test_checkin_complete_and_leaderboard(data_file):
    checkin = json.loads(invoke(data_file, "checkin", "u1").stdout)
    assert checkin["currentStreak"] == 1

    reward = json.loads(invoke(data_file, "complete", "u1", "10").stdout)
    assert reward["xpAwarded"] == 110
    assert reward["leveledUp"] is True

    invoke(data_file, "complete", "u2", "0")
    board = json.loads(invoke(data_file, "leaderboard", "u2", "--top", "1").stdout)
    assert [(e["userId"], e["rank"]) for e in board] == [("u1", 1), ("u2", 2)]


# --- Catalog / Config ---


def test_import_words_rejects_remote_backend(tmp_path, mock_home):
    words_file = tmp_path / "words.json"
    words_file.write_text("[]", encoding="utf-8")

    result = runner.invoke(app, ["--backend", "remote", "import-words", str(words_file)])

    assert result.exit_code == 2
    assert "local backend" in result.output


def test_import_words_rejects_bad_file(tmp_path, mock_home):
    words_file = tmp_path / "words.json"
    words_file.write_text('[{"word": "no id"}]', encoding="utf-8")

    result = runner.invoke(
        app, ["--data-file", str(tmp_path / "s.json"), "import-words", str(words_file)]
    )

    assert result.exit_code == 2
    assert "Invalid word list" in result.output


def test_config_show(mock_home, monkeypatch):
    monkeypatch.setenv("MEDACE_BACKEND", "remote")

    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["backend"] == "remote"
    assert data["session_limit"] == 20


def test_configured_verbosity_survives_without_flag(mock_home, monkeypatch):
    monkeypatch.setenv("MEDACE_VERBOSE", "3")

    quiet = SimpleNamespace(obj={"backend": None, "verbose_bonus": 0})
    loud = SimpleNamespace(obj={"backend": None, "verbose_bonus": 2})

    assert _resolve_with_overrides(quiet).verbose == 3
    assert _resolve_with_overrides(loud).verbose == 2


# --- Quizzes ---


def test_quiz_build_command(data_file):
    result = invoke(data_file, "quiz-build", "duo", "--size", "2", "--seed", "5")

    assert result.exit_code == 0, result.output
    questions = json.loads(result.stdout)
    assert len(questions) == 2
    for question in questions:
        assert len(question["options"]) == 3
        assert question["answer"] in question["options"]

    again = invoke(data_file, "quiz-build", "duo", "--size", "2", "--seed", "5")
    assert json.loads(again.stdout) == questions


def test_quiz_build_unknown_book(data_file):
    result = invoke(data_file, "quiz-build", "nope")
    assert result.exit_code == 0
    assert "This book has no words yet." in result.output


def test_take_quiz_records_answers(data_file):
    built = json.loads(invoke(data_file, "quiz-build", "duo", "--size", "2", "--seed", "11").stdout)
    right = built[0]["options"].index(built[0]["answer"]) + 1
    wrong = next(
        i for i, option in enumerate(built[1]["options"], start=1) if option != built[1]["answer"]
    )

    result = invoke(
        data_file,
        "take-quiz", "u1", "duo", "--size", "2", "--seed", "11",
        input=f"9\n{right}\n{wrong}\n",
    )

    assert result.exit_code == 0, result.output
    assert "Pick one of the listed numbers." in result.output
    assert "Correct!" in result.output
    assert f"Wrong. Answer: {built[1]['answer']}" in result.output
    assert "Quiz complete: 1/2 correct (50%)" in result.output

    stored = json.loads(data_file.read_text(encoding="utf-8"))["reviewStates"]["u1"]
    first, second = built[0]["word"]["id"], built[1]["word"]["id"]
    assert stored[first]["correctCount"] == 1
    assert stored[second]["correctCount"] == 0
    assert stored[second]["attemptCount"] == 1
    assert stored[second]["interval"] == 0


def test_take_quiz_quit(data_file):
    result = invoke(data_file, "take-quiz", "u1", "duo", "--seed", "1", input="q\n")

    assert result.exit_code == 0, result.output
    assert "Quiz stopped: 0/0 correct." in result.output
    stored = json.loads(data_file.read_text(encoding="utf-8"))
    assert stored["reviewStates"] == {}
