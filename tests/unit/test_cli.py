from __future__ import annotations

import io
import json

import pytest


@pytest.fixture
def db_args(tmp_path) -> list[str]:
    return ["--db", str(tmp_path / "coach.db")]


def start_session(db_args, capsys, role: str = "Registered Nurse") -> str:
    from reality_coach.__main__ import main

    exit_code = main(
        [*db_args, "start", "--role", role, "--state", "CA", "--age-range", "25-34"]
    )
    assert exit_code == 0
    return capsys.readouterr().out.strip()


def test_cli_parser_supports_commands() -> None:
    from reality_coach.__main__ import create_parser

    parser = create_parser()

    assert parser.parse_args(["next", "abc"]).command == "next"
    answer_args = parser.parse_args(["answer", "abc", "q1", "yes", "--note", "calm"])
    assert answer_args.value == "yes"
    assert answer_args.note == "calm"
    assert parser.parse_args(["catalog", "list", "--bucket", "entry"]).bucket == "entry"
    assert parser.parse_args(["sessions", "recent", "--limit", "3"]).limit == 3
    start_args = parser.parse_args(
        ["start", "--role", "Chef", "--state", "TX", "--age-range", "18-24", "--has-quals"]
    )
    assert start_args.has_quals is True


def test_cli_without_command_prints_help(capsys) -> None:
    from reality_coach.__main__ import main

    assert main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_cli_start_next_answer_verdict(db_args, capsys) -> None:
    from reality_coach.__main__ import main

    session_id = start_session(db_args, capsys)

    assert main([*db_args, "next", session_id]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["question"]["order"] == 1
    assert payload["question"]["bucket"] == "personality"
    assert payload["progress"] == {"current": 1, "total": 1, "answered": 0}

    question_id = payload["question"]["id"]
    assert main([*db_args, "answer", session_id, question_id, "yes"]) == 0
    outcome = json.loads(capsys.readouterr().out)
    assert outcome["done"] is False
    assert outcome["scoring"]["fit_score"] == 68

    assert main([*db_args, "verdict", session_id]) == 0
    verdict = json.loads(capsys.readouterr().out)
    assert verdict["session_id"] == session_id
    assert verdict["color"] == "amber"

    assert main([*db_args, "show", session_id]) == 0
    snapshot = json.loads(capsys.readouterr().out)
    assert snapshot["session"]["status"] == "completed"
    assert len(snapshot["answers"]) == 1


def test_cli_reports_service_errors(db_args, capsys) -> None:
    from reality_coach.__main__ import main

    assert main([*db_args, "next", "missing"]) == 1
    assert "Session not found" in capsys.readouterr().err


def test_cli_rejects_answers_on_completed_session(db_args, capsys) -> None:
    from reality_coach.__main__ import main

    session_id = start_session(db_args, capsys)
    main([*db_args, "next", session_id])
    question_id = json.loads(capsys.readouterr().out)["question"]["id"]
    main([*db_args, "verdict", session_id])
    capsys.readouterr()

    assert main([*db_args, "answer", session_id, question_id, "no"]) == 1
    assert "already completed" in capsys.readouterr().err


def test_cli_catalog_list(capsys) -> None:
    from reality_coach.__main__ import main

    assert main(["catalog", "list", "--bucket", "commitment"]) == 0

    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 3
    assert lines[0].startswith("commitment")
    assert "10" in lines[0]


def test_cli_bad_catalog_file_errors_cleanly(monkeypatch, tmp_path, capsys) -> None:
    from reality_coach.__main__ import main

    monkeypatch.setenv("CATALOG_PATH", str(tmp_path / "missing.yaml"))

    assert main(["catalog", "list"]) == 1
    assert "not found" in capsys.readouterr().err


def test_cli_uses_db_path_from_settings(monkeypatch, tmp_path, capsys) -> None:
    from reality_coach.__main__ import main
    from reality_coach.config.settings import get_settings

    db_path = tmp_path / "env" / "coach.db"
    monkeypatch.setenv("DB_PATH", str(db_path))

    session_id = start_session([], capsys)

    assert get_settings().db_path == db_path
    assert db_path.exists()
    assert main(["show", session_id]) == 0
    assert json.loads(capsys.readouterr().out)["session"]["id"] == session_id


def test_cli_sessions_recent(db_args, capsys) -> None:
    from reality_coach.__main__ import main

    session_id = start_session(db_args, capsys, role="Teacher")

    assert main([*db_args, "sessions", "recent"]) == 0
    out = capsys.readouterr().out
    assert session_id in out
    assert "Teacher" in out


def test_cli_interview_runs_to_verdict(db_args, monkeypatch, capsys) -> None:
    from reality_coach.__main__ import main

    monkeypatch.setattr("sys.stdin", io.StringIO("n\n" * 8))

    exit_code = main(
        [
            *db_args,
            "interview",
            "--role",
            "Registered Nurse",
            "--state",
            "CA",
            "--age-range",
            "25-34",
        ]
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Hard fail: 3 deal-breakers in personality" in out
    assert "Fit score: 0% (red)" in out
    assert "Prepare for the NCLEX-RN exam" in out


def test_cli_interview_can_be_paused(db_args, monkeypatch, capsys) -> None:
    from reality_coach.__main__ import main

    monkeypatch.setattr("sys.stdin", io.StringIO("maybe\ny\nq\n"))

    exit_code = main(
        [*db_args, "interview", "--role", "Chef", "--state", "TX", "--age-range", "35-44"]
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Please answer y or n." in out
    assert "Paused. Resume with: next" in out
