"""Main entry point for the Career Reality Coach."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from reality_coach import __version__
from reality_coach.careers.directory import CareerDirectoryError
from reality_coach.config.settings import Settings, get_settings
from reality_coach.questions.catalog import CatalogError, QuestionCatalog
from reality_coach.scoring.models import Bucket
from reality_coach.sessions.errors import CoachError
from reality_coach.sessions.service import SessionService
from reality_coach.utils.logging import configure_logging

YES_REPLIES = {"y", "yes"}
NO_REPLIES = {"n", "no"}
QUIT_REPLIES = {"q", "quit"}


def _print_json(payload: object) -> None:
    def _default(value: object):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        return str(value)

    print(json.dumps(payload, indent=2, default=_default))


def _add_intake_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--role", required=True, help="Target occupation")
    parser.add_argument("--state", required=True, help="Two-letter region code")
    parser.add_argument(
        "--age-range", required=True, help='Age range, e.g. "25-34"'
    )
    parser.add_argument(
        "--has-quals",
        action="store_true",
        help="Already hold qualifications relevant to the role",
    )
    parser.add_argument(
        "--constraints", default="", help="Free-text constraints (time, money, location)"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="reality-coach",
        description="Career Reality Coach: adaptive yes/no career-fit questionnaire",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m reality_coach interview --role "Registered Nurse" --state CA --age-range 25-34
  python -m reality_coach start --role "Real Estate Agent" --state NY --age-range 35-44
  python -m reality_coach answer <session-id> <question-id> yes
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Override session DB path (defaults to settings)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands",
    )

    start_parser = subparsers.add_parser("start", help="Start a new session")
    _add_intake_arguments(start_parser)

    next_parser = subparsers.add_parser("next", help="Show the next question")
    next_parser.add_argument("session_id", help="Session id")

    answer_parser = subparsers.add_parser("answer", help="Answer a question")
    answer_parser.add_argument("session_id", help="Session id")
    answer_parser.add_argument("question_id", help="Question id")
    answer_parser.add_argument(
        "value", choices=sorted(YES_REPLIES | NO_REPLIES), help="yes or no"
    )
    answer_parser.add_argument("--note", default=None, help="Optional note")

    verdict_parser = subparsers.add_parser("verdict", help="Show the session verdict")
    verdict_parser.add_argument("session_id", help="Session id")

    show_parser = subparsers.add_parser("show", help="Show everything stored for a session")
    show_parser.add_argument("session_id", help="Session id")

    interview_parser = subparsers.add_parser(
        "interview", help="Run a session interactively on the terminal"
    )
    _add_intake_arguments(interview_parser)

    catalog_parser = subparsers.add_parser("catalog", help="Question catalog utilities")
    catalog_subparsers = catalog_parser.add_subparsers(dest="catalog_cmd", required=True)
    catalog_list = catalog_subparsers.add_parser("list", help="List active templates")
    catalog_list.add_argument(
        "--bucket",
        choices=[bucket.value for bucket in Bucket],
        default=None,
        help="Only list templates of this bucket",
    )

    sessions_parser = subparsers.add_parser("sessions", help="Session listing")
    sessions_subparsers = sessions_parser.add_subparsers(
        dest="sessions_cmd", required=True
    )
    sessions_recent = sessions_subparsers.add_parser("recent", help="List recent sessions")
    sessions_recent.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of sessions (defaults to settings)",
    )

    return parser


async def _cmd_start(service: SessionService, parsed: argparse.Namespace) -> int:
    session_id = await service.start_session(
        target_role=parsed.role,
        state=parsed.state,
        age_range=parsed.age_range,
        has_quals=parsed.has_quals,
        constraints=parsed.constraints,
    )
    print(session_id)
    return 0


async def _cmd_next(service: SessionService, parsed: argparse.Namespace) -> int:
    _print_json(await service.get_next_question(parsed.session_id))
    return 0


async def _cmd_answer(service: SessionService, parsed: argparse.Namespace) -> int:
    outcome = await service.submit_answer(
        parsed.session_id,
        parsed.question_id,
        parsed.value in YES_REPLIES,
        note=parsed.note,
    )
    _print_json(outcome)
    return 0


async def _cmd_verdict(service: SessionService, parsed: argparse.Namespace) -> int:
    _print_json(await service.get_verdict(parsed.session_id))
    return 0


async def _cmd_show(service: SessionService, parsed: argparse.Namespace) -> int:
    _print_json(await service.get_session(parsed.session_id))
    return 0


async def _cmd_sessions(service: SessionService, parsed: argparse.Namespace) -> int:
    summaries = await service.list_recent_sessions(parsed.limit)
    for summary in summaries:
        session = summary.session
        verdict = (
            f"{summary.fit_score} {summary.color.value}"
            if summary.color is not None
            else "-"
        )
        print(
            f"{session.created_at.isoformat()} {session.status.value} {session.id} "
            f"{session.state} {session.target_role} {verdict}"
        )
    return 0


def _prompt_answer() -> bool | None:
    """Read y/n from stdin; None when the user quits or input ends."""
    while True:
        try:
            reply = input("Answer [y/n, q to quit]: ").strip().lower()
        except EOFError:
            return None
        if reply in YES_REPLIES:
            return True
        if reply in NO_REPLIES:
            return False
        if reply in QUIT_REPLIES:
            return None
        print("Please answer y or n.")


async def _cmd_interview(service: SessionService, parsed: argparse.Namespace) -> int:
    session_id = await service.start_session(
        target_role=parsed.role,
        state=parsed.state,
        age_range=parsed.age_range,
        has_quals=parsed.has_quals,
        constraints=parsed.constraints,
    )
    print(f"Session {session_id}")

    while True:
        next_question = await service.get_next_question(session_id)
        question = next_question.question
        print(f"\n[{question.order}] ({question.bucket.value}) {question.text}")

        value = _prompt_answer()
        if value is None:
            print(f"\nPaused. Resume with: next {session_id}")
            return 0

        outcome = await service.submit_answer(session_id, question.id, value)
        if outcome.done:
            print(f"\n{outcome.stop_reason}")
            break

    verdict = await service.get_verdict(session_id)
    print(f"\nFit score: {verdict.fit_score}% ({verdict.color.value})")
    print(verdict.summary)
    for mismatch in verdict.mismatches:
        print(f"  ! {mismatch}")
    print("\nNext steps:")
    for step in verdict.next_steps:
        print(f"  - {step}")
    if verdict.alt_careers:
        print("\nAlternatives worth a look:")
        for career in verdict.alt_careers:
            print(f"  - {career.title}: {career.reason}")
    return 0


COMMANDS: dict[str, Callable[[SessionService, argparse.Namespace], Awaitable[int]]] = {
    "start": _cmd_start,
    "next": _cmd_next,
    "answer": _cmd_answer,
    "verdict": _cmd_verdict,
    "show": _cmd_show,
    "interview": _cmd_interview,
    "sessions": _cmd_sessions,
}


async def _run_command(service: SessionService, parsed: argparse.Namespace) -> int:
    await service.initialize()
    try:
        return await COMMANDS[parsed.command](service, parsed)
    finally:
        await service.close()


def _list_catalog(settings: Settings, bucket: str | None) -> int:
    catalog = (
        QuestionCatalog.from_file(settings.catalog_path)
        if settings.catalog_path
        else QuestionCatalog.default()
    )
    templates = catalog.list_active_templates(Bucket(bucket) if bucket else None)
    for template in templates:
        print(f"{template.bucket.value:<12} {template.weight:>2}  {template.pattern}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    # Load settings
    try:
        settings = get_settings()
    except PydanticValidationError as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    if parsed.command is None:
        parser.print_help()
        return 0

    if parsed.db is not None:
        settings = settings.model_copy(update={"db_path": parsed.db})

    logger.debug(f"Reality Coach v{__version__} running {parsed.command}")

    try:
        if parsed.command == "catalog":
            return _list_catalog(settings, parsed.bucket)

        service = SessionService.from_settings(settings)
        return asyncio.run(_run_command(service, parsed))
    except (CoachError, CatalogError, CareerDirectoryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
