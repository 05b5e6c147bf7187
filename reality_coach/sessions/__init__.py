"""Coaching sessions: records, storage and the session service.

Public API:
    - SessionService: start, next question, answer, verdict
    - SessionRepository: async SQLite storage
    - CoachError and its ValidationError / NotFoundError / ConflictError
"""

from reality_coach.sessions.errors import (
    CoachError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from reality_coach.sessions.models import (
    Answer,
    Question,
    QuestionSource,
    Session,
    SessionSnapshot,
    SessionStatus,
    Verdict,
)
from reality_coach.sessions.repository import SessionRepository, SessionSummary
from reality_coach.sessions.service import (
    AnswerOutcome,
    NextQuestion,
    Progress,
    SessionIntake,
    SessionService,
    compose_summary,
)

__all__ = [
    "SessionService",
    "SessionRepository",
    "SessionSummary",
    "SessionIntake",
    "NextQuestion",
    "Progress",
    "AnswerOutcome",
    "compose_summary",
    "Session",
    "SessionStatus",
    "SessionSnapshot",
    "Question",
    "QuestionSource",
    "Answer",
    "Verdict",
    "CoachError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
]
