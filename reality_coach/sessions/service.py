"""Session service for the Career Reality Coach.

This module provides the SessionService class which handles:
- Intake validation and session creation
- Next-question selection and persistence
- Answer submission with adaptive stopping
- Verdict assembly (summary, next steps, alternative careers)
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

from pydantic import BaseModel, Field, StrictBool, field_validator
from pydantic import ValidationError as PydanticValidationError

from reality_coach.careers.advisor import AltCareerAdvisor
from reality_coach.careers.directory import CareerDirectory
from reality_coach.config.settings import Settings
from reality_coach.questions.catalog import QuestionCatalog
from reality_coach.questions.selector import QuestionSelector
from reality_coach.scoring.config import ScoringConfig
from reality_coach.scoring.engine import ScoringEngine
from reality_coach.scoring.models import Bucket, Color, ScoringResult
from reality_coach.scoring.next_steps import NextStepsGenerator
from reality_coach.sessions.errors import ConflictError, NotFoundError, ValidationError
from reality_coach.sessions.models import (
    Answer,
    Question,
    QuestionSource,
    Session,
    SessionSnapshot,
    Verdict,
    utcnow,
)
from reality_coach.sessions.repository import SessionRepository, SessionSummary

logger = logging.getLogger(__name__)


class SessionIntake(BaseModel):
    """Validated intake for a new session."""

    target_role: str = Field(min_length=1)
    state: str = Field(min_length=1)
    age_range: str = Field(min_length=1)
    has_quals: StrictBool
    constraints: str = ""

    @field_validator("target_role", "state", "age_range", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator("state")
    @classmethod
    def uppercase_state(cls, v: str) -> str:
        return v.upper()

    @field_validator("constraints", mode="before")
    @classmethod
    def default_constraints(cls, v: object) -> object:
        return "" if v is None else v


@dataclass(frozen=True)
class Progress:
    """Position of a question within its session."""

    current: int
    total: int
    answered: int

    def to_dict(self) -> dict:
        return {"current": self.current, "total": self.total, "answered": self.answered}


@dataclass(frozen=True)
class NextQuestion:
    question: Question
    progress: Progress

    def to_dict(self) -> dict:
        return {"question": self.question.to_dict(), "progress": self.progress.to_dict()}


@dataclass(frozen=True)
class AnswerOutcome:
    """Result of submitting one answer.

    ``scoring`` covers every answer stored for the session so far.
    """

    answer: Answer
    scoring: ScoringResult
    done: bool
    stop_reason: str | None = None

    def to_dict(self) -> dict:
        return {
            "answer": self.answer.to_dict(),
            "scoring": self.scoring.to_dict(),
            "done": self.done,
            "stop_reason": self.stop_reason,
        }


def compose_summary(result: ScoringResult, target_role: str) -> str:
    """One paragraph describing the verdict tier."""
    if result.color == Color.GREEN:
        return (
            f"Great news! Your score of {result.fit_score}% suggests that "
            f"{target_role} is a strong fit for you. Your personality, daily "
            "preferences, and lifestyle align well with what this career demands."
        )
    if result.color == Color.AMBER:
        return (
            f"Your score of {result.fit_score}% indicates a mixed fit for "
            f"{target_role}. While there are some areas of alignment, there are "
            "also significant mismatches that you should consider carefully "
            "before committing to this career path."
        )
    return (
        f"Your score of {result.fit_score}% suggests that {target_role} may not "
        "be the best fit for you. The mismatches identified could lead to "
        "frustration and dissatisfaction in this career. Consider exploring "
        "alternative paths that better match your personality and preferences."
    )


class SessionService:
    """Transport-agnostic operations over coaching sessions.

    This class coordinates the repository, the question selector, the
    scoring engine and the verdict collaborators. Every operation reads
    one SessionSnapshot and works from it.
    """

    def __init__(
        self,
        repository: SessionRepository,
        catalog: QuestionCatalog | None = None,
        directory: CareerDirectory | None = None,
        scoring_config: ScoringConfig | None = None,
        next_steps: NextStepsGenerator | None = None,
        advisor: AltCareerAdvisor | None = None,
        recent_sessions_limit: int = 100,
    ):
        """Initialize the service.

        Args:
            repository: Session storage.
            catalog: Question templates; the built-in catalog if omitted.
            directory: Career facts and careers; the built-in data if omitted.
            scoring_config: Scoring constants; the environment-backed
                singleton if omitted.
            next_steps: Next-steps generator.
            advisor: Alternative-career advisor; built over ``directory``
                if omitted.
            recent_sessions_limit: Default size of the recent-sessions list.
        """
        self.repository = repository
        self.catalog = catalog or QuestionCatalog.default()
        self.directory = directory or CareerDirectory.default()
        self.engine = ScoringEngine(scoring_config)
        self.selector = QuestionSelector(self.catalog, self.directory)
        self.next_steps = next_steps or NextStepsGenerator()
        self.advisor = advisor or AltCareerAdvisor(self.directory)
        self.recent_sessions_limit = recent_sessions_limit

    @classmethod
    def from_settings(cls, settings: Settings) -> SessionService:
        """Build a service from application settings.

        Raises:
            CatalogError: If the configured catalog file is malformed.
            CareerDirectoryError: If the configured careers file is malformed.
        """
        catalog = (
            QuestionCatalog.from_file(settings.catalog_path)
            if settings.catalog_path
            else QuestionCatalog.default()
        )
        directory = (
            CareerDirectory.from_file(settings.careers_path)
            if settings.careers_path
            else CareerDirectory.default()
        )
        return cls(
            SessionRepository(settings.db_path),
            catalog=catalog,
            directory=directory,
            recent_sessions_limit=settings.recent_sessions_limit,
        )

    async def initialize(self) -> None:
        await self.repository.initialize()

    async def close(self) -> None:
        await self.repository.close()

    async def start_session(
        self,
        target_role: str,
        state: str,
        age_range: str,
        has_quals: bool,
        constraints: str | None = "",
    ) -> str:
        """Create an active session and return its id.

        Raises:
            ValidationError: If role, state or age range is missing or blank,
                or ``has_quals`` is not a bool.
        """
        try:
            intake = SessionIntake(
                target_role=target_role,
                state=state,
                age_range=age_range,
                has_quals=has_quals,
                constraints=constraints,
            )
        except PydanticValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
            raise ValidationError(f"Invalid intake: {fields}") from e

        session = Session(
            target_role=intake.target_role,
            state=intake.state,
            age_range=intake.age_range,
            has_quals=intake.has_quals,
            constraints=intake.constraints,
        )
        await self.repository.insert_session(session)
        logger.info(
            f"Started session {session.id} for {session.target_role} in {session.state}"
        )
        return session.id

    async def get_next_question(self, session_id: str) -> NextQuestion:
        """Return the earliest unanswered question, issuing a new one if
        every issued question has been answered.

        Raises:
            NotFoundError: If the session does not exist.
            ConflictError: If the session is completed.
        """
        snapshot = await self._load_active(session_id)
        answered = len(snapshot.answers)

        choice = self.selector.select(snapshot)
        if isinstance(choice, Question):
            return NextQuestion(
                question=choice,
                progress=Progress(
                    current=choice.order,
                    total=len(snapshot.questions),
                    answered=answered,
                ),
            )

        question = Question(
            session_id=session_id,
            order=len(snapshot.questions) + 1,
            bucket=choice.bucket,
            text=choice.text,
            weight=choice.weight,
            source=QuestionSource.GENERATED,
        )
        stored = await self.repository.create_question(question)
        if stored is None:
            raise ConflictError(f"Session already completed: {session_id}")
        if stored.id != question.id:
            logger.debug(
                f"Question {stored.order} of session {session_id} was issued concurrently"
            )
        else:
            logger.info(
                f"Issued question {stored.order} ({stored.bucket.value}, "
                f"weight {stored.weight}) for session {session_id}"
            )

        return NextQuestion(
            question=stored,
            progress=Progress(current=stored.order, total=stored.order, answered=answered),
        )

    async def submit_answer(
        self,
        session_id: str,
        question_id: str,
        value: bool,
        note: str | None = None,
    ) -> AnswerOutcome:
        """Record an answer, rescore the session and stop it if the stop
        policy says so.

        Raises:
            ValidationError: If ``value`` is not a bool, or the question
                belongs to another session or is already answered.
            NotFoundError: If the session or question does not exist.
            ConflictError: If the session is completed.
        """
        if not isinstance(value, bool):
            raise ValidationError("Answer value must be true or false")
        if not question_id:
            raise ValidationError("Question id is required")

        snapshot = await self._load_active(session_id)

        question = snapshot.question(question_id)
        if question is None:
            if await self.repository.get_question(question_id) is None:
                raise NotFoundError(f"Question not found: {question_id}")
            raise ValidationError(
                f"Question {question_id} does not belong to session {session_id}"
            )
        if question_id in snapshot.answered_question_ids:
            raise ValidationError(f"Question {question_id} is already answered")

        answer = Answer(
            session_id=session_id,
            question_id=question_id,
            value=value,
            note=note or None,
        )
        try:
            stored = await self.repository.insert_answer(answer)
        except sqlite3.IntegrityError as e:
            raise ValidationError(f"Question {question_id} is already answered") from e
        if not stored:
            raise ConflictError(f"Session already completed: {session_id}")

        snapshot = await self._load(session_id)
        result = self.engine.score(snapshot.scored_answers())
        logger.debug(
            f"Session {session_id}: {len(snapshot.answers)} answers, "
            f"fit {result.fit_score}, confidence {result.confidence:.2f}"
        )

        if result.should_stop:
            if await self.repository.mark_completed(session_id, utcnow()):
                logger.info(f"Session {session_id} completed: {result.stop_reason}")

        return AnswerOutcome(
            answer=answer,
            scoring=result,
            done=result.should_stop,
            stop_reason=result.stop_reason,
        )

    async def get_verdict(self, session_id: str) -> Verdict:
        """Return the session's verdict, computing and storing it on the
        first request. The session is completed as part of storing it.

        Raises:
            NotFoundError: If the session does not exist.
        """
        snapshot = await self._load(session_id)
        if snapshot.verdict is not None:
            return snapshot.verdict

        session = snapshot.session
        scored = snapshot.scored_answers()
        result = self.engine.score(scored)

        personality_flags = [
            answer.note
            for answer in scored
            if answer.bucket == Bucket.PERSONALITY and answer.value and answer.note
        ]
        verdict = Verdict(
            session_id=session_id,
            fit_score=result.fit_score,
            color=result.color,
            summary=compose_summary(result, session.target_role),
            bucket_scores=result.bucket_scores,
            mismatches=list(result.mismatches),
            confidence=result.confidence,
            stop_reason=result.stop_reason,
            next_steps=self.next_steps.generate(
                result, session.state, session.target_role
            ),
            alt_careers=self.advisor.suggest(
                session.target_role, result.mismatches, personality_flags
            ),
        )

        stored = await self.repository.create_verdict(verdict)
        if stored.created_at == verdict.created_at:
            logger.info(
                f"Verdict for session {session_id}: {stored.fit_score} ({stored.color.value})"
            )
        return stored

    async def get_session(self, session_id: str) -> SessionSnapshot:
        """Return everything stored for a session.

        Raises:
            NotFoundError: If the session does not exist.
        """
        return await self._load(session_id)

    async def list_recent_sessions(self, limit: int | None = None) -> list[SessionSummary]:
        if limit is not None and limit < 1:
            raise ValidationError(f"Limit must be positive (got {limit})")
        return await self.repository.list_recent_sessions(
            limit=limit or self.recent_sessions_limit
        )

    async def _load(self, session_id: str) -> SessionSnapshot:
        snapshot = await self.repository.load_snapshot(session_id)
        if snapshot is None:
            raise NotFoundError(f"Session not found: {session_id}")
        return snapshot

    async def _load_active(self, session_id: str) -> SessionSnapshot:
        snapshot = await self._load(session_id)
        if snapshot.session.is_completed:
            raise ConflictError(f"Session already completed: {session_id}")
        return snapshot
