"""Data models for coaching sessions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from reality_coach.careers.models import AltCareer
from reality_coach.scoring.models import Bucket, BucketScores, Color, ScoredAnswer


class SessionStatus(str, Enum):
    """Lifecycle state of a session."""

    ACTIVE = "active"
    COMPLETED = "completed"


class QuestionSource(str, Enum):
    """Where a question's text came from."""

    CATALOG = "catalog"
    GENERATED = "generated"


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(UTC)


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class Session:
    """A questionnaire run for one target role.

    Attributes:
        id: Session identifier.
        target_role: Occupation being evaluated (free text).
        state: Two-letter region code.
        age_range: Bucketed age range, e.g. "25-34".
        has_quals: Whether the person already holds relevant qualifications.
        constraints: Free-text constraints given at intake.
        status: Lifecycle state.
        created_at: When the session was started.
        completed_at: When the session was completed.
    """

    target_role: str
    state: str
    age_range: str
    has_quals: bool
    constraints: str = ""
    id: str = field(default_factory=new_id)
    status: SessionStatus = SessionStatus.ACTIVE
    created_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "target_role": self.target_role,
            "state": self.state,
            "age_range": self.age_range,
            "has_quals": self.has_quals,
            "constraints": self.constraints,
            "status": self.status.value,
            "created_at": _format_datetime(self.created_at),
            "completed_at": _format_datetime(self.completed_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Session:
        return cls(
            id=data["id"],
            target_role=data["target_role"],
            state=data["state"],
            age_range=data["age_range"],
            has_quals=bool(data["has_quals"]),
            constraints=data.get("constraints") or "",
            status=SessionStatus(data["status"]),
            created_at=_parse_datetime(data["created_at"]) or utcnow(),
            completed_at=_parse_datetime(data.get("completed_at")),
        )


@dataclass
class Question:
    """A question issued to a session."""

    session_id: str
    order: int
    bucket: Bucket
    text: str
    weight: int
    source: QuestionSource = QuestionSource.GENERATED
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.order < 1:
            raise ValueError(f"order must be 1 or greater (got {self.order})")
        if not (1 <= self.weight <= 10):
            raise ValueError(f"weight must be between 1 and 10 (got {self.weight})")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "order": self.order,
            "bucket": self.bucket.value,
            "text": self.text,
            "weight": self.weight,
            "source": self.source.value,
            "created_at": _format_datetime(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Question:
        return cls(
            id=data["id"],
            session_id=data["session_id"],
            order=int(data["order"]),
            bucket=Bucket(data["bucket"]),
            text=data["text"],
            weight=int(data["weight"]),
            source=QuestionSource(data["source"]),
            created_at=_parse_datetime(data["created_at"]) or utcnow(),
        )


@dataclass
class Answer:
    """A yes/no answer to one question."""

    session_id: str
    question_id: str
    value: bool
    note: str | None = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "question_id": self.question_id,
            "value": self.value,
            "note": self.note,
            "created_at": _format_datetime(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Answer:
        return cls(
            id=data["id"],
            session_id=data["session_id"],
            question_id=data["question_id"],
            value=bool(data["value"]),
            note=data.get("note"),
            created_at=_parse_datetime(data["created_at"]) or utcnow(),
        )


@dataclass
class Verdict:
    """The finalized outcome of a session."""

    session_id: str
    fit_score: int
    color: Color
    summary: str
    bucket_scores: BucketScores
    mismatches: list[str] = field(default_factory=list)
    confidence: float = 0.0
    stop_reason: str | None = None
    next_steps: list[str] = field(default_factory=list)
    alt_careers: list[AltCareer] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "fit_score": self.fit_score,
            "color": self.color.value,
            "summary": self.summary,
            "bucket_scores": self.bucket_scores.to_dict(),
            "mismatches": list(self.mismatches),
            "confidence": self.confidence,
            "stop_reason": self.stop_reason,
            "next_steps": list(self.next_steps),
            "alt_careers": [career.to_dict() for career in self.alt_careers],
            "created_at": _format_datetime(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Verdict:
        return cls(
            session_id=data["session_id"],
            fit_score=int(data["fit_score"]),
            color=Color(data["color"]),
            summary=data["summary"],
            bucket_scores=BucketScores.from_dict(data["bucket_scores"]),
            mismatches=list(data.get("mismatches") or []),
            confidence=float(data.get("confidence") or 0.0),
            stop_reason=data.get("stop_reason"),
            next_steps=list(data.get("next_steps") or []),
            alt_careers=[AltCareer.from_dict(c) for c in data.get("alt_careers") or []],
            created_at=_parse_datetime(data["created_at"]) or utcnow(),
        )


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything known about a session at one point in time.

    Questions are ordered by ``order``; answers are in submission order.
    """

    session: Session
    questions: tuple[Question, ...] = ()
    answers: tuple[Answer, ...] = ()
    verdict: Verdict | None = None

    @property
    def answered_question_ids(self) -> set[str]:
        return {answer.question_id for answer in self.answers}

    def question(self, question_id: str) -> Question | None:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def unanswered_questions(self) -> list[Question]:
        answered = self.answered_question_ids
        return [q for q in self.questions if q.id not in answered]

    def answered_buckets(self) -> set[Bucket]:
        by_id = {question.id: question for question in self.questions}
        return {
            by_id[answer.question_id].bucket
            for answer in self.answers
            if answer.question_id in by_id
        }

    def scored_answers(self) -> list[ScoredAnswer]:
        """Answers joined with their question's bucket and weight."""
        by_id = {question.id: question for question in self.questions}
        scored: list[ScoredAnswer] = []
        for answer in self.answers:
            question = by_id.get(answer.question_id)
            if question is None:
                continue
            scored.append(
                ScoredAnswer(
                    bucket=question.bucket,
                    weight=question.weight,
                    value=answer.value,
                    note=answer.note,
                )
            )
        return scored

    def to_dict(self) -> dict:
        return {
            "session": self.session.to_dict(),
            "questions": [question.to_dict() for question in self.questions],
            "answers": [answer.to_dict() for answer in self.answers],
            "verdict": self.verdict.to_dict() if self.verdict else None,
        }
