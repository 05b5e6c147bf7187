"""Next-question selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from reality_coach.careers.directory import CareerDirectory, CareerDirectoryError
from reality_coach.questions.catalog import CatalogError, QuestionCatalog
from reality_coach.questions.render import build_context, render_template
from reality_coach.scoring.models import Bucket

if TYPE_CHECKING:
    from reality_coach.careers.models import CareerFact
    from reality_coach.sessions.models import Question, Session, SessionSnapshot

logger = logging.getLogger(__name__)

BUCKET_PRIORITY: tuple[Bucket, ...] = (
    Bucket.PERSONALITY,
    Bucket.DAILY,
    Bucket.COMMITMENT,
    Bucket.LIFESTYLE,
    Bucket.ENTRY,
    Bucket.UNSEXY,
)

FALLBACK_PATTERN = (
    "Are you prepared to invest significant time and money in training for {role}?"
)
FALLBACK_BUCKET = Bucket.COMMITMENT
FALLBACK_WEIGHT = 7


@dataclass(frozen=True)
class QuestionDraft:
    """A rendered question that has not been stored yet."""

    bucket: Bucket
    text: str
    weight: int
    from_fallback: bool = False


def pick_target_bucket(answered: set[Bucket]) -> Bucket:
    """First bucket in priority order without an answer; personality once
    every bucket is covered."""
    for bucket in BUCKET_PRIORITY:
        if bucket not in answered:
            return bucket
    return Bucket.PERSONALITY


class QuestionSelector:
    """Returns the next question a session should see.

    An issued but unanswered question always comes first (lowest order);
    otherwise a new question is rendered from the catalog.
    """

    def __init__(
        self,
        catalog: QuestionCatalog,
        directory: CareerDirectory | None = None,
    ) -> None:
        self.catalog = catalog
        self.directory = directory

    def select(self, snapshot: SessionSnapshot) -> Question | QuestionDraft:
        pending = snapshot.unanswered_questions()
        if pending:
            return min(pending, key=lambda question: question.order)
        return self.draft(snapshot)

    def draft(self, snapshot: SessionSnapshot) -> QuestionDraft:
        session = snapshot.session
        bucket = pick_target_bucket(snapshot.answered_buckets())
        context = build_context(
            session.target_role, session.state, self._lookup_fact(session)
        )

        try:
            templates = self.catalog.list_active_templates(bucket)
        except CatalogError as e:
            logger.warning(f"Catalog lookup failed for bucket {bucket.value}: {e}")
            templates = []

        if not templates:
            logger.info(
                f"No active templates for bucket {bucket.value}; using fallback question"
            )
            return QuestionDraft(
                bucket=FALLBACK_BUCKET,
                text=render_template(FALLBACK_PATTERN, context),
                weight=FALLBACK_WEIGHT,
                from_fallback=True,
            )

        # max() keeps the first of equal weights
        template = max(templates, key=lambda t: t.weight)
        return QuestionDraft(
            bucket=template.bucket,
            text=render_template(template.pattern, context),
            weight=template.weight,
        )

    def _lookup_fact(self, session: Session) -> CareerFact | None:
        if self.directory is None:
            return None
        try:
            return self.directory.get_fact(session.state, session.target_role)
        except CareerDirectoryError as e:
            logger.warning(f"Career fact lookup failed: {e}")
            return None
