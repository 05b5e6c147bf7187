"""Alternative-career suggestions for a finished session."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from reality_coach.careers.directory import CareerDirectory, CareerDirectoryError
from reality_coach.careers.models import AltCareer, Career

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5

# Mismatch keyword -> reality tags worth searching for
REALITY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("personality", ("people-oriented", "detail-oriented", "stress-tolerant")),
    ("daily", ("administrative", "routine", "physical-demand")),
    ("commitment", ("training", "education", "certification")),
    ("lifestyle", ("flexible-schedule", "work-life-balance")),
)


def extract_reality_keywords(mismatches: Sequence[str]) -> list[str]:
    """Map mismatch findings to reality tags, in mismatch order."""
    keywords: list[str] = []
    for mismatch in mismatches:
        lowered = mismatch.lower()
        for needle, tags in REALITY_KEYWORDS:
            if needle in lowered:
                keywords.extend(tags)
    return keywords


def compose_reason(career: Career, target_role: str, mismatches: Sequence[str]) -> str:
    reasons: list[str] = []
    if career.personality_tags:
        reasons.append(
            "Better matches your personality traits: "
            + ", ".join(career.personality_tags[:2])
        )
    if career.reality_tags:
        reasons.append(
            "More aligned with your preferred work style: "
            + ", ".join(career.reality_tags[:2])
        )

    lowered = [m.lower() for m in mismatches]
    if any("commitment" in m for m in lowered):
        reasons.append("Requires less upfront training and investment")
    if any("lifestyle" in m for m in lowered):
        reasons.append("Offers better work-life balance")

    return ". ".join(reasons) or f"Similar to {target_role} but with different requirements"


class AltCareerAdvisor:
    """Searches the career directory for alternatives to the target role."""

    def __init__(
        self, directory: CareerDirectory, limit: int = MAX_SUGGESTIONS
    ) -> None:
        self.directory = directory
        self.limit = limit

    def suggest(
        self,
        target_role: str,
        mismatches: Sequence[str],
        personality_flags: Sequence[str] = (),
    ) -> list[AltCareer]:
        """Return up to ``limit`` suggestions; an empty list if the
        directory lookup fails."""
        try:
            careers = self.directory.search(
                personality_tags=personality_flags,
                reality_tags=extract_reality_keywords(mismatches),
            )
        except CareerDirectoryError as e:
            logger.warning(f"Alternative career search failed: {e}")
            return []

        return [
            AltCareer(
                title=career.title,
                reason=compose_reason(career, target_role, mismatches),
            )
            for career in careers[: self.limit]
        ]
