"""Rule-based next-step recommendations for a finished session."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from reality_coach.scoring.models import Bucket, Color, ScoringResult

TIER_STEPS: dict[Color, tuple[str, ...]] = {
    Color.RED: (
        "Consider alternative career paths that better match your personality and lifestyle",
        "Research careers with similar skills but different daily realities",
    ),
    Color.AMBER: (
        "Address the identified mismatches before committing to this career",
        "Shadow someone in this field for a day to experience the reality",
    ),
    Color.GREEN: (
        "This career appears to be a good fit for you!",
        "Start networking with professionals in this field",
    ),
}

LOCATION_STEPS: dict[str, tuple[str, ...]] = {
    "CA": (
        "Research California-specific licensing requirements",
        "Check with the appropriate state board for current regulations",
    ),
    "NY": (
        "Review New York state requirements and regulations",
        "Consider the cost of living in your target area",
    ),
}

# Checked in order; only the first matching keyword contributes.
ROLE_STEPS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "nurse",
        (
            "Complete prerequisite courses if not already done",
            "Apply to accredited nursing programs",
            "Prepare for the NCLEX-RN exam",
        ),
    ),
    (
        "real estate",
        (
            "Complete pre-licensing education requirements",
            "Find a sponsoring broker",
            "Pass the state real estate exam",
        ),
    ),
)

REMINDER_THRESHOLD = 50
COMMITMENT_REMINDER = "Evaluate if you can commit to the required training timeline"
LIFESTYLE_REMINDER = "Consider how this career will impact your personal life"


class NextStepsGenerator:
    """Builds the ordered next-steps list of a verdict.

    Steps are appended tier first, then location, role keyword and bucket
    reminders; nothing is shuffled or deduplicated.
    """

    def __init__(
        self,
        location_steps: Mapping[str, Sequence[str]] | None = None,
        role_steps: Sequence[tuple[str, Sequence[str]]] | None = None,
    ) -> None:
        self.location_steps = LOCATION_STEPS if location_steps is None else location_steps
        self.role_steps = ROLE_STEPS if role_steps is None else role_steps

    def generate(self, result: ScoringResult, state: str, role: str) -> list[str]:
        steps: list[str] = list(TIER_STEPS[result.color])
        steps.extend(self.location_steps.get(state.strip().upper(), ()))

        role_lower = role.lower()
        for keyword, role_specific in self.role_steps:
            if keyword in role_lower:
                steps.extend(role_specific)
                break

        if result.bucket_scores.get(Bucket.COMMITMENT) < REMINDER_THRESHOLD:
            steps.append(COMMITMENT_REMINDER)
        if result.bucket_scores.get(Bucket.LIFESTYLE) < REMINDER_THRESHOLD:
            steps.append(LIFESTYLE_REMINDER)

        return steps
