"""Placeholder substitution for question templates."""

from __future__ import annotations

import re
from collections.abc import Mapping

from reality_coach.careers.models import CareerFact

_PLACEHOLDER_RE = re.compile(r"\{([a-z_]+)\}")
_LEADING_DURATION_RE = re.compile(r"^\s*([^:]+?)\s*:")
_TOTAL_COST_RE = re.compile(r"Total:\s*([^\s.]+(?:\.\d+)?)", re.IGNORECASE)

# Canned phrases for every placeholder the catalog uses besides role/state.
DEFAULT_PHRASES: dict[str, str] = {
    "routine_task": "routine administrative tasks",
    "exciting_task": "the exciting parts you see on TV",
    "physical_demand": "lifting 50+ pounds and being on your feet for 8+ hours",
    "technology_requirement": "learning new software and systems regularly",
    "training_duration": "2-4 years of education and training",
    "ongoing_requirement": "continuing education and certification maintenance",
    "financial_commitment": "$20,000-60,000",
    "schedule_requirement": "12-hour shifts including nights and weekends",
    "work_life_balance_challenge": "irregular hours and high stress",
    "prerequisite_requirement": "a bachelor's degree or equivalent experience",
    "entry_level_position": "an entry-level position with lower pay",
    "unpleasant_aspect": "dealing with difficult people and stressful situations",
    "boring_task": "extensive paperwork and documentation",
}


def build_context(
    target_role: str, state: str, fact: CareerFact | None = None
) -> dict[str, str]:
    """Placeholder values for a session.

    A career fact, when available, replaces the generic training duration
    ("2-4 years: ..." -> "2-4 years") and financial commitment
    ("... Total: $18,000-68,000." -> "$18,000-68,000").
    """
    context = dict(DEFAULT_PHRASES)
    context["role"] = target_role
    context["state"] = state

    if fact is not None:
        duration = _LEADING_DURATION_RE.match(fact.training)
        if duration:
            context["training_duration"] = duration.group(1)
        total = _TOTAL_COST_RE.search(fact.costs)
        if total:
            context["financial_commitment"] = total.group(1)

    return context


def render_template(pattern: str, context: Mapping[str, str]) -> str:
    """Replace every ``{name}`` in one pass; unknown names are kept verbatim."""
    return _PLACEHOLDER_RE.sub(
        lambda match: context.get(match.group(1), match.group(0)), pattern
    )
