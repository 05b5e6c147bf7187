"""Career facts lookup and alternative-career search."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from pydantic import ValidationError

from reality_coach.careers.models import Career, CareerFact
from reality_coach.utils.files import load_mapping

logger = logging.getLogger(__name__)


class CareerDirectoryError(Exception):
    """Raised when the career data cannot be loaded or queried."""


DEFAULT_FACTS: tuple[dict, ...] = (
    {
        "state": "CA",
        "role": "Registered Nurse",
        "licensing": (
            "California Board of Registered Nursing (BRN). Requires: Associate or "
            "Bachelor degree in nursing, NCLEX-RN exam, background check, 30 hours "
            "continuing education every 2 years."
        ),
        "training": (
            "2-4 years: Prerequisites (1-2 years) + Nursing program (2 years). "
            "Clinical hours: 800+ hours."
        ),
        "costs": (
            "Prerequisites: $3,000-8,000. Nursing program: $15,000-60,000. "
            "Total: $18,000-68,000."
        ),
        "salary": "Entry: $70,000-85,000. Median: $95,000-110,000. Experienced: $120,000+",
        "links": ["https://www.rn.ca.gov/", "https://www.bls.gov/oes/current/oes291141.htm"],
    },
    {
        "state": "NY",
        "role": "Registered Nurse",
        "licensing": (
            "New York State Education Department (NYSED). Requires: Associate or "
            "Bachelor degree, NCLEX-RN exam, background check, 3 hours infection "
            "control training."
        ),
        "training": (
            "2-4 years: Prerequisites (1-2 years) + Nursing program (2 years). "
            "Clinical hours: 800+ hours."
        ),
        "costs": (
            "Prerequisites: $4,000-10,000. Nursing program: $20,000-70,000. "
            "Total: $24,000-80,000."
        ),
        "salary": "Entry: $75,000-90,000. Median: $100,000-120,000. Experienced: $130,000+",
        "links": [
            "https://www.op.nysed.gov/prof/nursing/",
            "https://www.bls.gov/oes/current/oes291141.htm",
        ],
    },
    {
        "state": "CA",
        "role": "Real Estate Agent",
        "licensing": (
            "California Department of Real Estate (DRE). Requires: 135 hours "
            "pre-licensing education, background check, DRE exam, fingerprinting."
        ),
        "training": (
            "3-6 months: Pre-licensing courses (135 hours) + exam prep. No degree required."
        ),
        "costs": "Pre-licensing: $300-800. Exam fees: $60. License: $245. Total: $605-1,105.",
        "salary": (
            "Entry: $30,000-50,000 (commission-based). Median: $60,000-80,000. "
            "Top performers: $150,000+"
        ),
        "links": ["https://dre.ca.gov/", "https://www.bls.gov/oes/current/oes419021.htm"],
    },
    {
        "state": "CA",
        "role": "Licensed Therapist",
        "licensing": (
            "California Board of Behavioral Sciences (BBS). Requires: Master's degree "
            "in counseling/psychology, 3,000 supervised hours, background check, "
            "clinical exam."
        ),
        "training": (
            "6-8 years: Bachelor's (4 years) + Master's (2-3 years) + Supervised "
            "hours (1-2 years)."
        ),
        "costs": (
            "Bachelor's: $40,000-120,000. Master's: $30,000-80,000. Supervision: "
            "$2,000-5,000. Total: $72,000-205,000."
        ),
        "salary": "Entry: $45,000-60,000. Median: $65,000-85,000. Experienced: $90,000+",
        "links": ["https://www.bbs.ca.gov/", "https://www.bls.gov/oes/current/oes211013.htm"],
    },
    {
        "state": "CA",
        "role": "Software Engineer",
        "licensing": (
            "No license required. Optional certifications: AWS, Google Cloud, "
            "Microsoft Azure."
        ),
        "training": (
            "4+ years: Computer Science degree or bootcamp (3-12 months) + "
            "self-study. Portfolio required."
        ),
        "costs": "Degree: $40,000-200,000. Bootcamp: $10,000-20,000. Self-study: $500-2,000.",
        "salary": "Entry: $80,000-120,000. Median: $130,000-180,000. Senior: $200,000+",
        "links": ["https://www.bls.gov/oes/current/oes151251.htm"],
    },
)

DEFAULT_CAREERS: tuple[dict, ...] = (
    {
        "title": "Registered Nurse",
        "tags": ["healthcare", "medical", "patient-care", "clinical"],
        "personality_tags": [
            "conscientious",
            "empathetic",
            "detail-oriented",
            "stress-tolerant",
        ],
        "reality_tags": [
            "charting",
            "medication-administration",
            "patient-assessment",
            "shift-work",
            "physical-demand",
        ],
    },
    {
        "title": "Real Estate Agent",
        "tags": ["sales", "property", "commission", "flexible-schedule"],
        "personality_tags": [
            "outgoing",
            "persistent",
            "self-motivated",
            "people-oriented",
        ],
        "reality_tags": [
            "cold-calling",
            "showings",
            "paperwork",
            "irregular-income",
            "weekend-work",
        ],
    },
    {
        "title": "Software Engineer",
        "tags": ["technology", "programming", "problem-solving", "remote-friendly"],
        "personality_tags": [
            "analytical",
            "logical",
            "detail-oriented",
            "continuous-learner",
        ],
        "reality_tags": [
            "debugging",
            "code-reviews",
            "meetings",
            "deadline-pressure",
            "sitting-desk-work",
        ],
    },
    {
        "title": "Licensed Therapist",
        "tags": ["mental-health", "counseling", "helping-profession", "private-practice"],
        "personality_tags": [
            "empathetic",
            "patient",
            "good-listener",
            "emotionally-stable",
        ],
        "reality_tags": [
            "client-sessions",
            "documentation",
            "insurance-billing",
            "emotional-drain",
            "irregular-schedule",
        ],
    },
    {
        "title": "Teacher",
        "tags": ["education", "children", "public-service", "summers-off"],
        "personality_tags": [
            "patient",
            "creative",
            "organized",
            "passionate-about-learning",
        ],
        "reality_tags": [
            "lesson-planning",
            "grading",
            "parent-conferences",
            "classroom-management",
            "low-pay",
        ],
    },
)


def _normalize_tags(tags: Iterable[str]) -> set[str]:
    return {tag.strip().lower() for tag in tags if tag and tag.strip()}


class CareerDirectory:
    """In-memory career facts and careers, optionally loaded from a file."""

    def __init__(
        self,
        facts: Sequence[CareerFact] = (),
        careers: Sequence[Career] = (),
    ) -> None:
        self._facts: dict[tuple[str, str], CareerFact] = {
            (fact.state, fact.role.strip().lower()): fact for fact in facts
        }
        self._careers: list[Career] = list(careers)

    @classmethod
    def default(cls) -> CareerDirectory:
        """Directory seeded with the built-in facts and careers."""
        return cls.from_data({"facts": DEFAULT_FACTS, "careers": DEFAULT_CAREERS})

    @classmethod
    def from_data(cls, data: dict) -> CareerDirectory:
        try:
            facts = [CareerFact.model_validate(item) for item in data.get("facts") or []]
            careers = [Career.model_validate(item) for item in data.get("careers") or []]
        except ValidationError as e:
            raise CareerDirectoryError(f"Invalid career data: {e}") from e
        return cls(facts=facts, careers=careers)

    @classmethod
    def from_file(cls, path: Path | str) -> CareerDirectory:
        """Load facts and careers from a YAML/JSON file with
        ``facts`` and ``careers`` lists."""
        try:
            data = load_mapping(path)
        except (FileNotFoundError, ValueError) as e:
            raise CareerDirectoryError(str(e)) from e
        directory = cls.from_data(data)
        logger.info(
            f"Loaded {len(directory._facts)} career facts and "
            f"{len(directory._careers)} careers from {path}"
        )
        return directory

    @property
    def careers(self) -> list[Career]:
        return list(self._careers)

    @property
    def facts(self) -> list[CareerFact]:
        return list(self._facts.values())

    def get_fact(self, state: str, role: str) -> CareerFact | None:
        """Return the fact for (state, role), or None if unknown."""
        return self._facts.get((state.strip().upper(), role.strip().lower()))

    def search(
        self,
        personality_tags: Iterable[str] = (),
        reality_tags: Iterable[str] = (),
    ) -> list[Career]:
        """Return careers sharing any personality or reality tag, in
        directory order."""
        wanted_personality = _normalize_tags(personality_tags)
        wanted_reality = _normalize_tags(reality_tags)
        if not wanted_personality and not wanted_reality:
            return []

        return [
            career
            for career in self._careers
            if wanted_personality & _normalize_tags(career.personality_tags)
            or wanted_reality & _normalize_tags(career.reality_tags)
        ]
