"""Question template catalog."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from reality_coach.scoring.models import Bucket
from reality_coach.utils.files import load_mapping

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when the question catalog cannot be loaded or queried."""


class QuestionTemplate(BaseModel):
    """A weighted question pattern with ``{named}`` placeholders."""

    bucket: Bucket = Field(..., description="Bucket the question belongs to")
    pattern: str = Field(..., min_length=1, description="Question text pattern")
    weight: int = Field(default=5, ge=1, le=10, description="Importance weight")
    is_active: bool = Field(default=True, description="Whether the template is used")


DEFAULT_TEMPLATES: tuple[dict, ...] = (
    {
        "bucket": "personality",
        "pattern": "When stressed, can you follow protocols precisely rather than improvise?",
        "weight": 8,
    },
    {
        "bucket": "personality",
        "pattern": "Do you prefer working independently or as part of a team?",
        "weight": 6,
    },
    {
        "bucket": "personality",
        "pattern": "Are you comfortable making high-stakes decisions quickly?",
        "weight": 7,
    },
    {
        "bucket": "daily",
        "pattern": (
            "Are you okay with 50-70% of your shift being {routine_task} "
            "rather than {exciting_task}?"
        ),
        "weight": 6,
    },
    {
        "bucket": "daily",
        "pattern": "Can you handle {physical_demand} on a regular basis?",
        "weight": 5,
    },
    {
        "bucket": "daily",
        "pattern": "Are you comfortable with {technology_requirement}?",
        "weight": 4,
    },
    {
        "bucket": "commitment",
        "pattern": (
            "Are you willing to complete {training_duration} before you can "
            "practice in {state}?"
        ),
        "weight": 10,
    },
    {
        "bucket": "commitment",
        "pattern": "Can you commit to {ongoing_requirement} for the duration of your career?",
        "weight": 8,
    },
    {
        "bucket": "commitment",
        "pattern": "Are you prepared to invest {financial_commitment} in your career development?",
        "weight": 7,
    },
    {
        "bucket": "lifestyle",
        "pattern": "Can you work {schedule_requirement}?",
        "weight": 6,
    },
    {
        "bucket": "lifestyle",
        "pattern": "Are you willing to relocate for better opportunities?",
        "weight": 5,
    },
    {
        "bucket": "lifestyle",
        "pattern": "Can you handle {work_life_balance_challenge}?",
        "weight": 4,
    },
    {
        "bucket": "entry",
        "pattern": "Do you have {prerequisite_requirement}?",
        "weight": 9,
    },
    {
        "bucket": "entry",
        "pattern": "Are you prepared to start at {entry_level_position}?",
        "weight": 6,
    },
    {
        "bucket": "unsexy",
        "pattern": "Are you fine with {unpleasant_aspect}?",
        "weight": 5,
    },
    {
        "bucket": "unsexy",
        "pattern": "Can you handle {boring_task} as part of your daily routine?",
        "weight": 4,
    },
)


class QuestionCatalog:
    """Read-only list of question templates in catalog order."""

    def __init__(self, templates: Sequence[QuestionTemplate] = ()) -> None:
        self._templates: tuple[QuestionTemplate, ...] = tuple(templates)

    @classmethod
    def default(cls) -> QuestionCatalog:
        """Catalog seeded with the built-in templates."""
        return cls.from_data({"templates": DEFAULT_TEMPLATES})

    @classmethod
    def from_data(cls, data: dict) -> QuestionCatalog:
        try:
            templates = [
                QuestionTemplate.model_validate(item)
                for item in data.get("templates") or []
            ]
        except ValidationError as e:
            raise CatalogError(f"Invalid question template: {e}") from e
        return cls(templates)

    @classmethod
    def from_file(cls, path: Path | str) -> QuestionCatalog:
        """Load templates from a YAML/JSON file with a ``templates`` list."""
        try:
            data = load_mapping(path)
        except (FileNotFoundError, ValueError) as e:
            raise CatalogError(str(e)) from e
        catalog = cls.from_data(data)
        logger.info(f"Loaded {len(catalog)} question templates from {path}")
        return catalog

    def __len__(self) -> int:
        return len(self._templates)

    @property
    def templates(self) -> list[QuestionTemplate]:
        return list(self._templates)

    def list_active_templates(self, bucket: Bucket | None = None) -> list[QuestionTemplate]:
        """Active templates, optionally for one bucket, heaviest first.

        The sort is stable, so equal weights keep catalog order.
        """
        active = [
            template
            for template in self._templates
            if template.is_active and (bucket is None or template.bucket == bucket)
        ]
        return sorted(active, key=lambda template: template.weight, reverse=True)
