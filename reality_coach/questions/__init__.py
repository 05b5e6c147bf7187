"""Question catalog, template rendering and next-question selection.

Public API:
    - QuestionCatalog: read-only template list
    - QuestionSelector: picks or drafts the next question of a session
    - render_template / build_context: placeholder substitution
"""

from reality_coach.questions.catalog import CatalogError, QuestionCatalog, QuestionTemplate
from reality_coach.questions.render import DEFAULT_PHRASES, build_context, render_template
from reality_coach.questions.selector import (
    BUCKET_PRIORITY,
    QuestionDraft,
    QuestionSelector,
    pick_target_bucket,
)

__all__ = [
    "QuestionCatalog",
    "QuestionTemplate",
    "CatalogError",
    "QuestionSelector",
    "QuestionDraft",
    "BUCKET_PRIORITY",
    "pick_target_bucket",
    "DEFAULT_PHRASES",
    "build_context",
    "render_template",
]
