"""Fit scoring, adaptive stopping and next-step recommendations.

Public API:
    - ScoringEngine: answers -> ScoringResult (pure)
    - NextStepsGenerator: ScoringResult + location + role -> next steps
    - ScoringConfig: immutable scoring constants
"""

from reality_coach.scoring.config import (
    ScoringConfig,
    get_scoring_config,
    reset_scoring_config,
)
from reality_coach.scoring.engine import ScoringEngine
from reality_coach.scoring.models import (
    SCORED_BUCKETS,
    Bucket,
    BucketScores,
    Color,
    ScoredAnswer,
    ScoringResult,
    StopDecision,
)
from reality_coach.scoring.next_steps import NextStepsGenerator

__all__ = [
    "ScoringEngine",
    "NextStepsGenerator",
    "ScoringConfig",
    "get_scoring_config",
    "reset_scoring_config",
    "Bucket",
    "SCORED_BUCKETS",
    "BucketScores",
    "Color",
    "ScoredAnswer",
    "ScoringResult",
    "StopDecision",
]
