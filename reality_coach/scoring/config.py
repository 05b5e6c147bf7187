"""Configuration settings for the scoring engine."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from reality_coach.scoring.models import SCORED_BUCKETS, Bucket


class ScoringConfig(BaseSettings):
    """Scoring and adaptive-stopping configuration.

    The instance is frozen; build a new one (keyword overrides or
    ``SCORING_`` environment variables) to change behaviour.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Bucket weights for the overall fit score (must sum to 100)
    weight_personality: Annotated[int, Field(ge=0, le=100)] = 35
    weight_daily: Annotated[int, Field(ge=0, le=100)] = 25
    weight_commitment: Annotated[int, Field(ge=0, le=100)] = 20
    weight_lifestyle: Annotated[int, Field(ge=0, le=100)] = 20

    # A bucket scoring below its threshold is reported as a mismatch
    threshold_personality: Annotated[int, Field(ge=0, le=100)] = 60
    threshold_daily: Annotated[int, Field(ge=0, le=100)] = 50
    threshold_commitment: Annotated[int, Field(ge=0, le=100)] = 40
    threshold_lifestyle: Annotated[int, Field(ge=0, le=100)] = 50

    neutral_score: Annotated[int, Field(ge=0, le=100)] = Field(
        default=50,
        description="Score of a bucket with no answers",
    )

    # Color tiers (lower bound inclusive)
    green_threshold: Annotated[int, Field(ge=0, le=100)] = 75
    amber_threshold: Annotated[int, Field(ge=0, le=100)] = 50

    # Critical questions and deal-breakers
    critical_weight: Annotated[int, Field(ge=1, le=10)] = Field(
        default=8,
        description="Questions at or above this weight are critical",
    )
    critical_no_penalty: Annotated[int, Field(ge=1)] = Field(
        default=2,
        description="Multiplier applied to a 'no' on a critical question",
    )
    deal_breaker_threshold: Annotated[int, Field(ge=1)] = Field(
        default=3,
        description="Critical 'no' answers that trigger a hard fail",
    )

    # Adaptive stopping
    confidence_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = 0.9
    confidence_saturation: Annotated[float, Field(gt=0.0, le=1.0)] = Field(
        default=0.8,
        description="Share of the weight pool treated as full confidence",
    )
    min_questions: Annotated[int, Field(ge=1)] = 12
    max_questions: Annotated[int, Field(ge=1)] = 20

    @model_validator(mode="after")
    def validate_config(self) -> ScoringConfig:
        """Check the weights sum to 100 and the limits are ordered."""
        weight_sum = sum(self.bucket_weights.values())
        if weight_sum != 100:
            raise ValueError(
                f"Bucket weights must sum to 100. Got {weight_sum} "
                f"({', '.join(f'{b.value}={w}' for b, w in self.bucket_weights.items())})."
            )
        if self.min_questions > self.max_questions:
            raise ValueError(
                f"min_questions ({self.min_questions}) must not exceed "
                f"max_questions ({self.max_questions})"
            )
        if self.amber_threshold > self.green_threshold:
            raise ValueError(
                f"amber_threshold ({self.amber_threshold}) must not exceed "
                f"green_threshold ({self.green_threshold})"
            )
        return self

    @property
    def bucket_weights(self) -> dict[Bucket, int]:
        return {
            bucket: getattr(self, f"weight_{bucket.value}") for bucket in SCORED_BUCKETS
        }

    @property
    def bucket_thresholds(self) -> dict[Bucket, int]:
        return {
            bucket: getattr(self, f"threshold_{bucket.value}")
            for bucket in SCORED_BUCKETS
        }


# Singleton instance for easy import
_scoring_config: ScoringConfig | None = None


def get_scoring_config() -> ScoringConfig:
    """Get the scoring configuration singleton."""
    global _scoring_config
    if _scoring_config is None:
        _scoring_config = ScoringConfig()
    return _scoring_config


def reset_scoring_config() -> None:
    """Reset the scoring configuration singleton (useful for testing)."""
    global _scoring_config
    _scoring_config = None
