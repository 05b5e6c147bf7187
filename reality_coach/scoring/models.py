"""Data models for the scoring engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Bucket(str, Enum):
    """Question category."""

    PERSONALITY = "personality"
    DAILY = "daily"
    COMMITMENT = "commitment"
    LIFESTYLE = "lifestyle"
    ENTRY = "entry"
    UNSEXY = "unsexy"


# Buckets that carry a score of their own; entry/unsexy answers only feed
# the deal-breaker counts.
SCORED_BUCKETS: tuple[Bucket, ...] = (
    Bucket.PERSONALITY,
    Bucket.DAILY,
    Bucket.COMMITMENT,
    Bucket.LIFESTYLE,
)


class Color(str, Enum):
    """Traffic-light verdict for a fit score."""

    GREEN = "green"
    AMBER = "amber"
    RED = "red"


@dataclass(frozen=True)
class ScoredAnswer:
    """An answer joined with the bucket and weight of its question."""

    bucket: Bucket
    weight: int
    value: bool
    note: str | None = None

    def __post_init__(self) -> None:
        if not (1 <= self.weight <= 10):
            raise ValueError(f"weight must be between 1 and 10 (got {self.weight})")


@dataclass(frozen=True)
class BucketScores:
    """Percentage score per scored bucket."""

    personality: int
    daily: int
    commitment: int
    lifestyle: int

    def __post_init__(self) -> None:
        for bucket in SCORED_BUCKETS:
            value = getattr(self, bucket.value)
            if not (0 <= value <= 100):
                raise ValueError(
                    f"{bucket.value} score must be between 0 and 100 (got {value})"
                )

    def get(self, bucket: Bucket) -> int:
        if bucket not in SCORED_BUCKETS:
            raise KeyError(f"{bucket.value} is not a scored bucket")
        return getattr(self, bucket.value)

    def items(self) -> list[tuple[Bucket, int]]:
        return [(bucket, self.get(bucket)) for bucket in SCORED_BUCKETS]

    def to_dict(self) -> dict[str, int]:
        return {bucket.value: score for bucket, score in self.items()}

    @classmethod
    def from_dict(cls, data: dict) -> BucketScores:
        return cls(**{bucket.value: int(data[bucket.value]) for bucket in SCORED_BUCKETS})


@dataclass(frozen=True)
class StopDecision:
    should_stop: bool
    reason: str | None = None


@dataclass(frozen=True)
class ScoringResult:
    """Snapshot of how a session scores after its latest answer."""

    fit_score: int
    color: Color
    bucket_scores: BucketScores
    mismatches: list[str] = field(default_factory=list)
    confidence: float = 0.0
    should_stop: bool = False
    stop_reason: str | None = None

    def __post_init__(self) -> None:
        if not (0 <= self.fit_score <= 100):
            raise ValueError(
                f"fit_score must be between 0 and 100 (got {self.fit_score})"
            )
        if not (0.0 <= self.confidence <= 1.0):
            raise ValueError(
                f"confidence must be between 0.0 and 1.0 (got {self.confidence})"
            )

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return {
            "fit_score": self.fit_score,
            "color": self.color.value,
            "bucket_scores": self.bucket_scores.to_dict(),
            "mismatches": list(self.mismatches),
            "confidence": self.confidence,
            "should_stop": self.should_stop,
            "stop_reason": self.stop_reason,
        }
