"""Fit scoring and adaptive stopping.

The engine is a pure function of a session's answers: it keeps no state
between calls and never touches storage.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from reality_coach.scoring.config import ScoringConfig, get_scoring_config
from reality_coach.scoring.models import (
    SCORED_BUCKETS,
    Bucket,
    BucketScores,
    Color,
    ScoredAnswer,
    ScoringResult,
    StopDecision,
)

HARD_PASS_REASON = "Hard pass: all critical questions passed"
MAX_QUESTIONS_REASON = "Maximum questions reached"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values."""
    return math.floor(value + 0.5)


class ScoringEngine:
    """Turns answers into bucket scores, a verdict color and a stop decision."""

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or get_scoring_config()

    def is_deal_breaker(self, answer: ScoredAnswer) -> bool:
        return answer.weight >= self.config.critical_weight and not answer.value

    def score(self, answers: Sequence[ScoredAnswer]) -> ScoringResult:
        """Score the full ordered answer list of a session."""
        bucket_scores = self.bucket_scores(answers)
        fit_score = self.fit_score(bucket_scores)
        confidence = self.confidence(answers)
        decision = self.stop_decision(answers, confidence)

        return ScoringResult(
            fit_score=fit_score,
            color=self.color_for(fit_score),
            bucket_scores=bucket_scores,
            mismatches=self.mismatches(bucket_scores, answers),
            confidence=confidence,
            should_stop=decision.should_stop,
            stop_reason=decision.reason,
        )

    def bucket_scores(self, answers: Sequence[ScoredAnswer]) -> BucketScores:
        totals = {bucket: 0 for bucket in SCORED_BUCKETS}
        scores = {bucket: 0 for bucket in SCORED_BUCKETS}

        for answer in answers:
            if answer.bucket not in totals:
                continue
            totals[answer.bucket] += answer.weight
            if answer.value:
                scores[answer.bucket] += answer.weight
            else:
                penalty = (
                    self.config.critical_no_penalty
                    if answer.weight >= self.config.critical_weight
                    else 1
                )
                scores[answer.bucket] -= answer.weight * penalty

        return BucketScores(
            **{
                bucket.value: self._normalize(scores[bucket], totals[bucket])
                for bucket in SCORED_BUCKETS
            }
        )

    def _normalize(self, score: int, total: int) -> int:
        if total == 0:
            return self.config.neutral_score
        normalized = ((score / total) + 1) * 50
        return max(0, min(100, round_half_up(normalized)))

    def fit_score(self, bucket_scores: BucketScores) -> int:
        weights = self.config.bucket_weights
        weighted = sum(score * weights[bucket] for bucket, score in bucket_scores.items())
        return round_half_up(weighted / sum(weights.values()))

    def color_for(self, fit_score: int) -> Color:
        if fit_score >= self.config.green_threshold:
            return Color.GREEN
        if fit_score >= self.config.amber_threshold:
            return Color.AMBER
        return Color.RED

    def mismatches(
        self, bucket_scores: BucketScores, answers: Sequence[ScoredAnswer]
    ) -> list[str]:
        found: list[str] = []
        thresholds = self.config.bucket_thresholds

        for bucket, score in bucket_scores.items():
            if score < thresholds[bucket]:
                found.append(f"{bucket.value.capitalize()} fit is low ({score}%)")

        deal_breakers = sum(1 for answer in answers if self.is_deal_breaker(answer))
        if deal_breakers >= self.config.deal_breaker_threshold:
            found.append(
                f'Multiple deal-breaker questions answered "no" ({deal_breakers})'
            )

        return found

    def confidence(self, answers: Sequence[ScoredAnswer]) -> float:
        # Both pools are the weight of the answers received so far, so any
        # non-empty session saturates at 1.0. Kept as-is; see DESIGN.md.
        if not answers:
            return 0.0
        total_possible_weight = sum(answer.weight for answer in answers)
        answered_weight = sum(answer.weight for answer in answers)
        return min(
            1.0,
            answered_weight
            / (total_possible_weight * self.config.confidence_saturation),
        )

    def stop_decision(
        self, answers: Sequence[ScoredAnswer], confidence: float
    ) -> StopDecision:
        """Apply the stop rules in order; the first match wins."""
        count = len(answers)

        # dict preserves the order in which buckets first hit a deal-breaker
        deal_breakers: dict[Bucket, int] = {}
        for answer in answers:
            if self.is_deal_breaker(answer):
                deal_breakers[answer.bucket] = deal_breakers.get(answer.bucket, 0) + 1
        for bucket, bucket_count in deal_breakers.items():
            if bucket_count >= self.config.deal_breaker_threshold:
                return StopDecision(
                    True, f"Hard fail: {bucket_count} deal-breakers in {bucket.value}"
                )

        critical = [a for a in answers if a.weight >= self.config.critical_weight]
        if all(a.value for a in critical) and count >= self.config.min_questions:
            return StopDecision(True, HARD_PASS_REASON)

        if (
            confidence >= self.config.confidence_threshold
            and count >= self.config.min_questions
        ):
            return StopDecision(
                True, f"High confidence: {round_half_up(confidence * 100)}%"
            )

        if count >= self.config.max_questions:
            return StopDecision(True, MAX_QUESTIONS_REASON)

        return StopDecision(False)
