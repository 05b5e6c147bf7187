"""Tests for scoring data models."""

import pytest

from reality_coach.scoring.models import (
    Bucket,
    BucketScores,
    Color,
    ScoredAnswer,
    ScoringResult,
)


class TestScoredAnswer:
    def test_weight_must_be_between_1_and_10(self):
        with pytest.raises(ValueError):
            ScoredAnswer(bucket=Bucket.DAILY, weight=0, value=True)
        with pytest.raises(ValueError):
            ScoredAnswer(bucket=Bucket.DAILY, weight=11, value=True)

    def test_note_is_optional(self):
        answer = ScoredAnswer(bucket=Bucket.DAILY, weight=1, value=False)

        assert answer.note is None


class TestBucketScores:
    """Test BucketScores."""

    def test_rejects_out_of_range_scores(self):
        with pytest.raises(ValueError, match="lifestyle"):
            BucketScores(personality=50, daily=50, commitment=50, lifestyle=101)

    def test_get_returns_scored_bucket(self):
        scores = BucketScores(personality=10, daily=20, commitment=30, lifestyle=40)

        assert scores.get(Bucket.COMMITMENT) == 30

    def test_get_rejects_unscored_bucket(self):
        scores = BucketScores(personality=10, daily=20, commitment=30, lifestyle=40)

        with pytest.raises(KeyError):
            scores.get(Bucket.ENTRY)

    def test_items_follow_bucket_order(self):
        scores = BucketScores(personality=10, daily=20, commitment=30, lifestyle=40)

        assert [bucket for bucket, _ in scores.items()] == [
            Bucket.PERSONALITY,
            Bucket.DAILY,
            Bucket.COMMITMENT,
            Bucket.LIFESTYLE,
        ]

    def test_from_dict_reads_to_dict_output(self):
        scores = BucketScores(personality=10, daily=20, commitment=30, lifestyle=40)

        assert BucketScores.from_dict(scores.to_dict()) == scores


class TestScoringResult:
    """Test ScoringResult validation and serialization."""

    def _scores(self) -> BucketScores:
        return BucketScores(personality=50, daily=50, commitment=50, lifestyle=50)

    def test_rejects_fit_score_out_of_range(self):
        with pytest.raises(ValueError, match="fit_score"):
            ScoringResult(fit_score=-1, color=Color.RED, bucket_scores=self._scores())

    def test_rejects_confidence_out_of_range(self):
        with pytest.raises(ValueError, match="confidence"):
            ScoringResult(
                fit_score=50,
                color=Color.AMBER,
                bucket_scores=self._scores(),
                confidence=1.5,
            )

    def test_to_dict_uses_plain_values(self):
        result = ScoringResult(
            fit_score=50,
            color=Color.AMBER,
            bucket_scores=self._scores(),
            mismatches=["Personality fit is low (50%)"],
            confidence=1.0,
            should_stop=True,
            stop_reason="Maximum questions reached",
        )

        data = result.to_dict()

        assert data["color"] == "amber"
        assert data["bucket_scores"]["daily"] == 50
        assert data["mismatches"] == ["Personality fit is low (50%)"]
        assert data["should_stop"] is True
        assert data["stop_reason"] == "Maximum questions reached"
