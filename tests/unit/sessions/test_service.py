"""Tests for the SessionService."""

import asyncio

import pytest

from reality_coach.scoring.models import Bucket, Color
from reality_coach.sessions.models import QuestionSource, SessionStatus


async def answer_next(service, session_id, value, note=None):
    next_question = await service.get_next_question(session_id)
    return await service.submit_answer(session_id, next_question.question.id, value, note)


class TestStartSession:
    """Test intake validation."""

    @pytest.mark.asyncio
    async def test_returns_id_of_active_session(self, service, intake):
        session_id = await service.start_session(**intake)

        snapshot = await service.get_session(session_id)
        assert snapshot.session.status == SessionStatus.ACTIVE
        assert snapshot.session.target_role == "Registered Nurse"
        assert snapshot.questions == ()

    @pytest.mark.asyncio
    async def test_normalizes_intake(self, service, intake):
        intake.update(target_role="  Teacher ", state="tx", constraints=None)

        session_id = await service.start_session(**intake)

        session = (await service.get_session(session_id)).session
        assert session.target_role == "Teacher"
        assert session.state == "TX"
        assert session.constraints == ""

    @pytest.mark.parametrize("field", ["target_role", "state", "age_range"])
    @pytest.mark.asyncio
    async def test_blank_fields_are_rejected(self, service, intake, field):
        from reality_coach.sessions.errors import ValidationError

        intake[field] = "   "

        with pytest.raises(ValidationError, match=field):
            await service.start_session(**intake)

    @pytest.mark.asyncio
    async def test_missing_field_is_rejected(self, service, intake):
        from reality_coach.sessions.errors import ValidationError

        intake["target_role"] = None

        with pytest.raises(ValidationError):
            await service.start_session(**intake)

    @pytest.mark.parametrize("has_quals", ["yes", 1, None])
    @pytest.mark.asyncio
    async def test_has_quals_must_be_bool(self, service, intake, has_quals):
        from reality_coach.sessions.errors import ValidationError

        intake["has_quals"] = has_quals

        with pytest.raises(ValidationError, match="has_quals"):
            await service.start_session(**intake)


class TestGetNextQuestion:
    """Test question issuing."""

    @pytest.mark.asyncio
    async def test_first_question(self, service, intake):
        session_id = await service.start_session(**intake)

        next_question = await service.get_next_question(session_id)

        question = next_question.question
        assert question.order == 1
        assert question.bucket == Bucket.PERSONALITY
        assert question.weight == 8
        assert question.source == QuestionSource.GENERATED
        assert next_question.progress.current == 1
        assert next_question.progress.total == 1
        assert next_question.progress.answered == 0

    @pytest.mark.asyncio
    async def test_repeated_requests_return_same_question(self, service, intake):
        session_id = await service.start_session(**intake)

        first = await service.get_next_question(session_id)
        second = await service.get_next_question(session_id)

        assert second.question.id == first.question.id
        snapshot = await service.get_session(session_id)
        assert len(snapshot.questions) == 1

    @pytest.mark.asyncio
    async def test_concurrent_requests_issue_one_question(self, service, intake):
        session_id = await service.start_session(**intake)

        results = await asyncio.gather(
            *(service.get_next_question(session_id) for _ in range(4))
        )

        assert len({r.question.id for r in results}) == 1

    @pytest.mark.asyncio
    async def test_follows_bucket_priority(self, service, intake):
        session_id = await service.start_session(**intake)

        buckets = []
        for _ in range(6):
            next_question = await service.get_next_question(session_id)
            buckets.append(next_question.question.bucket)
            await service.submit_answer(session_id, next_question.question.id, True)

        assert buckets == [
            Bucket.PERSONALITY,
            Bucket.DAILY,
            Bucket.COMMITMENT,
            Bucket.LIFESTYLE,
            Bucket.ENTRY,
            Bucket.UNSEXY,
        ]

    @pytest.mark.asyncio
    async def test_unknown_session(self, service):
        from reality_coach.sessions.errors import NotFoundError

        with pytest.raises(NotFoundError):
            await service.get_next_question("missing")

    @pytest.mark.asyncio
    async def test_completed_session_is_rejected(self, service, intake):
        from reality_coach.sessions.errors import ConflictError

        session_id = await service.start_session(**intake)
        await service.get_verdict(session_id)

        with pytest.raises(ConflictError):
            await service.get_next_question(session_id)

    @pytest.mark.asyncio
    async def test_verdict_racing_next_question_leaves_no_extra_question(
        self, service, intake, monkeypatch
    ):
        from reality_coach.sessions.errors import ConflictError

        session_id = await service.start_session(**intake)
        await answer_next(service, session_id, True)

        # Hold the insert until the verdict has completed the session
        verdict_done = asyncio.Event()
        create_question = service.repository.create_question

        async def create_after_verdict(question):
            await verdict_done.wait()
            return await create_question(question)

        monkeypatch.setattr(service.repository, "create_question", create_after_verdict)

        async def verdict():
            try:
                return await service.get_verdict(session_id)
            finally:
                verdict_done.set()

        next_result, verdict_result = await asyncio.gather(
            service.get_next_question(session_id), verdict(), return_exceptions=True
        )

        assert isinstance(next_result, ConflictError)
        assert verdict_result.session_id == session_id
        snapshot = await service.get_session(session_id)
        assert snapshot.session.status == SessionStatus.COMPLETED
        assert len(snapshot.questions) == 1


class TestSubmitAnswer:
    """Test answer submission."""

    @pytest.mark.asyncio
    async def test_returns_scoring_after_answer(self, service, intake):
        session_id = await service.start_session(**intake)

        outcome = await answer_next(service, session_id, True)

        assert outcome.answer.value is True
        assert outcome.done is False
        assert outcome.stop_reason is None
        assert outcome.scoring.bucket_scores.personality == 100
        assert outcome.scoring.fit_score == 68

    @pytest.mark.asyncio
    async def test_value_must_be_bool(self, service, intake):
        from reality_coach.sessions.errors import ValidationError

        session_id = await service.start_session(**intake)
        question = (await service.get_next_question(session_id)).question

        with pytest.raises(ValidationError):
            await service.submit_answer(session_id, question.id, "yes")
        with pytest.raises(ValidationError):
            await service.submit_answer(session_id, question.id, None)

    @pytest.mark.asyncio
    async def test_answering_twice_is_rejected(self, service, intake):
        from reality_coach.sessions.errors import ValidationError

        session_id = await service.start_session(**intake)
        question = (await service.get_next_question(session_id)).question
        await service.submit_answer(session_id, question.id, True)

        with pytest.raises(ValidationError, match="already answered"):
            await service.submit_answer(session_id, question.id, False)

    @pytest.mark.asyncio
    async def test_concurrent_answers_store_one(self, service, intake):
        from reality_coach.sessions.errors import ValidationError

        session_id = await service.start_session(**intake)
        question = (await service.get_next_question(session_id)).question

        results = await asyncio.gather(
            service.submit_answer(session_id, question.id, True),
            service.submit_answer(session_id, question.id, False),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], ValidationError)
        snapshot = await service.get_session(session_id)
        assert len(snapshot.answers) == 1

    @pytest.mark.asyncio
    async def test_cross_session_answer_is_rejected(self, service, intake):
        from reality_coach.sessions.errors import ValidationError

        first = await service.start_session(**intake)
        second = await service.start_session(**intake)
        question = (await service.get_next_question(first)).question

        with pytest.raises(ValidationError, match="does not belong"):
            await service.submit_answer(second, question.id, True)

        assert (await service.get_session(second)).answers == ()
        assert (await service.get_session(first)).answers == ()

    @pytest.mark.asyncio
    async def test_unknown_question(self, service, intake):
        from reality_coach.sessions.errors import NotFoundError

        session_id = await service.start_session(**intake)

        with pytest.raises(NotFoundError):
            await service.submit_answer(session_id, "missing", True)

    @pytest.mark.asyncio
    async def test_unknown_session(self, service):
        from reality_coach.sessions.errors import NotFoundError

        with pytest.raises(NotFoundError):
            await service.submit_answer("missing", "missing", True)

    @pytest.mark.asyncio
    async def test_completed_session_is_rejected(self, service, intake):
        from reality_coach.sessions.errors import ConflictError

        session_id = await service.start_session(**intake)
        question = (await service.get_next_question(session_id)).question
        await service.get_verdict(session_id)

        with pytest.raises(ConflictError):
            await service.submit_answer(session_id, question.id, True)

    @pytest.mark.asyncio
    async def test_hard_fail_completes_session(self, service, intake):
        # personality (8), daily, commitment (10), lifestyle, entry (9), unsexy,
        # then personality twice more for the third personality deal-breaker
        session_id = await service.start_session(**intake)

        outcomes = [await answer_next(service, session_id, False) for _ in range(8)]

        assert [o.done for o in outcomes] == [False] * 7 + [True]
        assert outcomes[-1].stop_reason == "Hard fail: 3 deal-breakers in personality"
        snapshot = await service.get_session(session_id)
        assert snapshot.session.status == SessionStatus.COMPLETED
        assert snapshot.verdict is None

    @pytest.mark.asyncio
    async def test_hard_pass_after_twelve_yes_answers(self, service, intake):
        session_id = await service.start_session(**intake)

        outcomes = [await answer_next(service, session_id, True) for _ in range(12)]

        assert not any(o.done for o in outcomes[:11])
        assert outcomes[-1].done is True
        assert outcomes[-1].stop_reason == "Hard pass: all critical questions passed"
        assert outcomes[-1].scoring.fit_score == 100


class TestGetVerdict:
    """Test verdict assembly and idempotence."""

    @pytest.mark.asyncio
    async def test_verdict_after_hard_fail(self, service, intake):
        session_id = await service.start_session(**intake)
        for _ in range(8):
            await answer_next(service, session_id, False)

        verdict = await service.get_verdict(session_id)

        assert verdict.fit_score == 0
        assert verdict.color == Color.RED
        assert verdict.stop_reason == "Hard fail: 3 deal-breakers in personality"
        assert verdict.summary.startswith("Your score of 0% suggests that Registered Nurse")
        assert verdict.mismatches[-1] == 'Multiple deal-breaker questions answered "no" (5)'
        assert verdict.next_steps[2] == "Research California-specific licensing requirements"
        assert verdict.next_steps[-1] == "Consider how this career will impact your personal life"
        assert len(verdict.next_steps) == 9
        assert [c.title for c in verdict.alt_careers] == ["Registered Nurse"]

    @pytest.mark.asyncio
    async def test_verdict_is_idempotent(self, service, intake):
        session_id = await service.start_session(**intake)
        await answer_next(service, session_id, True)

        first = await service.get_verdict(session_id)
        second = await service.get_verdict(session_id)

        assert second == first

    @pytest.mark.asyncio
    async def test_stored_verdict_skips_alternative_search(self, repository, intake):
        from reality_coach.careers.advisor import AltCareerAdvisor
        from reality_coach.careers.directory import CareerDirectory
        from reality_coach.scoring.config import ScoringConfig
        from reality_coach.sessions.service import SessionService

        class CountingAdvisor(AltCareerAdvisor):
            calls = 0

            def suggest(self, *args, **kwargs):
                CountingAdvisor.calls += 1
                return super().suggest(*args, **kwargs)

        service = SessionService(
            repository,
            scoring_config=ScoringConfig(_env_file=None),
            advisor=CountingAdvisor(CareerDirectory.default()),
        )
        session_id = await service.start_session(**intake)
        await answer_next(service, session_id, True)

        first = await service.get_verdict(session_id)
        second = await service.get_verdict(session_id)

        assert second == first
        assert CountingAdvisor.calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_verdict_requests_agree(self, service, intake):
        session_id = await service.start_session(**intake)
        await answer_next(service, session_id, True)

        verdicts = await asyncio.gather(*(service.get_verdict(session_id) for _ in range(3)))

        assert verdicts[0] == verdicts[1] == verdicts[2]

    @pytest.mark.asyncio
    async def test_verdict_completes_active_session(self, service, intake):
        session_id = await service.start_session(**intake)

        verdict = await service.get_verdict(session_id)

        assert verdict.fit_score == 50
        assert verdict.color == Color.AMBER
        assert verdict.stop_reason is None
        snapshot = await service.get_session(session_id)
        assert snapshot.session.status == SessionStatus.COMPLETED
        assert snapshot.verdict == verdict

    @pytest.mark.asyncio
    async def test_personality_notes_drive_alternatives(self, service, intake):
        session_id = await service.start_session(**intake)
        await answer_next(service, session_id, True, note="patient")

        verdict = await service.get_verdict(session_id)

        titles = [c.title for c in verdict.alt_careers]
        assert "Licensed Therapist" in titles
        assert "Teacher" in titles

    @pytest.mark.asyncio
    async def test_unknown_session(self, service):
        from reality_coach.sessions.errors import NotFoundError

        with pytest.raises(NotFoundError):
            await service.get_verdict("missing")


class TestListRecentSessions:
    @pytest.mark.asyncio
    async def test_lists_sessions(self, service, intake):
        first = await service.start_session(**intake)
        second = await service.start_session(**intake)

        summaries = await service.list_recent_sessions(limit=5)

        assert {s.session.id for s in summaries} == {first, second}

    @pytest.mark.asyncio
    async def test_limit_must_be_positive(self, service):
        from reality_coach.sessions.errors import ValidationError

        with pytest.raises(ValidationError):
            await service.list_recent_sessions(limit=0)


class TestComposeSummary:
    @pytest.mark.parametrize(
        "color,prefix",
        [
            (Color.GREEN, "Great news! Your score of 80%"),
            (Color.AMBER, "Your score of 80% indicates a mixed fit for Chef."),
            (Color.RED, "Your score of 80% suggests that Chef may not be the best fit"),
        ],
    )
    def test_summary_per_tier(self, color, prefix):
        from reality_coach.scoring.models import BucketScores, ScoringResult
        from reality_coach.sessions.service import compose_summary

        result = ScoringResult(
            fit_score=80,
            color=color,
            bucket_scores=BucketScores(personality=80, daily=80, commitment=80, lifestyle=80),
        )

        assert compose_summary(result, "Chef").startswith(prefix)
