"""Pytest configuration and shared fixtures."""

import pytest


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Drop cached settings and the log handler so each test starts clean."""
    from reality_coach.config.settings import reset_settings
    from reality_coach.scoring.config import reset_scoring_config
    from reality_coach.utils.logging import reset_logging

    reset_settings()
    reset_scoring_config()
    yield
    reset_settings()
    reset_scoring_config()
    reset_logging()


@pytest.fixture
async def repository(tmp_path):
    """An initialized repository on a temporary database."""
    from reality_coach.sessions.repository import SessionRepository

    repo = SessionRepository(tmp_path / "coach.db")
    await repo.initialize()
    yield repo
    await repo.close()


@pytest.fixture
async def service(repository):
    """A session service over the built-in catalog and career data."""
    from reality_coach.scoring.config import ScoringConfig
    from reality_coach.sessions.service import SessionService

    return SessionService(repository, scoring_config=ScoringConfig(_env_file=None))


@pytest.fixture
def intake() -> dict:
    """Valid intake for a Registered Nurse session in California."""
    return {
        "target_role": "Registered Nurse",
        "state": "CA",
        "age_range": "25-34",
        "has_quals": False,
        "constraints": "",
    }
