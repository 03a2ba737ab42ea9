"""
Pytest configuration for redzone-stats tests.
"""

import os

import pytest
from dotenv import load_dotenv


def pytest_configure(config):
    """Load DATABASE_URL and friends from .env if present (existing env wins)."""
    env_file = os.path.join(os.path.dirname(__file__), "..", ".env")
    if os.path.exists(env_file):
        load_dotenv(env_file, override=False)


@pytest.fixture(scope="session")
def database_url():
    """Get the PostgreSQL URL, skipping database tests when none is configured."""
    url = os.environ.get("DATABASE_URL") or os.environ.get("NEON_DATABASE_URL")
    if not url:
        pytest.skip("DATABASE_URL not set")
    return url


@pytest.fixture
def scenario_a_plays():
    """Team 1 drives into the red zone and scores, then team 2 takes over."""
    from fakes import make_play

    return [
        make_play("1", 35, "Rush", defense="2", index=0),
        make_play("1", 15, "Pass Reception", defense="2", index=1),
        make_play("1", 8, "Passing Touchdown", scoring=True, score=6, defense="2", index=2),
        make_play("2", 40, "Rush", defense="1", index=3),
    ]
