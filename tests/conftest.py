"""Shared fixtures: in-memory stores and a controllable clock."""

import os
import sys
from datetime import date

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.context import create_app_context
from services.repositories import InMemoryDatabase

USER_ID = "user-1"

# Wednesday; its business week starts Saturday 2025-11-08
TODAY = date(2025, 11, 12)
THIS_WEEK = date(2025, 11, 8)
LAST_WEEK = date(2025, 11, 1)
NEXT_WEEK = date(2025, 11, 15)


class Clock:
    """Callable returning a settable 'today'."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def clock():
    return Clock(TODAY)


@pytest.fixture
def database():
    return InMemoryDatabase()


@pytest.fixture
def app(clock, database):
    return create_app_context(USER_ID, backend="memory", today=clock, database=database)


@pytest.fixture
def configured_app(app):
    """App whose user finished first-time setup this week."""
    app.settings.first_time_setup(
        weekly_target=150000,
        base_commission_rate="0.40",
        current_shift="morning",
        streak_bonus_rate="0.05",
        streak_bonus_threshold=100000,
        fixed_bonus_tiers=[{"threshold": 100000, "bonus": 10000}],
    )
    return app
