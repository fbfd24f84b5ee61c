"""Shared test fixtures — isolated temp DB for every test."""
import os
import sys
from collections import deque
from datetime import datetime, timezone

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from engine.rng import RandomSource  # noqa: E402

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def temp_db(monkeypatch, tmp_path):
    """Redirect DB_PATH to a temp file for every test."""
    db_path = str(tmp_path / 'test_skillmatch.db')
    monkeypatch.setattr('config.settings.DB_PATH', db_path)

    # Also patch the already-imported database module
    import db.database as db_mod
    monkeypatch.setattr(db_mod, 'DB_PATH', db_path)

    from db.database import init_db
    init_db()

    return db_path


class ScriptedRandom(RandomSource):
    """RandomSource whose normal draws and picks come from queues.

    normals: values returned verbatim by normal(), in order.
    picks: indexes returned by pick(); defaults to 0 when the queue is empty.
    """

    def __init__(self, normals=(), picks=()):
        super().__init__(0)
        self.normals = deque(normals)
        self.picks = deque(picks)
        self.normal_calls = []

    def normal(self, mean, sd, tail=None):
        self.normal_calls.append((mean, sd, tail))
        return self.normals.popleft()

    def pick(self, candidates):
        index = self.picks.popleft() if self.picks else 0
        return candidates[index]


@pytest.fixture
def scripted_rng():
    """Factory: scripted_rng(normals=[...], picks=[...])."""
    return ScriptedRandom


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def adapter(clock):
    from services.adapter import DifficultyAdapter
    return DifficultyAdapter(seed=1234, clock=clock)


@pytest.fixture
def game(adapter):
    """Adapter with one player and five scenarios of spread-out difficulty."""
    adapter.add_player('g1', 'p1')
    for i, rating in enumerate([-3.0, -1.5, -1.0, 0.5, 2.0]):
        adapter.add_scenario('g1', f's{i + 1}', 120000, rating=rating)
    return adapter
