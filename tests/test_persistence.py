"""Tests for the ratings store, gameplay log and their SQLite persistence.

Test categories:
  1. Schema — tables exist after init_db()
  2. RatingsStore — creation, lookup, atomic commit
  3. Save/load — records survive a fresh store
  4. GameplayLog — sequential ids, persist flag, reload
"""
from datetime import datetime, timezone

import pytest

from config.settings import ADAPTER_TYPE
from db.database import execute_many_db, query_db
from models import gameplay as gameplay_model
from models import player as player_model
from models import scenario as scenario_model
from services.gameplay_log import GameplayLog
from services.ratings_store import (
    RatingsStore, UnknownEntityError, format_timestamp, parse_timestamp,
)

T = ADAPTER_TYPE
PLAYED = datetime(2024, 3, 5, 8, 30, 0, tzinfo=timezone.utc)


# ===========================================================================
# 1. Schema
# ===========================================================================

class TestSchema:

    @pytest.mark.parametrize('table', ['players', 'scenarios', 'gameplays'])
    def test_table_exists(self, table):
        rows = query_db("SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,))
        assert len(rows) == 1

    def test_scenarios_have_time_limit(self):
        cols = {r['name'] for r in query_db("PRAGMA table_info(scenarios)")}
        assert {'rating', 'play_count', 'uncertainty', 'k_factor', 'last_played',
                'time_limit'} <= cols


# ===========================================================================
# 2. RatingsStore
# ===========================================================================

class TestRatingsStore:

    def test_new_player_defaults(self):
        store = RatingsStore()
        rec = store.add_player(T, 'g', 'p')
        assert rec['rating'] == 0.01
        assert rec['play_count'] == 0
        assert rec['uncertainty'] == 1.0
        assert rec['last_played'] == datetime(2015, 1, 1, 1, 1, 1, tzinfo=timezone.utc)

    def test_add_existing_player_keeps_record(self):
        store = RatingsStore()
        store.add_player(T, 'g', 'p', rating=2.0)
        assert store.add_player(T, 'g', 'p', rating=5.0)['rating'] == 2.0

    def test_unknown_lookup_raises(self):
        store = RatingsStore()
        with pytest.raises(UnknownEntityError):
            store.get_player(T, 'g', 'missing')
        with pytest.raises(KeyError):
            store.get_scenario(T, 'g', 'missing')

    def test_scenario_requires_positive_time_limit(self):
        with pytest.raises(ValueError):
            RatingsStore().add_scenario(T, 'g', 's', 0)

    def test_scenario_requires_id(self):
        with pytest.raises(ValueError):
            RatingsStore().add_scenario(T, 'g', '', 1000)

    def test_time_limit_is_read_only(self):
        store = RatingsStore()
        store.add_scenario(T, 'g', 's', 1000)
        with pytest.raises(ValueError):
            store.set_scenario(T, 'g', 's', time_limit=5)

    def test_getters_return_copies(self):
        store = RatingsStore()
        store.add_player(T, 'g', 'p')
        store.get_player(T, 'g', 'p')['rating'] = 99
        assert store.get_player(T, 'g', 'p')['rating'] == 0.01

    def test_scenario_ids_in_registration_order_per_game(self):
        store = RatingsStore()
        for sid in ('z', 'a', 'm'):
            store.add_scenario(T, 'g1', sid, 1000)
        store.add_scenario(T, 'g2', 'other', 1000)
        assert store.all_scenario_ids(T, 'g1') == ['z', 'a', 'm']
        assert store.all_scenario_ids(T, 'g3') == []

    def test_commit_update_both_or_neither(self):
        store = RatingsStore()
        store.add_player(T, 'g', 'p')
        with pytest.raises(UnknownEntityError):
            store.commit_update(T, 'g', 'p', {'rating': 3.0}, 'missing', {'rating': 1.0})
        assert store.get_player(T, 'g', 'p')['rating'] == 0.01

    def test_commit_update_rejects_unknown_fields(self):
        store = RatingsStore()
        store.add_player(T, 'g', 'p')
        store.add_scenario(T, 'g', 's', 1000)
        with pytest.raises(ValueError):
            store.commit_update(T, 'g', 'p', {'colour': 'red'}, 's', {})

    def test_commit_update(self):
        store = RatingsStore()
        store.add_player(T, 'g', 'p')
        store.add_scenario(T, 'g', 's', 1000)
        store.commit_update(T, 'g', 'p', {'rating': 0.5, 'play_count': 1},
                            's', {'rating': -0.5, 'play_count': 1})
        assert store.get_player(T, 'g', 'p')['rating'] == 0.5
        assert store.get_scenario(T, 'g', 's')['rating'] == -0.5


# ===========================================================================
# 3. Save / load
# ===========================================================================

class TestSaveLoad:

    def test_timestamp_round_trip(self):
        assert format_timestamp(PLAYED) == '2024-03-05T08:30:00'
        assert parse_timestamp('2024-03-05T08:30:00') == PLAYED

    def test_round_trip(self):
        store = RatingsStore()
        store.add_player(T, 'g', 'p', rating=1.25, uncertainty=0.3, last_played=PLAYED,
                         play_count=7, k_factor=0.02)
        store.add_scenario(T, 'g', 'b', 90000, rating=-0.4)
        store.add_scenario(T, 'g', 'a', 60000, rating=0.7)
        store.save()

        fresh = RatingsStore()
        fresh.load()
        assert fresh.get_player(T, 'g', 'p') == store.get_player(T, 'g', 'p')
        assert fresh.get_scenario(T, 'g', 'a')['time_limit'] == 60000
        assert fresh.all_scenario_ids(T, 'g') == ['b', 'a']

    def test_save_overwrites(self):
        store = RatingsStore()
        store.add_scenario(T, 'g', 's', 1000)
        store.save()
        store.set_scenario(T, 'g', 's', rating=3.0, play_count=2)
        store.save()
        row = scenario_model.get(T, 'g', 's')
        assert row['rating'] == 3.0
        assert row['play_count'] == 2
        assert scenario_model.get_ids_for_game(T, 'g') == ['s']

    def test_pending_fields_saved_without_touching_store(self):
        store = RatingsStore()
        store.add_player(T, 'g', 'p')
        store.add_scenario(T, 'g', 's', 1000)
        statements = store.save_statements(
            pending_players={(T, 'g', 'p'): {'rating': 1.5, 'play_count': 1}},
            pending_scenarios={(T, 'g', 's'): {'rating': -1.5}},
        )
        execute_many_db(statements)

        assert store.get_player(T, 'g', 'p')['rating'] == 0.01
        assert player_model.get(T, 'g', 'p')['rating'] == 1.5
        assert player_model.get(T, 'g', 'p')['play_count'] == 1
        assert scenario_model.get(T, 'g', 's')['rating'] == -1.5


# ===========================================================================
# 4. GameplayLog
# ===========================================================================

class TestGameplayLog:

    def _append(self, log, player_id='p', persist=False):
        return log.append_record(T, 'g', player_id, 's', 4000, 1, 0.2, -0.1, PLAYED, persist)

    def test_sequential_ids(self):
        log = GameplayLog()
        assert [self._append(log)['id'] for _ in range(3)] == [1, 2, 3]
        assert len(log) == 3

    def test_persist_flag(self):
        log = GameplayLog()
        self._append(log)
        self._append(log, persist=True)
        rows = gameplay_model.get_all()
        assert [r['id'] for r in rows] == [2]
        assert rows[0]['timestamp'] == '2024-03-05T08:30:00'

    def test_filters(self):
        log = GameplayLog()
        self._append(log, 'p1')
        self._append(log, 'p2')
        self._append(log, 'p1')
        assert [r['id'] for r in log.records(player_id='p1')] == [1, 3]
        assert log.records(game_id='other') == []

    def test_returned_records_are_copies(self):
        log = GameplayLog()
        self._append(log)['accuracy'] = 0
        assert log.records()[0]['accuracy'] == 1

    def test_load_continues_numbering(self):
        log = GameplayLog()
        for _ in range(2):
            self._append(log, persist=True)

        reloaded = GameplayLog()
        reloaded.load()
        assert len(reloaded) == 2
        assert reloaded.records()[0]['timestamp'] == PLAYED
        assert self._append(reloaded)['id'] == 3

    def test_recent_for_player(self):
        log = GameplayLog()
        for _ in range(3):
            self._append(log, persist=True)
        rows = gameplay_model.get_for_player(T, 'g', 'p', limit=2)
        assert [r['id'] for r in rows] == [3, 2]

    def test_persisted_ids_follow_other_logs(self):
        first = GameplayLog()
        self._append(first, persist=True)
        self._append(first, persist=True)

        second = GameplayLog()
        assert self._append(second, persist=True)['id'] == 3
        assert self._append(second)['id'] == 4
        assert [r['id'] for r in gameplay_model.get_all()] == [1, 2, 3]

    def test_built_record_not_logged_until_committed(self):
        log = GameplayLog()
        record = log.build_record(T, 'g', 'p', 's', 4000, 1, 0.2, -0.1, PLAYED)
        assert len(log) == 0
        log.commit_record(record)
        assert log.records() == [record]
