"""Append-only gameplay history."""
import logging

from db.database import execute_db
from models import gameplay as gameplay_model
from services.ratings_store import format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)


class GameplayLog:
    """Sequentially numbered play records. Records are never changed or removed.

    Persisted records take ids after the highest id already in the DB, so
    several logs over one database never reuse an id.
    """

    def __init__(self):
        self._records = []
        self._next_id = 1

    def __len__(self):
        return len(self._records)

    def build_record(self, adaptation_type, game_id, player_id, scenario_id,
                     response_time, accuracy, player_rating, scenario_rating,
                     timestamp, persist=False):
        """New record with the next id. Not part of the log until commit_record()."""
        record_id = self._next_id
        if persist:
            record_id = max(record_id, gameplay_model.max_id() + 1)
        return {
            'id': record_id,
            'adaptation_type': adaptation_type,
            'game_id': game_id,
            'player_id': player_id,
            'scenario_id': scenario_id,
            'timestamp': timestamp,
            'response_time': response_time,
            'accuracy': accuracy,
            'player_rating': player_rating,
            'scenario_rating': scenario_rating,
        }

    @staticmethod
    def insert_statement(record):
        """(sql, params) writing a built record, for batching with rating upserts."""
        return gameplay_model.create_statement(
            record['id'], record['adaptation_type'], record['game_id'], record['player_id'],
            record['scenario_id'], format_timestamp(record['timestamp']),
            record['response_time'], record['accuracy'],
            record['player_rating'], record['scenario_rating'],
        )

    def commit_record(self, record):
        self._records.append(dict(record))
        self._next_id = record['id'] + 1
        return dict(record)

    def append_record(self, adaptation_type, game_id, player_id, scenario_id,
                      response_time, accuracy, player_rating, scenario_rating,
                      timestamp, persist=False):
        """Record one play. With persist=True the record is also written to the DB."""
        record = self.build_record(adaptation_type, game_id, player_id, scenario_id,
                                   response_time, accuracy, player_rating, scenario_rating,
                                   timestamp, persist)
        if persist:
            execute_db(*self.insert_statement(record))
        return self.commit_record(record)

    def records(self, game_id=None, player_id=None, scenario_id=None):
        """Copies of the records, oldest first, optionally filtered."""
        return [dict(r) for r in self._records
                if (game_id is None or r['game_id'] == game_id)
                and (player_id is None or r['player_id'] == player_id)
                and (scenario_id is None or r['scenario_id'] == scenario_id)]

    def load(self):
        """Replace in-memory records with the persisted history."""
        self._records = []
        for row in gameplay_model.get_all():
            row['timestamp'] = parse_timestamp(row['timestamp'])
            self._records.append(row)
        self._next_id = gameplay_model.max_id() + 1
        logger.info("Loaded %d gameplay records", len(self._records))
