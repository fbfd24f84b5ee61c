"""In-memory ratings store for players and scenarios, backed by SQLite on save."""
import logging
from datetime import datetime, timezone

from config.settings import ADAPTER_DEFAULTS
from db.database import execute_many_db
from models import player as player_model
from models import scenario as scenario_model

logger = logging.getLogger(__name__)

PLAYER_FIELDS = ('rating', 'play_count', 'uncertainty', 'k_factor', 'last_played')
SCENARIO_FIELDS = PLAYER_FIELDS + ('time_limit',)


class UnknownEntityError(KeyError):
    """Lookup of a player or scenario id the store has never seen."""


def parse_timestamp(text):
    """Parse a stored 'YYYY-MM-DDTHH:MM:SS' string as a UTC datetime."""
    return datetime.strptime(text, ADAPTER_DEFAULTS['timestamp_format']).replace(
        tzinfo=timezone.utc)


def format_timestamp(moment):
    return moment.astimezone(timezone.utc).strftime(ADAPTER_DEFAULTS['timestamp_format'])


class RatingsStore:
    """Player and scenario records keyed by (adaptation type, game, id).

    Getters return copies; records only change through set_* and
    commit_update. Scenario ids keep their registration order.
    """

    def __init__(self):
        self._players = {}
        self._scenarios = {}

    # --- creation ---

    def add_player(self, adaptation_type, game_id, player_id,
                   rating=ADAPTER_DEFAULTS['provisional_theta'],
                   uncertainty=ADAPTER_DEFAULTS['provisional_uncertainty'],
                   last_played=None, play_count=0, k_factor=0.0):
        """Create a player record if missing. Returns the (existing or new) record."""
        key = (adaptation_type, game_id, player_id)
        if key not in self._players:
            self._players[key] = {
                'rating': float(rating),
                'play_count': int(play_count),
                'uncertainty': float(uncertainty),
                'k_factor': float(k_factor),
                'last_played': last_played or parse_timestamp(ADAPTER_DEFAULTS['provisional_date']),
            }
            logger.info("Added player '%s' to game '%s'", player_id, game_id)
        return dict(self._players[key])

    def add_scenario(self, adaptation_type, game_id, scenario_id, time_limit,
                     rating=ADAPTER_DEFAULTS['provisional_theta'],
                     uncertainty=ADAPTER_DEFAULTS['provisional_uncertainty'],
                     last_played=None, play_count=0, k_factor=0.0):
        """Create a scenario record if missing. time_limit is in milliseconds."""
        if not scenario_id:
            raise ValueError("Scenario id must be a non-empty string")
        if time_limit <= 0:
            raise ValueError(f"Scenario time limit must be positive, got {time_limit}")
        key = (adaptation_type, game_id, scenario_id)
        if key not in self._scenarios:
            self._scenarios[key] = {
                'rating': float(rating),
                'play_count': int(play_count),
                'uncertainty': float(uncertainty),
                'k_factor': float(k_factor),
                'last_played': last_played or parse_timestamp(ADAPTER_DEFAULTS['provisional_date']),
                'time_limit': float(time_limit),
            }
            logger.info("Added scenario '%s' to game '%s'", scenario_id, game_id)
        return dict(self._scenarios[key])

    # --- lookup ---

    def get_player(self, adaptation_type, game_id, player_id):
        try:
            return dict(self._players[(adaptation_type, game_id, player_id)])
        except KeyError:
            raise UnknownEntityError(
                f"Player '{player_id}' not found for '{adaptation_type}' in game '{game_id}'"
            ) from None

    def get_scenario(self, adaptation_type, game_id, scenario_id):
        try:
            return dict(self._scenarios[(adaptation_type, game_id, scenario_id)])
        except KeyError:
            raise UnknownEntityError(
                f"Scenario '{scenario_id}' not found for '{adaptation_type}' in game '{game_id}'"
            ) from None

    def all_scenario_ids(self, adaptation_type, game_id):
        return [sid for (atype, gid, sid) in self._scenarios
                if atype == adaptation_type and gid == game_id]

    # --- mutation ---

    def set_scenario(self, adaptation_type, game_id, scenario_id, **fields):
        if 'time_limit' in fields:
            raise ValueError("Scenario time limit is fixed at creation")
        self._check_fields(fields, PLAYER_FIELDS)
        self.get_scenario(adaptation_type, game_id, scenario_id)
        self._scenarios[(adaptation_type, game_id, scenario_id)].update(fields)

    def commit_update(self, adaptation_type, game_id, player_id, player_fields,
                      scenario_id, scenario_fields):
        """Write new fields for one player and one scenario together.

        Both records are looked up before either is touched, so an unknown
        id leaves the store unchanged.
        """
        self._check_fields(player_fields, PLAYER_FIELDS)
        self._check_fields(scenario_fields, PLAYER_FIELDS)
        player_key = (adaptation_type, game_id, player_id)
        scenario_key = (adaptation_type, game_id, scenario_id)
        self.get_player(*player_key)
        self.get_scenario(*scenario_key)

        self._players[player_key].update(player_fields)
        self._scenarios[scenario_key].update(scenario_fields)

    @staticmethod
    def _check_fields(fields, allowed):
        unknown = set(fields) - set(allowed)
        if unknown:
            raise ValueError(f"Unknown record fields: {', '.join(sorted(unknown))}")

    # --- durable storage ---

    def save_statements(self, pending_players=None, pending_scenarios=None):
        """(sql, params) upserts for every record.

        pending_players and pending_scenarios map record keys to field updates
        that are written as if already committed; the store itself is not changed.
        """
        pending_players = pending_players or {}
        pending_scenarios = pending_scenarios or {}
        statements = []
        for key, rec in self._players.items():
            atype, gid, pid = key
            rec = {**rec, **pending_players.get(key, {})}
            statements.append(player_model.upsert_statement(
                atype, gid, pid, rec['rating'], rec['play_count'], rec['uncertainty'],
                rec['k_factor'], format_timestamp(rec['last_played']),
            ))
        for position, (key, rec) in enumerate(self._scenarios.items()):
            atype, gid, sid = key
            rec = {**rec, **pending_scenarios.get(key, {})}
            statements.append(scenario_model.upsert_statement(
                atype, gid, sid, rec['rating'], rec['play_count'], rec['uncertainty'],
                rec['k_factor'], format_timestamp(rec['last_played']), rec['time_limit'],
                position,
            ))
        return statements

    def save(self):
        """Write every record to the database in a single transaction."""
        execute_many_db(self.save_statements())
        logger.info("Saved %d players and %d scenarios", len(self._players), len(self._scenarios))

    def load(self):
        """Replace in-memory records with the database contents."""
        players = {}
        for row in player_model.get_all():
            players[(row['adaptation_type'], row['game_id'], row['player_id'])] = {
                'rating': row['rating'],
                'play_count': row['play_count'],
                'uncertainty': row['uncertainty'],
                'k_factor': row['k_factor'],
                'last_played': parse_timestamp(row['last_played']),
            }
        scenarios = {}
        for row in scenario_model.get_all():
            scenarios[(row['adaptation_type'], row['game_id'], row['scenario_id'])] = {
                'rating': row['rating'],
                'play_count': row['play_count'],
                'uncertainty': row['uncertainty'],
                'k_factor': row['k_factor'],
                'last_played': parse_timestamp(row['last_played']),
                'time_limit': row['time_limit'],
            }
        self._players = players
        self._scenarios = scenarios
        logger.info("Loaded %d players and %d scenarios", len(players), len(scenarios))
