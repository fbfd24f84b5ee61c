"""CRUD for scenarios table."""
from db.database import query_db

_UPSERT_SQL = """INSERT INTO scenarios
   (adaptation_type, game_id, scenario_id, rating, play_count,
    uncertainty, k_factor, last_played, time_limit, position)
   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
   ON CONFLICT(adaptation_type, game_id, scenario_id) DO UPDATE SET
    rating=excluded.rating,
    play_count=excluded.play_count,
    uncertainty=excluded.uncertainty,
    k_factor=excluded.k_factor,
    last_played=excluded.last_played"""


def get(adaptation_type, game_id, scenario_id):
    return query_db(
        "SELECT * FROM scenarios WHERE adaptation_type=? AND game_id=? AND scenario_id=?",
        (adaptation_type, game_id, scenario_id), one=True,
    )


def get_all():
    """All scenarios, in registration order within each game."""
    return query_db(
        "SELECT * FROM scenarios ORDER BY adaptation_type, game_id, position, scenario_id")


def get_ids_for_game(adaptation_type, game_id):
    rows = query_db(
        """SELECT scenario_id FROM scenarios
           WHERE adaptation_type=? AND game_id=?
           ORDER BY position, scenario_id""",
        (adaptation_type, game_id),
    )
    return [r['scenario_id'] for r in rows]


def upsert_statement(adaptation_type, game_id, scenario_id, rating, play_count,
                     uncertainty, k_factor, last_played, time_limit, position=0):
    """(sql, params) for an upsert. time_limit and position are fixed after insert."""
    return _UPSERT_SQL, (adaptation_type, game_id, scenario_id, rating, play_count,
                         uncertainty, k_factor, last_played, time_limit, position)
