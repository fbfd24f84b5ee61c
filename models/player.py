"""CRUD for players table."""
from db.database import query_db

_UPSERT_SQL = """INSERT INTO players
   (adaptation_type, game_id, player_id, rating, play_count,
    uncertainty, k_factor, last_played)
   VALUES (?, ?, ?, ?, ?, ?, ?, ?)
   ON CONFLICT(adaptation_type, game_id, player_id) DO UPDATE SET
    rating=excluded.rating,
    play_count=excluded.play_count,
    uncertainty=excluded.uncertainty,
    k_factor=excluded.k_factor,
    last_played=excluded.last_played"""


def get(adaptation_type, game_id, player_id):
    return query_db(
        "SELECT * FROM players WHERE adaptation_type=? AND game_id=? AND player_id=?",
        (adaptation_type, game_id, player_id), one=True,
    )


def get_all():
    return query_db("SELECT * FROM players ORDER BY adaptation_type, game_id, player_id")


def upsert_statement(adaptation_type, game_id, player_id, rating, play_count,
                     uncertainty, k_factor, last_played):
    """(sql, params) for an upsert, for batching into one transaction."""
    return _UPSERT_SQL, (adaptation_type, game_id, player_id, rating, play_count,
                         uncertainty, k_factor, last_played)
