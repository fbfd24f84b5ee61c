"""CRUD for gameplays table (append-only play history)."""
from db.database import query_db


_INSERT_SQL = """INSERT INTO gameplays
   (id, adaptation_type, game_id, player_id, scenario_id, timestamp,
    response_time, accuracy, player_rating, scenario_rating)
   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"""


def create_statement(record_id, adaptation_type, game_id, player_id, scenario_id, timestamp,
                     response_time, accuracy, player_rating, scenario_rating):
    """(sql, params) for an insert, for batching into one transaction."""
    return _INSERT_SQL, (record_id, adaptation_type, game_id, player_id, scenario_id,
                         timestamp, response_time, accuracy, player_rating, scenario_rating)


def get_all():
    return query_db("SELECT * FROM gameplays ORDER BY id")


def get_for_player(adaptation_type, game_id, player_id, limit=30):
    """Most recent plays of one player, newest first."""
    return query_db(
        """SELECT * FROM gameplays
           WHERE adaptation_type=? AND game_id=? AND player_id=?
           ORDER BY id DESC
           LIMIT ?""",
        (adaptation_type, game_id, player_id, limit),
    )


def max_id():
    row = query_db("SELECT MAX(id) as max_id FROM gameplays", one=True)
    return (row['max_id'] or 0) if row else 0


def count():
    row = query_db("SELECT COUNT(*) as cnt FROM gameplays", one=True)
    return row['cnt'] if row else 0
