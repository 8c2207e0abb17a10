"""Repository for player documents.

A player document is written in full only by the session that owns it. Other
sessions (marketplace trades) change it through resource deltas, and the owner's
next ``save`` folds those deltas in with a three-way merge on ``resources``.
"""
from __future__ import annotations

import sqlite3

from cultivation_rpg.errors import NotFoundError, ValidationError
from cultivation_rpg.models.character import Player
from cultivation_rpg.storage.database import Database
from cultivation_rpg.utils import safe_json


def read_player(conn: sqlite3.Connection, player_id: str) -> Player | None:
    row = conn.execute("SELECT document FROM players WHERE player_id = ?", (player_id,)).fetchone()
    return _deserialize(row)


def write_player(conn: sqlite3.Connection, player: Player) -> bool:
    cursor = conn.execute(
        """UPDATE players SET name = ?, document = ?,
               updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
           WHERE player_id = ?""",
        (player.name, player.model_dump_json(), player.player_id),
    )
    return cursor.rowcount > 0


def apply_resource_delta(conn: sqlite3.Connection, player_id: str, delta: dict[str, int]) -> Player:
    """Add ``delta`` to a stored player's resources inside an open transaction."""
    player = read_player(conn, player_id)
    if player is None:
        raise NotFoundError("Player not found.")
    for key, change in delta.items():
        new_count = player.resources.get(key, 0) + change
        if new_count < 0:
            raise ValidationError(f"Not enough {key} held.")
        player.resources[key] = new_count
    write_player(conn, player)
    return player


def _deserialize(row) -> Player | None:
    if not row:
        return None
    return Player.model_validate(safe_json(row["document"]))


class PlayerRepo:
    def __init__(self, db: Database) -> None:
        self.db = db

    def create(self, player: Player) -> Player:
        try:
            with self.db.get_connection() as conn:
                conn.execute(
                    "INSERT INTO players (player_id, username, name, document) VALUES (?, ?, ?, ?)",
                    (player.player_id, player.username, player.name, player.model_dump_json()),
                )
        except sqlite3.IntegrityError as e:
            raise ValidationError("This username is already taken. Please choose another.") from e
        return player

    def get(self, player_id: str) -> Player | None:
        with self.db.get_connection() as conn:
            return read_player(conn, player_id)

    def get_by_username(self, username: str) -> Player | None:
        with self.db.get_connection() as conn:
            row = conn.execute("SELECT document FROM players WHERE username = ?", (username,)).fetchone()
        return _deserialize(row)

    def username_taken(self, username: str) -> bool:
        with self.db.get_connection() as conn:
            row = conn.execute("SELECT 1 FROM players WHERE username = ?", (username,)).fetchone()
        return row is not None

    def save(self, player: Player, base_resources: dict[str, int] | None = None) -> dict[str, int]:
        """Persist the full player document.

        ``base_resources`` is the resource map as of the session's last sync.
        Changes other sessions made to the stored copy since then are merged
        into ``player.resources`` before writing. Returns that foreign delta.
        """
        with self.db.transaction() as conn:
            stored = read_player(conn, player.player_id)
            if stored is None:
                raise NotFoundError("Player not found.")
            foreign: dict[str, int] = {}
            if base_resources is not None:
                for key in set(stored.resources) | set(base_resources):
                    change = stored.resources.get(key, 0) - base_resources.get(key, 0)
                    if change:
                        foreign[key] = change
                for key, change in foreign.items():
                    player.resources[key] = max(0, player.resources.get(key, 0) + change)
            write_player(conn, player)
        return foreign

