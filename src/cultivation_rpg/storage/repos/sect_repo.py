"""Repository for sects and their memberships."""
from __future__ import annotations

import logging
import sqlite3

from cultivation_rpg.errors import NotFoundError, ValidationError
from cultivation_rpg.models.sect import Sect
from cultivation_rpg.storage.database import Database

logger = logging.getLogger(__name__)


class SectRepo:
    """CRUD for sects and sect_members. A player belongs to at most one sect."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def _deserialize(self, conn: sqlite3.Connection, row) -> Sect | None:
        if not row:
            return None
        members = conn.execute(
            "SELECT player_id FROM sect_members WHERE sect_id = ? ORDER BY joined_at, rowid",
            (row["sect_id"],),
        ).fetchall()
        sect = dict(row)
        sect["members"] = [m["player_id"] for m in members]
        sect.pop("created_at", None)
        return Sect.model_validate(sect)

    def create(self, name: str, founder_id: str, description: str = "A mysterious sect.") -> Sect:
        sect = Sect(name=name, founder_id=founder_id, description=description or "A mysterious sect.")
        try:
            with self.db.transaction() as conn:
                conn.execute(
                    "INSERT INTO sects (sect_id, name, founder_id, description) VALUES (?, ?, ?, ?)",
                    (sect.sect_id, sect.name, sect.founder_id, sect.description),
                )
                conn.execute(
                    "INSERT INTO sect_members (sect_id, player_id) VALUES (?, ?)",
                    (sect.sect_id, founder_id),
                )
        except sqlite3.IntegrityError as e:
            # The whole transaction rolled back; name which UNIQUE constraint tripped.
            if "sects.name" in str(e):
                raise ValidationError("A sect with this name already exists.") from e
            raise ValidationError("You are already in a sect.") from e
        sect.members = [founder_id]
        logger.info(f"Sect '{name}' founded by {founder_id}")
        return sect

    def get(self, sect_id: str) -> Sect | None:
        with self.db.get_connection() as conn:
            row = conn.execute("SELECT * FROM sects WHERE sect_id = ?", (sect_id,)).fetchone()
            return self._deserialize(conn, row)

    def list_all(self) -> list[Sect]:
        with self.db.get_connection() as conn:
            rows = conn.execute("SELECT * FROM sects ORDER BY name").fetchall()
            return [self._deserialize(conn, r) for r in rows]

    def member_names(self, sect_id: str) -> list[str]:
        """Display names of members; unknown player ids are shown as-is."""
        with self.db.get_connection() as conn:
            rows = conn.execute(
                """SELECT m.player_id, p.name FROM sect_members m
                   LEFT JOIN players p ON p.player_id = m.player_id
                   WHERE m.sect_id = ? ORDER BY m.joined_at, m.rowid""",
                (sect_id,),
            ).fetchall()
        return [r["name"] or r["player_id"] for r in rows]

    def add_member(self, sect_id: str, player_id: str) -> Sect:
        try:
            with self.db.transaction() as conn:
                row = conn.execute("SELECT * FROM sects WHERE sect_id = ?", (sect_id,)).fetchone()
                if row is None:
                    raise NotFoundError("Sect not found.")
                conn.execute(
                    "INSERT INTO sect_members (sect_id, player_id) VALUES (?, ?)",
                    (sect_id, player_id),
                )
                return self._deserialize(conn, row)
        except sqlite3.IntegrityError as e:
            raise ValidationError("You are already in a sect.") from e

    def remove_member(self, sect_id: str, player_id: str) -> bool:
        """Remove a member. Returns True if that emptied and disbanded the sect."""
        with self.db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM sect_members WHERE sect_id = ? AND player_id = ?",
                (sect_id, player_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("You are not a member of that sect.")
            remaining = conn.execute(
                "SELECT COUNT(*) FROM sect_members WHERE sect_id = ?", (sect_id,),
            ).fetchone()[0]
            if remaining == 0:
                conn.execute("DELETE FROM sects WHERE sect_id = ?", (sect_id,))
                logger.info(f"Sect {sect_id} disbanded")
                return True
        return False
