"""Repository for the shared chat channel (append-only)."""
from __future__ import annotations

from typing import Callable

from cultivation_rpg.errors import ValidationError
from cultivation_rpg.models.chat import ChatMessage
from cultivation_rpg.storage.database import Database

MAX_MESSAGE_LENGTH = 200


class ChatRepo:
    def __init__(self, db: Database) -> None:
        self.db = db

    def send(self, sender_id: str, sender_name: str, text: str) -> ChatMessage:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Message cannot be empty.")
        if len(text) > MAX_MESSAGE_LENGTH:
            raise ValidationError(f"Message too long (max {MAX_MESSAGE_LENGTH} characters).")
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO chat_messages (sender_id, sender_name, text) VALUES (?, ?, ?)",
                (sender_id, sender_name, text),
            )
            row = conn.execute("SELECT * FROM chat_messages WHERE id = ?", (cursor.lastrowid,)).fetchone()
        return ChatMessage.model_validate(dict(row))

    def recent(self, limit: int = 50) -> list[ChatMessage]:
        """The last ``limit`` messages, oldest first."""
        with self.db.get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM chat_messages ORDER BY id DESC LIMIT ?", (limit,),
            ).fetchall()
        return [ChatMessage.model_validate(dict(r)) for r in reversed(rows)]

    def since(self, last_id: int) -> list[ChatMessage]:
        with self.db.get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM chat_messages WHERE id > ? ORDER BY id", (last_id,),
            ).fetchall()
        return [ChatMessage.model_validate(dict(r)) for r in rows]

    def subscribe(self, callback: Callable[[ChatMessage], None], history: int = 50) -> ChatSubscription:
        """Deliver the last ``history`` messages now, and newer ones on each ``poll``."""
        subscription = ChatSubscription(self, callback)
        for message in self.recent(history):
            subscription.deliver(message)
        return subscription


class ChatSubscription:
    """Snapshot listener over the chat table, driven by explicit polling."""

    def __init__(self, repo: ChatRepo, callback: Callable[[ChatMessage], None]) -> None:
        self.repo = repo
        self.callback = callback
        self.last_id = 0
        self.active = True

    def deliver(self, message: ChatMessage) -> None:
        self.last_id = max(self.last_id, message.id)
        self.callback(message)

    def poll(self) -> int:
        """Deliver messages newer than the last one seen. Returns how many."""
        if not self.active:
            return 0
        messages = self.repo.since(self.last_id)
        for message in messages:
            self.deliver(message)
        return len(messages)

    def unsubscribe(self) -> None:
        self.active = False
