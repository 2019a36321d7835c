"""SQLite chat-session store.

Provides persistent storage for chat sessions and their messages.
Uses aiosqlite for async access.
"""

import logging
from pathlib import Path
from uuid import uuid4

import aiosqlite

from playground.errors import SessionNotFoundError
from playground.models.chat import ChatMessage, ChatSession, Role, utc_now_iso
from playground.models.schemas import SessionSummary

logger = logging.getLogger(__name__)


class SessionRepository:
    """SQLite-backed store for chat sessions.

    Connects lazily on first use so it works both under the application
    lifespan and under test transports that skip lifespan events.
    """

    def __init__(self, path: str | Path = "data/playground.db") -> None:
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        if self._connection is not None:
            return
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()
        logger.info(f"Session store ready at {self._db_path}")

    async def _create_schema(self) -> None:
        """Create database tables."""
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS chat_sessions (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS chat_messages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                audio_url TEXT,
                timestamp TEXT NOT NULL,
                FOREIGN KEY (session_id) REFERENCES chat_sessions(id) ON DELETE CASCADE
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_chat_messages_session
            ON chat_messages(session_id, id)
        """)

        await self._connection.commit()

    async def _conn(self) -> aiosqlite.Connection:
        if self._connection is None:
            await self.connect()
        return self._connection

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def create_session(self, title: str) -> ChatSession:
        """Create an empty session with a fresh id."""
        conn = await self._conn()
        now = utc_now_iso()
        session = ChatSession(id=str(uuid4()), title=title, created_at=now, updated_at=now)

        await conn.execute(
            "INSERT INTO chat_sessions (id, title, created_at, updated_at) VALUES (?, ?, ?, ?)",
            (session.id, session.title, now, now),
        )
        await conn.commit()
        return session

    async def list_sessions(self) -> list[SessionSummary]:
        """List sessions, most recently updated first."""
        conn = await self._conn()
        async with conn.execute("""
            SELECT s.id, s.title, s.created_at, s.updated_at, COUNT(m.id)
            FROM chat_sessions s
            LEFT JOIN chat_messages m ON m.session_id = s.id
            GROUP BY s.id
            ORDER BY s.updated_at DESC, s.created_at DESC
        """) as cursor:
            rows = await cursor.fetchall()

        return [
            SessionSummary(
                id=sid,
                title=title,
                created_at=created_at,
                updated_at=updated_at,
                message_count=count,
            )
            for sid, title, created_at, updated_at, count in rows
        ]

    async def get_session(self, session_id: str) -> ChatSession:
        """Load a session with its messages in append order.

        Raises:
            SessionNotFoundError: If the id is unknown.
        """
        conn = await self._conn()
        async with conn.execute(
            "SELECT id, title, created_at, updated_at FROM chat_sessions WHERE id = ?",
            (session_id,),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            raise SessionNotFoundError(session_id)

        async with conn.execute(
            """
            SELECT role, content, audio_url, timestamp
            FROM chat_messages
            WHERE session_id = ?
            ORDER BY id ASC
            """,
            (session_id,),
        ) as cursor:
            message_rows = await cursor.fetchall()

        messages = [
            ChatMessage(role=role, content=content, audio_url=audio_url, timestamp=ts)
            for role, content, audio_url, ts in message_rows
        ]
        sid, title, created_at, updated_at = row
        return ChatSession(
            id=sid,
            title=title,
            created_at=created_at,
            updated_at=updated_at,
            messages=messages,
        )

    async def append_message(
        self,
        session_id: str,
        role: Role,
        content: str,
        audio_url: str | None = None,
    ) -> ChatMessage:
        """Append a message to a session.

        Raises:
            SessionNotFoundError: If the id is unknown.
        """
        conn = await self._conn()
        message = ChatMessage(role=role, content=content, audio_url=audio_url)

        cursor = await conn.execute(
            "UPDATE chat_sessions SET updated_at = ? WHERE id = ?",
            (message.timestamp, session_id),
        )
        if cursor.rowcount == 0:
            await conn.rollback()
            raise SessionNotFoundError(session_id)

        await conn.execute(
            """
            INSERT INTO chat_messages (session_id, role, content, audio_url, timestamp)
            VALUES (?, ?, ?, ?, ?)
            """,
            (session_id, role, content, audio_url, message.timestamp),
        )
        await conn.commit()
        return message
