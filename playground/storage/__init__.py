"""Relational persistence for chat sessions."""

from playground.storage.session_repository import SessionRepository

__all__ = ["SessionRepository"]
