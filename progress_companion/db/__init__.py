"""Database package: engine, session, base."""

from progress_companion.db.session import async_session_maker, get_db, session_scope

__all__ = ["async_session_maker", "get_db", "session_scope"]
