"""
Per-chat session storage for the Telegram bot.

Simple in-memory dict keyed by chat id, lost on restart. Handlers run on a
single event loop, so individual operations are atomic.
"""

from datetime import datetime, timezone
from typing import Optional

from cryptoverifier.agents.schemas import AnalysisRequest, HistoryEntry, UserSession

DEFAULT_HISTORY_LIMIT = 50


class SessionStore:
    """Chat id -> UserSession, with history bounded at write time."""

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.history_limit = history_limit
        self._sessions: dict[int, UserSession] = {}
        # Legacy "most recently active chat" pointer. Only used as a last
        # resort by delivery when a task carries no chat id.
        self._active_chat_id: Optional[int] = None

    def touch(self, chat_id: int) -> UserSession:
        """Get or create the session and update last_interaction."""
        session = self._sessions.get(chat_id)
        if session is None:
            session = UserSession(chat_id=chat_id)
            self._sessions[chat_id] = session
        else:
            session.last_interaction = datetime.now(timezone.utc)
        return session

    def record_analysis(self, chat_id: int, request: AnalysisRequest) -> UserSession:
        session = self.touch(chat_id)
        session.analyses.append(
            HistoryEntry(id=request.id, category=request.category, content=request.content)
        )
        if len(session.analyses) > self.history_limit:
            del session.analyses[:-self.history_limit]
        return session

    def get_session(self, chat_id: int) -> Optional[UserSession]:
        return self._sessions.get(chat_id)

    def get_history(self, chat_id: int) -> list[HistoryEntry]:
        """All retained entries, oldest first."""
        session = self._sessions.get(chat_id)
        return list(session.analyses) if session else []

    def get_recent(self, chat_id: int, limit: int = 5) -> list[HistoryEntry]:
        """Up to `limit` entries, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self.get_history(chat_id)[-limit:]))

    def set_active_chat(self, chat_id: int) -> None:
        self._active_chat_id = chat_id

    def get_active_chat(self) -> Optional[int]:
        return self._active_chat_id

    def clear(self) -> None:
        self._sessions.clear()
        self._active_chat_id = None


# Global instance
_session_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get or create the session store singleton."""
    global _session_store
    if _session_store is None:
        from cryptoverifier.config import get_settings
        _session_store = SessionStore(history_limit=get_settings().session_history_limit)
    return _session_store
