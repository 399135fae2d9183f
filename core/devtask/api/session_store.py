"""Shared session store for API routes."""

import asyncio
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Optional

from devtask.config import MAX_SESSIONS
from devtask.engine.agent import DevTaskAgent
from devtask.utils.logging import logger


@dataclass
class SessionEntry:
    """An agent and the lock that serializes its turns."""

    agent: DevTaskAgent
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SessionStore:
    """
    One DevTaskAgent per session id.

    Turns of the same session run one at a time under the session lock;
    different sessions never share state. At most `max_sessions` are kept:
    opening one more closes the least recently used idle session.
    """

    def __init__(
        self,
        agent_factory: Optional[Callable[[], DevTaskAgent]] = None,
        max_sessions: int = MAX_SESSIONS,
    ):
        self.agent_factory = agent_factory or DevTaskAgent
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, SessionEntry] = OrderedDict()

    def get_or_create(self, session_id: Optional[str] = None) -> tuple[str, SessionEntry]:
        session_id = session_id or str(uuid.uuid4())
        entry = self.get(session_id)
        if entry is None:
            entry = SessionEntry(agent=self.agent_factory())
            self._sessions[session_id] = entry
            logger.info(f"Created session {session_id}")
            self._evict(keep=session_id)
        return session_id, entry

    def get(self, session_id: str) -> Optional[SessionEntry]:
        entry = self._sessions.get(session_id)
        if entry is not None:
            self._sessions.move_to_end(session_id)
        return entry

    def remove(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def _evict(self, keep: str) -> None:
        # Sessions mid-turn are never evicted
        while len(self._sessions) > self.max_sessions:
            idle = next(
                (sid for sid, entry in self._sessions.items() if sid != keep and not entry.lock.locked()),
                None,
            )
            if idle is None:
                return
            del self._sessions[idle]
            logger.info(f"Evicted idle session {idle}")

    def __len__(self) -> int:
        return len(self._sessions)


store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get or create the session store instance."""
    global store
    if store is None:
        store = SessionStore()
    return store
