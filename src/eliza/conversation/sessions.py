"""
Per-conversation engine registry.

Each open conversation gets its own ResponderEngine over the container's
shared RuleSet. Idle conversations expire after a TTL.
"""

import logging
import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from eliza.config.constants import DEFAULT_SESSION_TTL
from eliza.conversation.engine import ResponderEngine

logger = logging.getLogger(__name__)


class SessionNotFound(KeyError):
    """No open conversation with the given id."""


@dataclass
class Session:
    """An open conversation."""

    session_id: str
    engine: ResponderEngine
    created: float
    last_active: float = field(default=0.0)

    def __repr__(self) -> str:
        return f"Session({self.session_id[:8]}..., turns={self.engine.stats()['turns']})"


class SessionRegistry:
    """
    Open, look up and expire conversations.

    Attributes:
        _container: Factory for engines (ElizaContainer)
        _ttl: Idle seconds before a session expires
        _sessions: Open sessions by id

    Example:
        >>> registry = SessionRegistry(ElizaContainer())
        >>> session = registry.open()
        >>> registry.respond(session.session_id, "Hello")
        'How do you do. Please state your problem.'
    """

    def __init__(
        self,
        container,
        ttl: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._container = container
        self._ttl = ttl or DEFAULT_SESSION_TTL
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def open(self) -> Session:
        """Start a new conversation with a fresh engine."""
        now = self._clock()
        session = Session(
            session_id=secrets.token_urlsafe(16),
            engine=self._container.create_engine(),
            created=now,
            last_active=now,
        )
        with self._lock:
            self._purge_locked(now)
            self._sessions[session.session_id] = session
        logger.info(f"Opened session {session.session_id[:8]} ({len(self)} open)")
        return session

    def get(self, session_id: str) -> Session:
        """
        Look up an open session.

        Raises:
            SessionNotFound: If the id is unknown or has expired
        """
        now = self._clock()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFound(session_id)
            if now - session.last_active > self._ttl:
                del self._sessions[session_id]
                logger.info(f"Session {session_id[:8]} expired")
                raise SessionNotFound(session_id)
            return session

    def respond(self, session_id: str, text: str) -> str:
        """Reply to a message within one conversation."""
        session = self.get(session_id)
        session.last_active = self._clock()
        return session.engine.respond(text)

    def close(self, session_id: str) -> None:
        """
        End a conversation.

        Raises:
            SessionNotFound: If the id is unknown
        """
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFound(session_id)
        logger.info(f"Closed session {session_id[:8]}")

    def purge_expired(self) -> int:
        """Drop idle sessions. Returns how many were removed."""
        with self._lock:
            return self._purge_locked(self._clock())

    def _purge_locked(self, now: float) -> int:
        expired = [k for k, s in self._sessions.items() if now - s.last_active > self._ttl]
        for k in expired:
            del self._sessions[k]
        if expired:
            logger.debug(f"Purged {len(expired)} expired session(s)")
        return len(expired)

    @property
    def ttl(self) -> int:
        return self._ttl

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __repr__(self) -> str:
        return f"SessionRegistry(open={len(self)}, ttl={self._ttl})"
