import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional

from .config import settings
from .engine import StageEngine
from .exceptions import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class DrillSession:
    engine: StageEngine
    list_id: str
    user_id: str
    created_at: datetime = field(default_factory=datetime.now)


class SessionStore:
    """In-memory drilling sessions, keyed by a random id. Stale sessions expire."""

    def __init__(self, timeout_minutes: int = settings.SESSION_TIMEOUT_MINUTES):
        self.timeout = timedelta(minutes=timeout_minutes)
        self.sessions: Dict[str, DrillSession] = {}

    def add(self, session: DrillSession) -> str:
        session_id = str(uuid.uuid4())
        self.sessions[session_id] = session
        logger.info(
            f"New session: {session_id} [List: {session.list_id}, User: {session.user_id}]"
        )
        return session_id

    def get(self, session_id: Optional[str]) -> DrillSession:
        session = self.sessions.get(session_id) if session_id else None
        if session is None:
            raise NotFoundError(f"Session {session_id!r} not found.")
        if datetime.now() - session.created_at > self.timeout:
            self.discard(session_id)
            raise NotFoundError(f"Session {session_id!r} has expired.")
        return session

    def discard(self, session_id: str) -> None:
        session = self.sessions.pop(session_id, None)
        if session is not None:
            session.engine.close()
            logger.info(f"Session {session_id} discarded")
