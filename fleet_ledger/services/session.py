"""
ActorSession — the explicit per-sign-in session handed to the audit logger.

Created by the data context at sign-in and cleared at sign-out. The audit
session id is generated lazily on first use and stays fixed until close().
"""

import uuid
from typing import Optional

from fleet_ledger.config import settings
from fleet_ledger.entities import Actor


class ActorSession:
    def __init__(self, actor: Actor, user_agent: Optional[str] = None):
        self.actor = actor
        self.user_agent = user_agent or settings.USER_AGENT
        self._session_id: Optional[str] = None
        self._closed = False

    @property
    def is_authenticated(self) -> bool:
        return not self._closed and self.actor is not None

    @property
    def session_id(self) -> str:
        if self._session_id is None:
            self._session_id = str(uuid.uuid4())
        return self._session_id

    def close(self):
        self._closed = True
        self._session_id = None

    def __repr__(self):
        return f"<ActorSession actor={self.actor.id if self.actor else None} closed={self._closed}>"
