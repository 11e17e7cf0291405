"""
Transient user notifications (the toasts of the dashboard).
Every failure the actor should see is pushed here exactly once; the HTTP
layer drains them through GET /api/v1/notifications.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Deque, List

from fleet_ledger.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Notification:
    level: str          # success | error
    message: str
    created_at: datetime = field(default_factory=datetime.utcnow)


class Notifier:
    def __init__(self, max_items: int = 50):
        self._items: Deque[Notification] = deque(maxlen=max_items)

    def success(self, message: str):
        logger.info(f"[Notify] {message}")
        self._items.append(Notification("success", message))

    def error(self, message: str):
        logger.warning(f"[Notify] {message}")
        self._items.append(Notification("error", message))

    def peek(self) -> List[Notification]:
        return list(self._items)

    def drain(self) -> List[Notification]:
        items = list(self._items)
        self._items.clear()
        return items
