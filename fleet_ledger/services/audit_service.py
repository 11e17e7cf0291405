"""
Audit logger — durable, best-effort record of every mutation.

Each attempt walks a fixed path:

    ATTEMPT_PRIMARY  ── ok ──────────────────────────────▶ DONE
        │ error / timeout
        ▼
    ATTEMPT_FALLBACK ── ok ──────────────────────────────▶ DONE
        │ error
        ▼
    DONE_WITH_LOSS  (logged, never raised)

The primary path is the remote audit procedure (HTTP, time-bounded); the
fallback inserts the same entry into `audit_logs` through the ordinary store.
There are no retries and no queue. Repositories call submit(), which runs the
attempt as a detached task so the business result never waits on it.
"""

import asyncio
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Mapping, Optional, Set, Union

import httpx

from fleet_ledger.config import settings
from fleet_ledger.entities import AuditLogEntry, AuditOperation
from fleet_ledger.services.session import ActorSession
from fleet_ledger.services.store import RemoteStore
from fleet_ledger.utils.errors import AuditWriteFailure, StoreError
from fleet_ledger.utils.logger import get_logger
from fleet_ledger.utils.mappers import AUDIT_LOG_MAPPER, map_rows

logger = get_logger(__name__)

AUDIT_TABLE = "audit_logs"

AuditValue = Union[str, int, float, bool, None]


class AuditOutcome(str, Enum):
    DONE = "done"
    DONE_VIA_FALLBACK = "done_via_fallback"
    DONE_WITH_LOSS = "done_with_loss"
    SKIPPED = "skipped"


def audit_value(value: Any) -> AuditValue:
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Enum):
        return audit_value(value.value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def audit_values(values: Optional[Mapping[str, Any]]) -> Optional["OrderedDict[str, AuditValue]"]:
    """Flatten a snapshot into an ordered str → scalar mapping."""
    if values is None:
        return None
    return OrderedDict((str(key), audit_value(value)) for key, value in values.items())


@dataclass
class AuditParams:
    table_name: str
    operation: AuditOperation
    record_id: Optional[str] = None
    old_values: Optional[Mapping[str, Any]] = None
    new_values: Optional[Mapping[str, Any]] = None
    additional_info: Optional[Mapping[str, Any]] = field(default=None)

    @property
    def action(self) -> str:
        return str((self.additional_info or {}).get("action") or "")


class HttpAuditProcedure:
    """Primary path: POST {"audit_data": entry} to the create-audit-log procedure."""

    def __init__(self, url: Optional[str], api_key: Optional[str] = None):
        self.url = url
        self.api_key = api_key

    async def __call__(self, entry: Mapping[str, Any]) -> None:
        if not self.url:
            raise AuditWriteFailure("AUDIT_FUNCTION_URL is not configured")
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        async with httpx.AsyncClient() as client:
            response = await client.post(self.url, json={"audit_data": dict(entry)}, headers=headers)
            response.raise_for_status()


class AuditLogger:
    def __init__(self, store: RemoteStore, procedure=None, timeout: Optional[float] = None,
                 read_actions: Optional[List[str]] = None):
        self._store = store
        self._procedure = procedure or HttpAuditProcedure(settings.AUDIT_FUNCTION_URL, settings.AUDIT_FUNCTION_KEY)
        self._timeout = settings.AUDIT_PRIMARY_TIMEOUT_SECONDS if timeout is None else timeout
        self._read_actions = list(settings.AUDIT_READ_ACTIONS if read_actions is None else read_actions)
        self._pending: Set[asyncio.Task] = set()
        self.last_outcome: Optional[AuditOutcome] = None

    def should_audit_read(self, params: AuditParams) -> bool:
        """Only bulk reads whose action matches a configured marker are written."""
        action = params.action
        return any(marker in action for marker in self._read_actions)

    @staticmethod
    def build_entry(session: ActorSession, params: AuditParams) -> dict:
        return {
            "user_id": session.actor.id,
            "table_name": params.table_name,
            "operation": AuditOperation(params.operation).value,
            "record_id": params.record_id,
            "old_values": audit_values(params.old_values),
            "new_values": audit_values(params.new_values),
            "additional_info": audit_values(params.additional_info),
            "user_agent": session.user_agent,
            "session_id": session.session_id,
            "created_at": datetime.utcnow().isoformat(),
        }

    async def record(self, session: Optional[ActorSession], params: AuditParams) -> bool:
        """Write one audit entry. Never raises; returns whether it was stored."""
        if session is None or not session.is_authenticated:
            logger.warning(f"[Audit] No authenticated actor — skipped {params.operation} on {params.table_name}")
            self.last_outcome = AuditOutcome.SKIPPED
            return False

        entry = self.build_entry(session, params)
        tag = f"{entry['operation']} {entry['table_name']}:{entry['record_id']}"

        try:
            await asyncio.wait_for(self._procedure(entry), timeout=self._timeout)
            logger.info(f"[Audit] {tag} recorded via procedure")
            self.last_outcome = AuditOutcome.DONE
            return True
        except asyncio.TimeoutError:
            logger.warning(f"[Audit] {tag} procedure timed out after {self._timeout}s — trying direct insert")
        except Exception as exc:
            logger.warning(f"[Audit] {tag} procedure failed ({exc}) — trying direct insert")

        try:
            await self._store.insert(AUDIT_TABLE, entry)
            logger.info(f"[Audit] {tag} recorded via direct insert")
            self.last_outcome = AuditOutcome.DONE_VIA_FALLBACK
            return True
        except Exception as exc:
            failure = AuditWriteFailure(f"{tag} lost: {exc}")
            logger.error(f"[Audit] {failure}")
            self.last_outcome = AuditOutcome.DONE_WITH_LOSS
            return False

    def submit(self, session: Optional[ActorSession], params: AuditParams) -> Optional[asyncio.Task]:
        """Fire-and-forget: schedule record() on the running loop and return the task."""
        if params.operation == AuditOperation.READ and not self.should_audit_read(params):
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"[Audit] No running event loop — {params.operation} on {params.table_name} not recorded")
            return None
        task = loop.create_task(self.record(session, params))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self):
        """Wait for every in-flight audit task (sign-out, shutdown, tests)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def fetch_logs(self, session: Optional[ActorSession], limit: int = 50, offset: int = 0) -> List[AuditLogEntry]:
        """The actor's audit history, newest first. Empty on any failure."""
        if session is None or not session.is_authenticated:
            return []
        try:
            rows = await self._store.select(AUDIT_TABLE, {"user_id": session.actor.id},
                                            order_by="-created_at", limit=limit, offset=offset)
        except StoreError as exc:
            logger.error(f"[Audit] Could not fetch audit logs: {exc}")
            return []
        return map_rows(AUDIT_LOG_MAPPER, rows)
