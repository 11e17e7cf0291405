"""
DataContext — one actor's view of the fleet data.

Owns the five repositories, the ActorSession and the notifier, re-exports the
repository operations under flat names (add_vehicle, delete_trip, …) and
serves the memoised report views. Repositories read each other's collections
through this object for referential checks; none of them writes another's.
"""

import asyncio
from typing import Dict, List, Optional

from fleet_ledger.database import SessionLocal
from fleet_ledger.entities import Actor
from fleet_ledger.services import reports
from fleet_ledger.services.audit_service import AuditLogger
from fleet_ledger.services.expense_service import ExpenseRepository
from fleet_ledger.services.export_service import export_to_spreadsheet, workbook_bytes
from fleet_ledger.services.notifier import Notifier
from fleet_ledger.services.reports import ExpenseFilters, Selector
from fleet_ledger.services.session import ActorSession
from fleet_ledger.services.store import RemoteStore, SqlAlchemyStore
from fleet_ledger.services.toll_record_service import TollRecordRepository
from fleet_ledger.services.toll_service import TollRepository
from fleet_ledger.services.trip_service import TripRepository
from fleet_ledger.services.vehicle_service import VehicleRepository
from fleet_ledger.utils.errors import ExportError, FleetError
from fleet_ledger.utils.logger import get_logger
from fleet_ledger.utils.messages import t

logger = get_logger(__name__)

COLLECTIONS = ("vehicles", "trips", "expenses", "tolls", "toll_records")


class DataContext:
    def __init__(self, store: RemoteStore, audit_logger: Optional[AuditLogger] = None,
                 notifier: Optional[Notifier] = None):
        self.store = store
        self.audit = audit_logger or AuditLogger(store)
        self.notifier = notifier or Notifier()
        self.session: Optional[ActorSession] = None

        self.vehicles = VehicleRepository(self)
        self.trips = TripRepository(self)
        self.expenses = ExpenseRepository(self)
        self.tolls = TollRepository(self)
        self.toll_records = TollRecordRepository(self)

        self._filtered = Selector(reports.filtered_expenses)
        self._by_category = Selector(reports.expenses_by_category)
        self._report = Selector(reports.expense_report)
        self._monthly = Selector(reports.monthly_expense_totals)
        self._toll_spending = Selector(reports.toll_spending_by_toll)

    def repository(self, collection: str):
        if collection not in COLLECTIONS:
            raise KeyError(collection)
        return getattr(self, collection)

    # ── Authentication lifecycle ──────────────────────────────────────────

    @property
    def actor(self) -> Optional[Actor]:
        return self.session.actor if self.session else None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None and self.session.is_authenticated

    async def sign_in(self, actor: Actor, user_agent: Optional[str] = None) -> Dict[str, int]:
        """Start a session for `actor` and bootstrap every collection."""
        if self.session is not None and self.actor != actor:
            await self.sign_out()
        if self.session is None:
            self.session = ActorSession(actor, user_agent)
            logger.info(f"[Context] Signed in {actor.id} ({actor.email or 'no email'})")
        return await self.reload()

    async def reload(self) -> Dict[str, int]:
        """Reload all collections; a failing one stays empty while the others load."""
        counts = {}
        for name in COLLECTIONS:
            repository = getattr(self, name)
            try:
                counts[name] = len(await repository.load())
            except FleetError as exc:
                logger.error(f"[Context] {name} not loaded: {exc}")
                repository.reset()
                counts[name] = 0
        return counts

    async def sign_out(self):
        """Flush pending audits, then forget the actor and every cached row."""
        await self.audit.drain()
        for name in COLLECTIONS:
            getattr(self, name).reset()
        for selector in (self._filtered, self._by_category, self._report, self._monthly, self._toll_spending):
            selector.invalidate()
        if self.session is not None:
            logger.info(f"[Context] Signed out {self.session.actor.id}")
            self.session.close()
        self.session = None

    # ── Re-exported repository operations ─────────────────────────────────

    async def add_vehicle(self, fields):
        return await self.vehicles.add(fields)

    async def update_vehicle(self, vehicle_id, patch):
        return await self.vehicles.update(vehicle_id, patch)

    async def delete_vehicle(self, vehicle_id):
        return await self.vehicles.delete(vehicle_id)

    def get_vehicle_by_id(self, vehicle_id):
        return self.vehicles.get_by_id(vehicle_id)

    async def add_trip(self, fields):
        return await self.trips.add(fields)

    async def update_trip(self, trip_id, patch):
        return await self.trips.update(trip_id, patch)

    async def delete_trip(self, trip_id):
        return await self.trips.delete(trip_id)

    def get_trip_by_id(self, trip_id):
        return self.trips.get_by_id(trip_id)

    async def add_expense(self, fields):
        return await self.expenses.add(fields)

    async def update_expense(self, expense_id, patch):
        return await self.expenses.update(expense_id, patch)

    async def delete_expense(self, expense_id):
        return await self.expenses.delete(expense_id)

    def get_expense_by_id(self, expense_id):
        return self.expenses.get_by_id(expense_id)

    async def add_toll(self, fields):
        return await self.tolls.add(fields)

    async def update_toll(self, toll_id, patch):
        return await self.tolls.update(toll_id, patch)

    async def delete_toll(self, toll_id):
        return await self.tolls.delete(toll_id)

    def get_toll_by_id(self, toll_id):
        return self.tolls.get_by_id(toll_id)

    async def add_toll_record(self, fields):
        return await self.toll_records.add(fields)

    async def update_toll_record(self, record_id, patch):
        return await self.toll_records.update(record_id, patch)

    async def delete_toll_record(self, record_id):
        return await self.toll_records.delete(record_id)

    def get_toll_record_by_id(self, record_id):
        return self.toll_records.get_by_id(record_id)

    # ── Derived views ─────────────────────────────────────────────────────

    def filtered_expenses(self, filters: Optional[ExpenseFilters] = None):
        return self._filtered(self.expenses.list(), filters or ExpenseFilters())

    def expenses_by_category(self, filters: Optional[ExpenseFilters] = None):
        return self._by_category(self.expenses.list(), filters or ExpenseFilters())

    def expense_report(self, filters: Optional[ExpenseFilters] = None):
        return self._report(self.expenses.list(), filters or ExpenseFilters())

    def monthly_expense_totals(self, filters: Optional[ExpenseFilters] = None):
        return self._monthly(self.expenses.list(), filters or ExpenseFilters())

    def toll_spending_by_toll(self):
        return self._toll_spending(self.toll_records.list(), self.tolls.list())

    # ── Export & audit history ────────────────────────────────────────────

    def export(self, rows, filename: str, directory: Optional[str] = None):
        try:
            path = export_to_spreadsheet(rows, filename, directory)
        except ExportError as exc:
            self.notifier.error(exc.user_message)
            raise
        self.notifier.success(t("export_done", filename=path.name))
        return path

    def export_bytes(self, rows) -> bytes:
        """Spreadsheet payload for a download; nothing touches the file system."""
        try:
            return workbook_bytes(rows)
        except ExportError as exc:
            self.notifier.error(exc.user_message)
            raise

    async def audit_logs(self, limit: int = 50, offset: int = 0):
        return await self.audit.fetch_logs(self.session, limit=limit, offset=offset)


class ContextRegistry:
    """One DataContext per signed-in actor (HTTP surface)."""

    def __init__(self, store: RemoteStore, audit_logger: Optional[AuditLogger] = None):
        self.store = store
        self.audit_logger = audit_logger or AuditLogger(store)
        self._contexts: Dict[str, DataContext] = {}
        self._lock = asyncio.Lock()

    def get(self, actor_id: str) -> Optional[DataContext]:
        return self._contexts.get(actor_id)

    async def sign_in(self, actor: Actor, user_agent: Optional[str] = None) -> DataContext:
        async with self._lock:
            context = self._contexts.get(actor.id)
            if context is None:
                context = DataContext(self.store, self.audit_logger)
                self._contexts[actor.id] = context
        await context.sign_in(actor, user_agent)
        return context

    async def sign_out(self, actor_id: str) -> bool:
        context = self._contexts.pop(actor_id, None)
        if context is None:
            return False
        await context.sign_out()
        return True

    async def close(self):
        for actor_id in list(self._contexts):
            await self.sign_out(actor_id)

    def active_actors(self) -> List[str]:
        return list(self._contexts)


def build_registry() -> ContextRegistry:
    return ContextRegistry(SqlAlchemyStore(SessionLocal))
