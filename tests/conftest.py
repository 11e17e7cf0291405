# tests/conftest.py
"""Shared fixtures: an in-memory store, a mocked audit procedure and a DataContext wired to both."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import uuid
from collections import defaultdict
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from fleet_ledger.entities import Actor
from fleet_ledger.services.audit_service import AuditLogger
from fleet_ledger.services.data_context import DataContext
from fleet_ledger.services.notifier import Notifier
from fleet_ledger.services.store import NO_DATA_FOUND, RemoteStore, require_owner
from fleet_ledger.utils.errors import StoreError

ACTOR = Actor(id="user-1", email="ana@example.com")
OTHER_ACTOR = Actor(id="user-2", email="luis@example.com")


class FakeStore(RemoteStore):
    """Dict-backed store honouring the owner predicate, with per-call failure injection."""

    def __init__(self):
        self.tables = defaultdict(list)
        self.calls = []
        self._failures = {}
        self._clock = datetime(2025, 1, 1, 8, 0, 0)

    def fail_next(self, op, table=None, code="XX000", message="boom"):
        self._failures[(op, table)] = StoreError(code, message)

    def calls_for(self, op, table=None):
        return [c for c in self.calls if c[0] == op and (table is None or c[1] == table)]

    def seed(self, table, **row):
        row.setdefault("id", str(uuid.uuid4()))
        now = self._tick()
        row.setdefault("created_at", now)
        row.setdefault("updated_at", now)
        self.tables[table].append(row)
        return row

    def _tick(self):
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def _raise_if_failing(self, op, table):
        for key in ((op, table), (op, None)):
            if key in self._failures:
                raise self._failures.pop(key)

    def _matching(self, table, filters):
        return [r for r in self.tables[table] if all(r.get(k) == v for k, v in filters.items())]

    async def select(self, table, filters, order_by=None, limit=None, offset=0):
        self.calls.append(("select", table, dict(filters)))
        self._raise_if_failing("select", table)
        require_owner(filters)
        rows = [dict(r) for r in self._matching(table, filters)]
        if order_by:
            key = order_by.lstrip("-")
            rows.sort(key=lambda r: r.get(key) or "", reverse=order_by.startswith("-"))
        rows = rows[offset:]
        return rows if limit is None else rows[:limit]

    async def insert(self, table, row):
        self.calls.append(("insert", table, dict(row)))
        self._raise_if_failing("insert", table)
        require_owner(row)
        stored = dict(row)
        stored.setdefault("id", str(uuid.uuid4()))
        now = self._tick()
        stored.setdefault("created_at", now)
        stored.setdefault("updated_at", now)
        self.tables[table].append(stored)
        return dict(stored)

    async def update(self, table, filters, patch):
        self.calls.append(("update", table, dict(filters), dict(patch)))
        self._raise_if_failing("update", table)
        require_owner(filters)
        rows = self._matching(table, filters)
        if not rows:
            raise StoreError(NO_DATA_FOUND, "no rows")
        for row in rows:
            row.update(patch, updated_at=self._tick())

    async def delete(self, table, filters):
        self.calls.append(("delete", table, dict(filters)))
        self._raise_if_failing("delete", table)
        require_owner(filters)
        rows = self._matching(table, filters)
        if not rows:
            raise StoreError(NO_DATA_FOUND, "no rows")
        self.tables[table] = [r for r in self.tables[table] if r not in rows]


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def procedure():
    return AsyncMock()


@pytest.fixture
def audit_logger(store, procedure):
    return AuditLogger(store, procedure=procedure, timeout=0.5, read_actions=["load_all"])


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def ctx(store, audit_logger, notifier):
    return DataContext(store, audit_logger, notifier)


@pytest_asyncio.fixture
async def signed_in(ctx):
    await ctx.sign_in(ACTOR, "pytest")
    ctx.notifier.drain()
    return ctx


VEHICLE = {"plate": "ABC123", "brand": "Ford", "model": "F150", "year": 2020}


def trip_fields(vehicle_id, **overrides):
    fields = {
        "vehicle_id": vehicle_id,
        "origin": "Bogotá",
        "destination": "Medellín",
        "start_date": "2025-01-01",
        "distance": 400,
    }
    fields.update(overrides)
    return fields


def expense_fields(trip_id, vehicle_id, **overrides):
    fields = {
        "trip_id": trip_id,
        "vehicle_id": vehicle_id,
        "category": "fuel",
        "amount": 150000,
        "date": "2025-01-01",
    }
    fields.update(overrides)
    return fields


TOLL = {"name": "Peaje Amagá", "location": "Antioquia", "category": "I", "route": "Ruta 25", "price": 12300}


@pytest.fixture
def make():
    """Factories for the standard test payloads."""
    class _Make:
        vehicle = staticmethod(lambda **kw: {**VEHICLE, **kw})
        trip = staticmethod(trip_fields)
        expense = staticmethod(expense_fields)
        toll = staticmethod(lambda **kw: {**TOLL, **kw})
    return _Make
