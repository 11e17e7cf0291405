# tests/test_store.py
"""SqlAlchemyStore against an in-memory SQLite database."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import AsyncMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from conftest import ACTOR, VEHICLE, expense_fields, trip_fields
from fleet_ledger.database import create_tables
from fleet_ledger.services.audit_service import AuditLogger
from fleet_ledger.services.data_context import DataContext
from fleet_ledger.services.notifier import Notifier
from fleet_ledger.services.store import SqlAlchemyStore
from fleet_ledger.utils.errors import StoreError
from fleet_ledger.utils.mappers import EXPENSE_MAPPER, VEHICLE_MAPPER


@pytest.fixture
def sql_store():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=engine)
    return SqlAlchemyStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))


def vehicle_row(**overrides):
    row = {"user_id": "user-1", "plate": "ABC123", "brand": "Ford", "model": "F150", "year": 2020}
    row.update(overrides)
    return row


class TestInsertAndSelect:
    @pytest.mark.asyncio
    async def test_insert_returns_wire_row(self, sql_store):
        row = await sql_store.insert("vehicles", vehicle_row(soat_expiry_date="2026-03-01"))

        assert row["id"] and row["user_id"] == "user-1"
        assert row["soat_expiry_date"] == "2026-03-01"
        assert isinstance(row["created_at"], str)
        vehicle = VEHICLE_MAPPER.from_wire(row)
        assert vehicle.plate == "ABC123" and vehicle.year == 2020

    @pytest.mark.asyncio
    async def test_money_round_trips_as_decimal_string(self, sql_store):
        vehicle = await sql_store.insert("vehicles", vehicle_row())
        trip = await sql_store.insert("trips", {"user_id": "user-1", "vehicle_id": vehicle["id"], "origin": "A",
                                                "destination": "B", "start_date": "2025-01-01", "distance": 400})
        row = await sql_store.insert("expenses", {"user_id": "user-1", "trip_id": trip["id"],
                                                  "vehicle_id": vehicle["id"], "category": "fuel",
                                                  "amount": 150000.5, "date": "2025-01-01"})

        assert isinstance(row["amount"], str)
        expense = EXPENSE_MAPPER.from_wire(row)
        assert expense.amount == 150000.5
        assert expense.description == ""

    @pytest.mark.asyncio
    async def test_select_is_owner_scoped_ordered_and_paged(self, sql_store):
        await sql_store.insert("vehicles", vehicle_row(plate="AAA111", created_at="2025-01-01T00:00:00"))
        await sql_store.insert("vehicles", vehicle_row(plate="BBB222", created_at="2025-01-02T00:00:00"))
        await sql_store.insert("vehicles", vehicle_row(plate="CCC333", created_at="2025-01-03T00:00:00"))
        await sql_store.insert("vehicles", vehicle_row(user_id="user-2", plate="DDD444"))

        rows = await sql_store.select("vehicles", {"user_id": "user-1"}, order_by="-created_at")
        assert [r["plate"] for r in rows] == ["CCC333", "BBB222", "AAA111"]

        page = await sql_store.select("vehicles", {"user_id": "user-1"}, order_by="created_at", limit=1, offset=1)
        assert [r["plate"] for r in page] == ["BBB222"]


class TestStoreErrors:
    @pytest.mark.asyncio
    async def test_owner_predicate_is_required(self, sql_store):
        with pytest.raises(StoreError) as exc_info:
            await sql_store.select("vehicles", {})
        assert exc_info.value.code == "42501"

    @pytest.mark.asyncio
    async def test_duplicate_plate_is_unique_violation(self, sql_store):
        await sql_store.insert("vehicles", vehicle_row())
        with pytest.raises(StoreError) as exc_info:
            await sql_store.insert("vehicles", vehicle_row())
        assert exc_info.value.code == "23505"

    @pytest.mark.asyncio
    async def test_unknown_table_and_column(self, sql_store):
        with pytest.raises(StoreError) as exc_info:
            await sql_store.select("drivers", {"user_id": "user-1"})
        assert exc_info.value.code == "42P01"
        with pytest.raises(StoreError) as exc_info:
            await sql_store.insert("vehicles", vehicle_row(wheels=4))
        assert exc_info.value.code == "42703"

    @pytest.mark.asyncio
    async def test_invalid_date_text(self, sql_store):
        with pytest.raises(StoreError) as exc_info:
            await sql_store.insert("vehicles", vehicle_row(soat_expiry_date="someday"))
        assert exc_info.value.code == "22P02"


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_update_scoped_by_id_and_owner(self, sql_store):
        row = await sql_store.insert("vehicles", vehicle_row())

        with pytest.raises(StoreError) as exc_info:
            await sql_store.update("vehicles", {"id": row["id"], "user_id": "user-2"}, {"color": "red"})
        assert exc_info.value.code == "P0002"

        await sql_store.update("vehicles", {"id": row["id"], "user_id": "user-1"}, {"color": "red"})
        [updated] = await sql_store.select("vehicles", {"id": row["id"], "user_id": "user-1"})
        assert updated["color"] == "red"

    @pytest.mark.asyncio
    async def test_delete(self, sql_store):
        row = await sql_store.insert("vehicles", vehicle_row())

        with pytest.raises(StoreError) as exc_info:
            await sql_store.delete("vehicles", {"id": "missing", "user_id": "user-1"})
        assert exc_info.value.code == "P0002"

        await sql_store.delete("vehicles", {"id": row["id"], "user_id": "user-1"})
        assert await sql_store.select("vehicles", {"user_id": "user-1"}) == []


class TestDataContextOnSql:
    @pytest.mark.asyncio
    async def test_clearing_expense_description(self, sql_store):
        ctx = DataContext(sql_store, AuditLogger(sql_store, procedure=AsyncMock(), timeout=1), Notifier())
        await ctx.sign_in(ACTOR, "pytest")
        vehicle = await ctx.add_vehicle(VEHICLE)
        trip = await ctx.add_trip(trip_fields(vehicle.id))
        expense = await ctx.add_expense(expense_fields(trip.id, vehicle.id, description="ACPM"))

        assert await ctx.update_expense(expense.id, {"description": None}) is True

        assert ctx.get_expense_by_id(expense.id).description == ""
        [row] = await sql_store.select("expenses", {"id": expense.id, "user_id": ACTOR.id})
        assert row["description"] == ""
        await ctx.sign_out()

    @pytest.mark.asyncio
    async def test_fuel_type_is_stored_lower_cased(self, sql_store):
        ctx = DataContext(sql_store, AuditLogger(sql_store, procedure=AsyncMock(), timeout=1), Notifier())
        await ctx.sign_in(ACTOR, "pytest")
        vehicle = await ctx.add_vehicle({**VEHICLE, "fuel_type": "Gasolina"})

        [row] = await sql_store.select("vehicles", {"id": vehicle.id, "user_id": ACTOR.id})
        assert row["fuel_type"] == vehicle.fuel_type == "gasolina"
        await ctx.sign_out()
