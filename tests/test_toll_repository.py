# tests/test_toll_repository.py
"""Toll repository: (name, location) uniqueness and record dependents."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from conftest import VEHICLE
from fleet_ledger.utils.errors import DependencyExistsError, UniquenessViolation
from fleet_ledger.utils.messages import t


class TestTollUniqueness:
    @pytest.mark.asyncio
    async def test_same_name_and_location_ignoring_case_and_spacing(self, signed_in, make, store):
        await signed_in.add_toll(make.toll())

        with pytest.raises(UniquenessViolation) as exc_info:
            await signed_in.add_toll(make.toll(name="  peaje   AMAGÁ ", location="antioquia"))
        assert exc_info.value.user_message == t("duplicate_toll")
        assert len(store.calls_for("insert", "tolls")) == 1

    @pytest.mark.asyncio
    async def test_same_name_elsewhere_is_fine(self, signed_in, make):
        await signed_in.add_toll(make.toll())
        toll = await signed_in.add_toll(make.toll(location="Caldas"))
        assert toll.location == "Caldas"

    @pytest.mark.asyncio
    async def test_rename_into_collision(self, signed_in, make):
        await signed_in.add_toll(make.toll())
        other = await signed_in.add_toll(make.toll(name="Peaje Pintada"))

        with pytest.raises(UniquenessViolation):
            await signed_in.update_toll(other.id, {"name": "peaje amagá"})
        assert await signed_in.update_toll(other.id, {"price": 0}) is True

    @pytest.mark.asyncio
    async def test_uniqueness_is_per_owner(self, signed_in, make, store):
        store.seed("tolls", user_id="user-2", name="Peaje Amagá", location="Antioquia",
                   category="I", route="Ruta 25", price="12300")
        toll = await signed_in.add_toll(make.toll())
        assert toll.owner_id == "user-1"


class TestTollDependents:
    @pytest.mark.asyncio
    async def test_delete_blocked_by_records(self, signed_in, make):
        vehicle = await signed_in.add_vehicle(VEHICLE)
        trip = await signed_in.add_trip(make.trip(vehicle.id))
        toll = await signed_in.add_toll(make.toll())
        record = await signed_in.add_toll_record({"trip_id": trip.id, "toll_id": toll.id, "date": "2025-01-01",
                                                  "price": 12300, "payment_method": "cash"})

        with pytest.raises(DependencyExistsError) as exc_info:
            await signed_in.delete_toll(toll.id)
        assert exc_info.value.user_message == t("toll_has_records")

        await signed_in.delete_toll_record(record.id)
        assert await signed_in.delete_toll(toll.id) is True
        assert signed_in.tolls.list() == ()
