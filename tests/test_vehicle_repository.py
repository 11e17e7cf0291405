# tests/test_vehicle_repository.py
"""Vehicle repository: cache lifecycle, plate uniqueness, dependents, failure handling."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from conftest import ACTOR, VEHICLE
from fleet_ledger.entities import Actor
from fleet_ledger.services.audit_service import AUDIT_TABLE, AuditOutcome
from fleet_ledger.utils.errors import (
    DependencyExistsError, NotAuthenticatedError, NotFoundError, RemoteReadError, RemoteWriteError,
    UniquenessViolation, ValidationError, DUPLICATE_KEY, PERMISSION_DENIED,
)
from fleet_ledger.utils.messages import t


def errors(notifier):
    return [n.message for n in notifier.peek() if n.level == "error"]


class TestAddVehicle:
    @pytest.mark.asyncio
    async def test_add_prepends_and_audits(self, signed_in, store, procedure):
        first = await signed_in.add_vehicle(VEHICLE)
        second = await signed_in.add_vehicle({**VEHICLE, "plate": "XYZ987"})

        assert signed_in.vehicles.list() == (second, first)
        assert first.owner_id == ACTOR.id
        assert store.calls_for("insert", "vehicles")[0][2]["user_id"] == ACTOR.id

        await signed_in.audit.drain()
        creates = [c.args[0] for c in procedure.await_args_list if c.args[0]["operation"] == "CREATE"]
        assert [e["record_id"] for e in creates] == [first.id, second.id]
        assert creates[0]["new_values"]["plate"] == "ABC123"

    @pytest.mark.asyncio
    async def test_success_is_notified(self, signed_in, notifier):
        await signed_in.add_vehicle(VEHICLE)
        assert [n.message for n in notifier.peek()] == [t("created", "vehicles")]

    @pytest.mark.asyncio
    async def test_duplicate_plate_is_rejected_locally(self, signed_in, store, notifier):
        await signed_in.add_vehicle(VEHICLE)

        with pytest.raises(UniquenessViolation):
            await signed_in.add_vehicle({**VEHICLE, "plate": "abc 123"})

        assert len(store.calls_for("insert", "vehicles")) == 1
        assert len(signed_in.vehicles.list()) == 1
        assert errors(notifier) == [t("duplicate_plate", plate="ABC123")]

    @pytest.mark.asyncio
    async def test_invalid_data_never_reaches_the_store(self, signed_in, store, notifier):
        with pytest.raises(ValidationError) as exc_info:
            await signed_in.add_vehicle({**VEHICLE, "year": 1800})

        assert "year" in exc_info.value.errors[0]
        assert store.calls_for("insert") == []
        assert len(errors(notifier)) == 1

    @pytest.mark.asyncio
    async def test_remote_failure_leaves_cache_untouched(self, signed_in, store, notifier):
        store.fail_next("insert", "vehicles", code="23505")

        with pytest.raises(RemoteWriteError) as exc_info:
            await signed_in.add_vehicle(VEHICLE)

        assert exc_info.value.category == DUPLICATE_KEY
        assert exc_info.value.status_code == 409
        assert signed_in.vehicles.list() == ()
        assert errors(notifier) == [t("remote_duplicate_key")]

    @pytest.mark.asyncio
    async def test_rls_message_maps_to_permission_denied(self, signed_in, store):
        store.fail_next("insert", "vehicles", code="XX000", message="new row violates RLS policy")
        with pytest.raises(RemoteWriteError) as exc_info:
            await signed_in.add_vehicle(VEHICLE)
        assert exc_info.value.category == PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_requires_an_actor(self, ctx, store, notifier):
        with pytest.raises(NotAuthenticatedError):
            await ctx.add_vehicle(VEHICLE)
        assert store.calls == []
        assert errors(notifier) == [t("not_authenticated")]

    @pytest.mark.asyncio
    async def test_audit_loss_does_not_block_the_add(self, signed_in, store, procedure, audit_logger, notifier):
        await signed_in.audit.drain()
        procedure.side_effect = RuntimeError("procedure down")
        store.fail_next("insert", AUDIT_TABLE)

        vehicle = await signed_in.add_vehicle(VEHICLE)
        await signed_in.audit.drain()

        assert vehicle.plate == "ABC123"
        assert signed_in.vehicles.list() == (vehicle,)
        assert audit_logger.last_outcome == AuditOutcome.DONE_WITH_LOSS
        assert store.tables[AUDIT_TABLE] == []
        assert errors(notifier) == []


class TestUpdateVehicle:
    @pytest.mark.asyncio
    async def test_unknown_id_fails_without_remote_call(self, signed_in, store, notifier):
        with pytest.raises(NotFoundError):
            await signed_in.update_vehicle("missing", {"color": "red"})
        assert store.calls_for("update") == []
        assert errors(notifier) == [t("not_found", "vehicles")]

    @pytest.mark.asyncio
    async def test_patch_is_merged_after_remote_success(self, signed_in, store, procedure):
        vehicle = await signed_in.add_vehicle(VEHICLE)

        assert await signed_in.update_vehicle(vehicle.id, {"color": "Rojo", "year": "2021"}) is True

        updated = signed_in.vehicles.find(vehicle.id)
        assert updated.color == "Rojo" and updated.year == 2021
        assert updated.updated_at >= vehicle.updated_at
        _, table, filters, patch = store.calls_for("update", "vehicles")[0]
        assert filters == {"id": vehicle.id, "user_id": ACTOR.id}
        assert patch == {"color": "Rojo", "year": 2021}

        await signed_in.audit.drain()
        entry = next(c.args[0] for c in procedure.await_args_list if c.args[0]["operation"] == "UPDATE")
        assert entry["old_values"] == {"color": None, "year": 2020}
        assert entry["new_values"] == {"color": "Rojo", "year": 2021}

    @pytest.mark.asyncio
    async def test_plate_collision_on_update(self, signed_in):
        await signed_in.add_vehicle(VEHICLE)
        other = await signed_in.add_vehicle({**VEHICLE, "plate": "XYZ987"})

        with pytest.raises(UniquenessViolation):
            await signed_in.update_vehicle(other.id, {"plate": "abc123"})
        assert await signed_in.update_vehicle(other.id, {"plate": "XYZ987"}) is True

    @pytest.mark.asyncio
    async def test_remote_failure_keeps_old_entry(self, signed_in, store):
        vehicle = await signed_in.add_vehicle(VEHICLE)
        store.fail_next("update", "vehicles")

        with pytest.raises(RemoteWriteError):
            await signed_in.update_vehicle(vehicle.id, {"brand": "Chevrolet"})
        assert signed_in.vehicles.find(vehicle.id) is vehicle

    @pytest.mark.asyncio
    async def test_row_gone_remotely_is_not_found(self, signed_in, store):
        vehicle = await signed_in.add_vehicle(VEHICLE)
        store.tables["vehicles"].clear()

        with pytest.raises(NotFoundError):
            await signed_in.update_vehicle(vehicle.id, {"brand": "Chevrolet"})


class TestDeleteVehicle:
    @pytest.mark.asyncio
    async def test_delete_blocked_by_trips(self, signed_in, make, store, notifier):
        vehicle = await signed_in.add_vehicle(VEHICLE)
        await signed_in.add_trip(make.trip(vehicle.id))

        with pytest.raises(DependencyExistsError):
            await signed_in.delete_vehicle(vehicle.id)

        assert store.calls_for("delete") == []
        assert signed_in.vehicles.find(vehicle.id) is vehicle
        assert errors(notifier) == [t("vehicle_has_trips")]

    @pytest.mark.asyncio
    async def test_dependents_probed_remotely_when_trips_not_loaded(self, signed_in, store):
        vehicle = await signed_in.add_vehicle(VEHICLE)
        signed_in.trips.reset()
        store.seed("trips", user_id=ACTOR.id, vehicle_id=vehicle.id, origin="A", destination="B",
                   start_date="2025-01-01", distance="10")

        with pytest.raises(DependencyExistsError):
            await signed_in.delete_vehicle(vehicle.id)

        probe = store.calls_for("select", "trips")[-1]
        assert probe[2] == {"vehicle_id": vehicle.id, "user_id": ACTOR.id}

    @pytest.mark.asyncio
    async def test_delete_removes_and_audits_pre_image(self, signed_in, store, procedure):
        vehicle = await signed_in.add_vehicle(VEHICLE)

        assert await signed_in.delete_vehicle(vehicle.id) is True

        assert signed_in.vehicles.list() == ()
        assert store.tables["vehicles"] == []
        await signed_in.audit.drain()
        entry = next(c.args[0] for c in procedure.await_args_list if c.args[0]["operation"] == "DELETE")
        assert entry["old_values"]["plate"] == "ABC123"
        assert entry["new_values"] is None

    @pytest.mark.asyncio
    async def test_remote_failure_keeps_the_vehicle(self, signed_in, store, notifier):
        vehicle = await signed_in.add_vehicle(VEHICLE)
        store.fail_next("delete", "vehicles")

        with pytest.raises(RemoteWriteError):
            await signed_in.delete_vehicle(vehicle.id)

        assert signed_in.get_vehicle_by_id(vehicle.id) is vehicle
        assert signed_in.vehicles.list() == (vehicle,)
        assert len(store.tables["vehicles"]) == 1
        assert errors(notifier) == [t("remote_generic")]


class TestCollection:
    @pytest.mark.asyncio
    async def test_subscribers_see_every_change(self, signed_in):
        seen = []
        unsubscribe = signed_in.vehicles.subscribe(seen.append)

        vehicle = await signed_in.add_vehicle(VEHICLE)
        await signed_in.delete_vehicle(vehicle.id)
        unsubscribe()
        await signed_in.add_vehicle(VEHICLE)

        assert seen == [(vehicle,), ()]

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_break_the_operation(self, signed_in):
        def explode(items):
            raise RuntimeError("render failed")

        signed_in.vehicles.subscribe(explode)
        vehicle = await signed_in.add_vehicle(VEHICLE)
        assert signed_in.vehicles.list() == (vehicle,)

    @pytest.mark.asyncio
    async def test_get_by_id_is_local(self, signed_in, store):
        vehicle = await signed_in.add_vehicle(VEHICLE)
        calls = len(store.calls)

        assert signed_in.get_vehicle_by_id(vehicle.id) is vehicle
        assert signed_in.get_vehicle_by_id("nope") is None
        assert len(store.calls) == calls

    @pytest.mark.asyncio
    async def test_load_is_owner_scoped_newest_first_and_drops_bad_rows(self, ctx, store):
        store.seed("vehicles", user_id=ACTOR.id, plate="OLD111", brand="Ford", model="A", year=2000)
        store.seed("vehicles", user_id="user-2", plate="NOT222", brand="Kia", model="B", year=2001)
        store.seed("vehicles", user_id=ACTOR.id, plate="NEW333", brand="Ford", model="C", year="2002")
        store.seed("vehicles", user_id=ACTOR.id, plate="BAD444", brand="Ford", model="D", year=2003,
                   created_at="not a timestamp")

        await ctx.sign_in(ACTOR)

        assert [v.plate for v in ctx.vehicles.list()] == ["NEW333", "OLD111"]
        assert ctx.vehicles.list()[0].year == 2002

    @pytest.mark.asyncio
    async def test_load_failure_notifies_and_raises(self, ctx, store, notifier):
        await ctx.sign_in(Actor("user-1"))
        store.fail_next("select", "vehicles")
        notifier.drain()

        with pytest.raises(RemoteReadError):
            await ctx.vehicles.load()
        assert errors(notifier) == [t("load_failed", "vehicles")]
