"""
Shared behaviour of the five entity repositories.

A repository owns the in-memory collection of one entity type for the signed-in
actor. The collection is an immutable tuple, most recently created first, and is
replaced (never mutated) on every change so subscribers can compare by identity.

Mutation pipeline:
    normalise → validate → referential / uniqueness checks (sibling caches)
    → map to wire → remote call → map back → update cache → notify → audit

Local checks run before any remote call. On any failure the cache is untouched,
one notification is pushed and the error is raised to the caller.
"""

from dataclasses import fields as dataclass_fields, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from fleet_ledger.entities import AuditOperation
from fleet_ledger.services.audit_service import AuditParams
from fleet_ledger.services.store import NO_DATA_FOUND
from fleet_ledger.utils.errors import (
    FleetError, MappingError, NotAuthenticatedError, NotFoundError, ReferentialIntegrityError,
    RemoteReadError, RemoteWriteError, StoreError, ValidationError, GENERIC, remote_error_from,
)
from fleet_ledger.utils.logger import get_logger
from fleet_ledger.utils.mappers import EntityMapper, map_rows
from fleet_ledger.utils.messages import t

logger = get_logger(__name__)

Subscriber = Callable[[tuple], None]


class EntityRepository:
    table_name: str = ""
    noun: str = ""                          # used in audit action names
    mapper: EntityMapper = None
    validator: Callable = None
    audited_fields: Tuple[str, ...] = ()

    def __init__(self, context):
        self._context = context
        self._items: tuple = ()
        self._subscribers: List[Subscriber] = []
        self.loaded = False

    # ── Collaborators (owned by the data context) ─────────────────────────

    @property
    def store(self):
        return self._context.store

    @property
    def audit(self):
        return self._context.audit

    @property
    def notifier(self):
        return self._context.notifier

    # ── Reactive collection ───────────────────────────────────────────────

    def list(self) -> tuple:
        return self._items

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call `callback(collection)` after every change. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, items: tuple):
        self._items = items
        for callback in list(self._subscribers):
            try:
                callback(items)
            except Exception:
                logger.exception(f"[{self.table_name}] subscriber {callback!r} failed")

    def reset(self):
        """Drop the collection (actor signed out)."""
        self.loaded = False
        self._publish(())

    # ── Lookups (local only) ──────────────────────────────────────────────

    def find(self, entity_id: str):
        if not entity_id or not isinstance(entity_id, str):
            return None
        return next((item for item in self._items if item.id == entity_id), None)

    def get_by_id(self, entity_id: str):
        """In-memory lookup; never hits the store. Submits a (sampled) READ audit."""
        entity = self.find(entity_id)
        if entity is not None:
            self.audit.submit(self._context.session, AuditParams(
                self.table_name, AuditOperation.READ, entity_id,
                additional_info={"action": "get_by_id", "entity": self.noun},
            ))
        return entity

    # ── Bootstrap ─────────────────────────────────────────────────────────

    async def load(self) -> tuple:
        """Full reload of the actor's rows, newest first. Malformed rows are dropped."""
        try:
            session = self._require_session()
            try:
                rows = await self.store.select(self.table_name, {"user_id": session.actor.id},
                                               order_by="-created_at")
            except StoreError as exc:
                logger.error(f"[{self.table_name}] load failed: {exc}")
                error = remote_error_from(exc, RemoteReadError)
                error.user_message = t("load_failed", self.table_name)
                raise error from exc
        except FleetError as exc:
            self.notifier.error(exc.user_message)
            raise

        entities = tuple(map_rows(self.mapper, rows))
        self.loaded = True
        self._publish(entities)
        logger.info(f"[{self.table_name}] loaded {len(entities)} of {len(rows or [])} rows")
        self.audit.submit(session, AuditParams(
            self.table_name, AuditOperation.READ,
            additional_info={"action": f"load_all_{self.table_name}", "count": len(entities)},
        ))
        return entities

    # ── Mutations ─────────────────────────────────────────────────────────

    async def add(self, fields: Mapping[str, Any]):
        try:
            session = self._require_session()
            data = self.complete_new(self.mapper.normalize(fields))
            self._ensure_valid(data, partial=False)
            changed = set(data)
            await self.check_references(data, None, changed)
            self.check_unique(data, None, changed)

            wire = self.mapper.to_wire(data)
            wire["user_id"] = session.actor.id
            row = await self._remote_write(self.store.insert(self.table_name, wire))
            entity = self._map_returned(row)
        except FleetError as exc:
            self.notifier.error(exc.user_message)
            raise

        self._publish((entity,) + self._items)
        logger.info(f"[{self.table_name}] created {entity.id}")
        self.notifier.success(t("created", self.table_name))
        self.audit.submit(session, AuditParams(
            self.table_name, AuditOperation.CREATE, entity.id,
            new_values=self.audit_snapshot(entity),
            additional_info={"action": f"create_{self.noun}"},
        ))
        return entity

    async def update(self, entity_id: str, patch: Mapping[str, Any]) -> bool:
        try:
            session = self._require_session()
            current = self._require_existing(entity_id)
            changes = self.complete_patch(self.mapper.normalize(patch), current)
            self._ensure_valid(changes, partial=True)
            merged = {**self._as_fields(current), **changes}
            self.check_merged(merged)
            changed = set(changes)
            await self.check_references(merged, current, changed)
            self.check_unique(merged, current, changed)

            wire = self.mapper.to_wire(changes)
            if wire:
                await self._remote_write(self.store.update(
                    self.table_name, {"id": entity_id, "user_id": session.actor.id}, wire))
        except FleetError as exc:
            self.notifier.error(exc.user_message)
            raise

        if not wire:
            return True
        updated = replace(current, **changes, updated_at=datetime.utcnow())
        self._publish(tuple(updated if item.id == entity_id else item for item in self._items))
        logger.info(f"[{self.table_name}] updated {entity_id}: {sorted(changes)}")
        self.notifier.success(t("updated", self.table_name))
        self.audit.submit(session, AuditParams(
            self.table_name, AuditOperation.UPDATE, entity_id,
            old_values={name: getattr(current, name) for name in changes},
            new_values=changes,
            additional_info={"action": f"update_{self.noun}"},
        ))
        return True

    async def delete(self, entity_id: str) -> bool:
        try:
            session = self._require_session()
            current = self._require_existing(entity_id)
            await self.check_dependents(current)
            await self._remote_write(self.store.delete(
                self.table_name, {"id": entity_id, "user_id": session.actor.id}))
        except FleetError as exc:
            self.notifier.error(exc.user_message)
            raise

        self._publish(tuple(item for item in self._items if item.id != entity_id))
        logger.info(f"[{self.table_name}] deleted {entity_id}")
        self.notifier.success(t("deleted", self.table_name))
        self.audit.submit(session, AuditParams(
            self.table_name, AuditOperation.DELETE, entity_id,
            old_values=self.audit_snapshot(current),
            additional_info={"action": f"delete_{self.noun}"},
        ))
        return True

    # ── Hooks for subclasses ──────────────────────────────────────────────

    def complete_new(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return data

    def complete_patch(self, changes: Dict[str, Any], current) -> Dict[str, Any]:
        return changes

    def check_merged(self, merged: Dict[str, Any]):
        """Cross-field rules evaluated on the entity as it would look after the patch."""

    async def check_references(self, data: Dict[str, Any], current, changed: set):
        """Raise ReferentialIntegrityError when a referenced parent is missing or inconsistent."""

    def check_unique(self, data: Dict[str, Any], current, changed: set):
        """Raise UniquenessViolation when `data` collides with another cached entity."""

    async def check_dependents(self, entity):
        """Raise DependencyExistsError when other records still reference `entity`."""

    def audit_snapshot(self, entity) -> Dict[str, Any]:
        return {name: getattr(entity, name) for name in self.audited_fields}

    # ── Helpers ───────────────────────────────────────────────────────────

    def _require_session(self):
        session = self._context.session
        if session is None or not session.is_authenticated:
            raise NotAuthenticatedError(t("not_authenticated"))
        return session

    def _require_existing(self, entity_id: str):
        current = self.find(entity_id)
        if current is None:
            raise NotFoundError(t("not_found", self.table_name), f"{self.table_name} {entity_id!r} not in cache")
        return current

    def _ensure_valid(self, data: Mapping[str, Any], partial: bool):
        result = type(self).validator(data, partial=partial)
        if not result.is_valid:
            logger.info(f"[{self.table_name}] validation failed: {result.errors}")
            raise ValidationError(
                t("invalid_data", self.table_name, details="; ".join(result.errors)), result.errors)

    def _as_fields(self, entity) -> Dict[str, Any]:
        skip = {"id", "owner_id", "created_at", "updated_at"}
        return {f.name: getattr(entity, f.name) for f in dataclass_fields(entity) if f.name not in skip}

    async def _remote_write(self, call):
        try:
            return await call
        except StoreError as exc:
            logger.error(f"[{self.table_name}] remote write failed: {exc}")
            if exc.code == NO_DATA_FOUND:
                # deleted elsewhere since the last load
                raise NotFoundError(t("not_found", self.table_name), str(exc)) from exc
            raise remote_error_from(exc, RemoteWriteError) from exc

    def _map_returned(self, row):
        try:
            return self.mapper.from_wire(row)
        except MappingError as exc:
            logger.error(f"[{self.table_name}] store returned an unusable row: {exc}")
            raise RemoteWriteError(GENERIC, t("remote_generic"), str(exc)) from exc

    async def _has_dependents(self, sibling: str, foreign_key: str, entity_id: str) -> bool:
        """
        Look for rows in a sibling collection referencing `entity_id`: in its cache when
        it is loaded, otherwise with a one-row existence probe against the store.
        """
        repository = getattr(self._context, sibling, None)
        if repository is not None and repository.loaded:
            return any(getattr(item, foreign_key) == entity_id for item in repository.list())
        table = repository.table_name if repository is not None else sibling
        owner = self._require_session().actor.id
        try:
            rows = await self.store.select(table, {foreign_key: entity_id, "user_id": owner}, limit=1)
        except StoreError as exc:
            logger.error(f"[{self.table_name}] dependency probe on {table} failed: {exc}")
            raise remote_error_from(exc, RemoteReadError) from exc
        return bool(rows)

    def _require_parent(self, sibling: str, entity_id: Optional[str], message_key: str):
        parent = getattr(self._context, sibling).find(entity_id)
        if parent is None:
            raise ReferentialIntegrityError(t(message_key), f"{sibling} {entity_id!r} not found")
        return parent

    def _check_trip_vehicle(self, data: Mapping[str, Any]):
        """The record's vehicle must exist and be the vehicle of its trip."""
        trip = self._require_parent("trips", data.get("trip_id"), "trip_missing")
        self._require_parent("vehicles", data.get("vehicle_id"), "vehicle_missing")
        if data.get("vehicle_id") != trip.vehicle_id:
            raise ReferentialIntegrityError(
                t("vehicle_mismatch"),
                f"vehicle {data.get('vehicle_id')!r} != trip vehicle {trip.vehicle_id!r}",
            )

    def _inherit_trip_vehicle(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if data.get("vehicle_id") is None and data.get("trip_id"):
            trip = self._context.trips.find(data["trip_id"])
            if trip is not None:
                data = {**data, "vehicle_id": trip.vehicle_id}
        return data
