"""
Remote relational store contract and its SQLAlchemy implementation.

The data-access layer only ever talks to the store through four calls per table:

    select(table, filters, order_by=None, limit=None, offset=0) -> list[row]
    insert(table, row) -> row
    update(table, filters, patch) -> None
    delete(table, filters) -> None

Rows are wire records (plain dicts, ISO strings for dates, decimal strings for
numeric columns). Every filter must carry the owner predicate `user_id`.
Failures raise StoreError with a PostgreSQL SQLSTATE code.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import Date, DateTime, Float, Integer, Numeric
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from fleet_ledger.models import AuditLog, Expense, Toll, TollRecord, Trip, Vehicle
from fleet_ledger.utils.errors import StoreError
from fleet_ledger.utils.logger import get_logger

logger = get_logger(__name__)

OWNER_KEY = "user_id"

TABLES = {model.__tablename__: model for model in (Vehicle, Trip, Expense, Toll, TollRecord, AuditLog)}

# SQLSTATE codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INSUFFICIENT_PRIVILEGE = "42501"
UNDEFINED_TABLE = "42P01"
UNDEFINED_COLUMN = "42703"
INVALID_TEXT = "22P02"
NO_DATA_FOUND = "P0002"


class RemoteStore:
    """Interface implemented by every store backend."""

    async def select(self, table: str, filters: Mapping[str, Any], order_by: Optional[str] = None,
                     limit: Optional[int] = None, offset: int = 0) -> List[dict]:
        raise NotImplementedError

    async def insert(self, table: str, row: Mapping[str, Any]) -> dict:
        raise NotImplementedError

    async def update(self, table: str, filters: Mapping[str, Any], patch: Mapping[str, Any]) -> None:
        raise NotImplementedError

    async def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        raise NotImplementedError


def require_owner(filters: Mapping[str, Any]):
    if not filters.get(OWNER_KEY):
        raise StoreError(INSUFFICIENT_PRIVILEGE, "ownership predicate (user_id) is required")


def _integrity_code(exc: IntegrityError) -> str:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code
    text = str(orig or exc).lower()
    if "unique" in text or "duplicate" in text:
        return UNIQUE_VIOLATION
    if "foreign key" in text:
        return FOREIGN_KEY_VIOLATION
    return "23000"


class SqlAlchemyStore(RemoteStore):
    """
    Store backed by a SQLAlchemy session factory (SessionLocal in production).
    Each call opens its own session and commits before returning.
    """

    def __init__(self, session_factory):
        self._session_factory = session_factory

    @staticmethod
    def _model(table: str):
        model = TABLES.get(table)
        if model is None:
            raise StoreError(UNDEFINED_TABLE, f"relation {table} does not exist")
        return model

    @staticmethod
    def _to_column_values(model, values: Mapping[str, Any]) -> Dict[str, Any]:
        columns = model.__table__.columns
        converted = {}
        for key, value in values.items():
            if key not in columns:
                raise StoreError(UNDEFINED_COLUMN, f"column {model.__tablename__}.{key} does not exist")
            column_type = columns[key].type
            try:
                if value is None:
                    pass
                elif isinstance(column_type, DateTime):
                    if isinstance(value, str):
                        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
                elif isinstance(column_type, Date):
                    if isinstance(value, datetime):
                        value = value.date()
                    elif isinstance(value, str):
                        value = date.fromisoformat(value[:10])
                elif isinstance(column_type, Numeric) and not isinstance(column_type, Float):
                    value = Decimal(str(value))
                elif isinstance(column_type, Integer):
                    value = int(value)
            except (ValueError, TypeError, InvalidOperation) as exc:
                raise StoreError(INVALID_TEXT, f"invalid input for {key}: {value!r}") from exc
            converted[key] = value
        return converted

    @staticmethod
    def _to_wire(obj) -> dict:
        row = {}
        for column in obj.__table__.columns:
            value = getattr(obj, column.key)
            if isinstance(value, (date, datetime)):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = str(value)
            row[column.key] = value
        return row

    def _query(self, db, model, filters: Mapping[str, Any]):
        return db.query(model).filter_by(**self._to_column_values(model, filters))

    async def select(self, table, filters, order_by=None, limit=None, offset=0):
        require_owner(filters)
        model = self._model(table)
        try:
            with self._session_factory() as db:
                query = self._query(db, model, filters)
                if order_by:
                    descending = order_by.startswith("-")
                    column = getattr(model, order_by.lstrip("-"))
                    query = query.order_by(column.desc() if descending else column.asc())
                if offset:
                    query = query.offset(offset)
                if limit is not None:
                    query = query.limit(limit)
                return [self._to_wire(obj) for obj in query.all()]
        except SQLAlchemyError as exc:
            logger.error(f"[Store] select {table} failed: {exc}")
            raise StoreError("XX000", str(exc)) from exc

    async def insert(self, table, row):
        require_owner(row)
        model = self._model(table)
        obj = model(**self._to_column_values(model, row))
        try:
            with self._session_factory() as db:
                db.add(obj)
                db.commit()
                db.refresh(obj)
                return self._to_wire(obj)
        except IntegrityError as exc:
            logger.warning(f"[Store] insert into {table} rejected: {exc.orig}")
            raise StoreError(_integrity_code(exc), str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            logger.error(f"[Store] insert into {table} failed: {exc}")
            raise StoreError("XX000", str(exc)) from exc

    async def update(self, table, filters, patch):
        require_owner(filters)
        model = self._model(table)
        values = self._to_column_values(model, patch)
        if "updated_at" in model.__table__.columns:
            values["updated_at"] = datetime.utcnow()
        try:
            with self._session_factory() as db:
                matched = self._query(db, model, filters).update(values, synchronize_session=False)
                if not matched:
                    db.rollback()
                    raise StoreError(NO_DATA_FOUND, f"no {table} row matched {dict(filters)}")
                db.commit()
        except IntegrityError as exc:
            logger.warning(f"[Store] update of {table} rejected: {exc.orig}")
            raise StoreError(_integrity_code(exc), str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            logger.error(f"[Store] update of {table} failed: {exc}")
            raise StoreError("XX000", str(exc)) from exc

    async def delete(self, table, filters):
        require_owner(filters)
        model = self._model(table)
        try:
            with self._session_factory() as db:
                matched = self._query(db, model, filters).delete(synchronize_session=False)
                if not matched:
                    db.rollback()
                    raise StoreError(NO_DATA_FOUND, f"no {table} row matched {dict(filters)}")
                db.commit()
        except IntegrityError as exc:
            logger.warning(f"[Store] delete from {table} rejected: {exc.orig}")
            raise StoreError(_integrity_code(exc), str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            logger.error(f"[Store] delete from {table} failed: {exc}")
            raise StoreError("XX000", str(exc)) from exc
