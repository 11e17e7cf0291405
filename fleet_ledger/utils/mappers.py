"""
Translation between wire records and domain entities.

Wire records are the flat rows exchanged with the store: snake_case columns,
`user_id` for the owner, `*_id` foreign keys, ISO strings for dates and
timestamps, and numbers that may arrive string-encoded. Each entity has one
explicit field table below; anything not listed there is never read or sent.
"""

import math
import re
from dataclasses import dataclass, fields as dataclass_fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from fleet_ledger.entities import AuditLogEntry, Expense, Toll, TollRecord, Trip, Vehicle
from fleet_ledger.utils.errors import MappingError
from fleet_ledger.utils.logger import get_logger

logger = get_logger(__name__)

# Field kinds
TEXT = "text"                    # required string, "" when missing
OPTIONAL_TEXT = "optional_text"  # None when missing or blank
PLATE = "plate"                  # TEXT, upper-cased without spaces
CHOICE = "choice"                # TEXT, lower-cased enum value
OPTIONAL_CHOICE = "optional_choice"  # CHOICE, None when missing or blank
INTEGER = "integer"
NUMBER = "number"
MONEY = "money"                  # NUMBER, but a bad value is worth a warning
DATE = "date"                    # required; unparsable means a malformed row
OPTIONAL_DATE = "optional_date"
TIMESTAMP = "timestamp"          # required
REFERENCE = "reference"          # required id
JSON = "json"

GENERATED_FIELDS = frozenset({"id", "created_at", "updated_at"})


@dataclass(frozen=True)
class FieldSpec:
    name: str    # domain attribute
    wire: str    # wire column
    kind: str


# ── Parsing helpers ────────────────────────────────────────────────────────

def parse_number(value: Any) -> Optional[float]:
    """Return a finite float, or None when `value` is not a number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            stamp = parse_timestamp(value)
            return stamp.date() if stamp else None
    return None


def normalize_plate(value: str) -> str:
    return re.sub(r"\s+", "", value).upper()


def normalize_key(value: str) -> str:
    """Comparison key for case/whitespace-insensitive uniqueness checks."""
    return " ".join((value or "").split()).lower()


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# ── Mapper ─────────────────────────────────────────────────────────────────

class EntityMapper:
    def __init__(self, entity_cls, table_name: str, specs: Sequence[FieldSpec]):
        self.entity_cls = entity_cls
        self.table_name = table_name
        self.specs = tuple(specs)
        self._by_name = {spec.name: spec for spec in self.specs}

    @property
    def field_names(self) -> frozenset:
        return frozenset(self._by_name)

    def wire_key(self, name: str) -> str:
        return self._by_name[name].wire

    # Domain → wire ----------------------------------------------------------

    def to_wire(self, partial) -> dict:
        """Only keys present in `partial` are emitted; generated fields never are."""
        if is_dataclass(partial):
            partial = {f.name: getattr(partial, f.name) for f in dataclass_fields(partial)}
        record = {}
        for name, value in partial.items():
            spec = self._by_name.get(name)
            if spec is None or name in GENERATED_FIELDS:
                continue
            record[spec.wire] = self._encode(spec, _plain(value))
        return record

    @staticmethod
    def _encode(spec: FieldSpec, value: Any) -> Any:
        kind = spec.kind
        if value is None:
            # TEXT columns are NOT NULL
            return "" if kind == TEXT else None
        if kind in (TEXT, CHOICE, REFERENCE):
            return str(value).strip()
        if kind == PLATE:
            return normalize_plate(str(value))
        if kind == OPTIONAL_TEXT:
            return str(value).strip() or None
        if kind == OPTIONAL_CHOICE:
            return str(value).strip().lower() or None
        if kind == INTEGER:
            number = parse_number(value)
            return int(number) if number is not None else value
        if kind in (NUMBER, MONEY):
            number = parse_number(value)
            return number if number is not None else value
        if kind in (DATE, OPTIONAL_DATE):
            parsed = parse_date(value)
            return parsed.isoformat() if parsed else (str(value).strip() or None)
        if kind == TIMESTAMP:
            parsed = parse_timestamp(value)
            return parsed.isoformat() if parsed else value
        return value

    # Wire → domain ----------------------------------------------------------

    def from_wire(self, record: Mapping):
        """Build an entity; raises MappingError when the row is structurally unusable."""
        if not isinstance(record, Mapping):
            raise MappingError(f"{self.table_name}: expected a mapping, got {type(record).__name__}")
        values = {spec.name: self._decode(spec, record) for spec in self.specs}
        return self.entity_cls(**values)

    def _decode(self, spec: FieldSpec, record: Mapping) -> Any:
        value = record.get(spec.wire)
        kind = spec.kind

        if kind == REFERENCE:
            if value is None or str(value).strip() == "":
                raise MappingError(f"{self.table_name}: missing {spec.wire}")
            return str(value)
        if kind in (TEXT, CHOICE):
            return "" if value is None else str(value)
        if kind == PLATE:
            return "" if value is None else normalize_plate(str(value))
        if kind in (OPTIONAL_TEXT, OPTIONAL_CHOICE):
            return None if value is None or str(value) == "" else str(value)
        if kind in (INTEGER, NUMBER, MONEY):
            number = parse_number(value)
            if number is None:
                if kind == MONEY:
                    logger.warning(
                        f"[Mapper] {self.table_name}.{spec.wire}={value!r} is not a number "
                        f"(id={record.get('id')}) — defaulted to 0"
                    )
                number = 0.0
            return int(number) if kind == INTEGER else number
        if kind == DATE:
            parsed = parse_date(value)
            if parsed is None:
                raise MappingError(f"{self.table_name}: invalid {spec.wire} {value!r}")
            return parsed
        if kind == OPTIONAL_DATE:
            if value is None or value == "":
                return None
            parsed = parse_date(value)
            if parsed is None:
                logger.warning(f"[Mapper] {self.table_name}.{spec.wire}={value!r} is not a date — ignored")
            return parsed
        if kind == TIMESTAMP:
            parsed = parse_timestamp(value)
            if parsed is None:
                raise MappingError(f"{self.table_name}: invalid {spec.wire} {value!r}")
            return parsed
        if kind == JSON:
            return dict(value) if isinstance(value, Mapping) else None
        return value

    # Form input → domain ----------------------------------------------------

    def normalize(self, fields: Mapping) -> dict:
        """
        Best-effort coercion of user input before validation: trims text,
        upper-cases plates, turns numeric strings into numbers and ISO strings
        into dates. Values that cannot be coerced are left for the validator.
        """
        result = {}
        for name, value in fields.items():
            value = _plain(value)
            spec = self._by_name.get(name)
            if spec is None:
                result[name] = value
                continue
            kind = spec.kind
            if value is None:
                # clearing a TEXT field stores "", the value from_wire reads back
                result[name] = "" if kind == TEXT else None
                continue
            if kind in (TEXT, REFERENCE) and isinstance(value, str):
                value = value.strip()
            elif kind == PLATE and isinstance(value, str):
                value = normalize_plate(value)
            elif kind == CHOICE and isinstance(value, str):
                value = value.strip().lower()
            elif kind == OPTIONAL_CHOICE and isinstance(value, str):
                value = value.strip().lower() or None
            elif kind == OPTIONAL_TEXT and isinstance(value, str):
                value = value.strip() or None
            elif kind == INTEGER:
                number = parse_number(value)
                if number is not None and number.is_integer():
                    value = int(number)
            elif kind in (NUMBER, MONEY):
                number = parse_number(value)
                if number is not None:
                    value = number
            elif kind in (DATE, OPTIONAL_DATE):
                if kind == OPTIONAL_DATE and value == "":
                    value = None
                else:
                    value = parse_date(value) or value
            result[name] = value
        return result


def map_rows(mapper: EntityMapper, rows: Optional[Iterable]) -> List:
    """Map a batch fail-closed: malformed rows are dropped with a diagnostic."""
    entities = []
    for index, row in enumerate(rows or []):
        try:
            entities.append(mapper.from_wire(row))
        except MappingError as exc:
            row_id = row.get("id") if isinstance(row, Mapping) else None
            logger.warning(f"[Mapper] Dropped {mapper.table_name} row #{index} (id={row_id}): {exc}")
    return entities


def _common(*specs: FieldSpec) -> List[FieldSpec]:
    return [
        FieldSpec("id", "id", REFERENCE),
        FieldSpec("owner_id", "user_id", REFERENCE),
        *specs,
        FieldSpec("created_at", "created_at", TIMESTAMP),
        FieldSpec("updated_at", "updated_at", TIMESTAMP),
    ]


VEHICLE_MAPPER = EntityMapper(Vehicle, "vehicles", _common(
    FieldSpec("plate", "plate", PLATE),
    FieldSpec("brand", "brand", TEXT),
    FieldSpec("model", "model", TEXT),
    FieldSpec("year", "year", INTEGER),
    FieldSpec("color", "color", OPTIONAL_TEXT),
    FieldSpec("fuel_type", "fuel_type", OPTIONAL_CHOICE),
    FieldSpec("capacity", "capacity", OPTIONAL_TEXT),
    FieldSpec("soat_expiry_date", "soat_expiry_date", OPTIONAL_DATE),
    FieldSpec("techno_expiry_date", "techno_expiry_date", OPTIONAL_DATE),
    FieldSpec("soat_insurance_company", "soat_insurance_company", OPTIONAL_TEXT),
    FieldSpec("techno_center", "techno_center", OPTIONAL_TEXT),
    FieldSpec("soat_document_url", "soat_document_url", OPTIONAL_TEXT),
    FieldSpec("techno_document_url", "techno_document_url", OPTIONAL_TEXT),
))

TRIP_MAPPER = EntityMapper(Trip, "trips", _common(
    FieldSpec("vehicle_id", "vehicle_id", REFERENCE),
    FieldSpec("origin", "origin", TEXT),
    FieldSpec("destination", "destination", TEXT),
    FieldSpec("start_date", "start_date", DATE),
    FieldSpec("end_date", "end_date", OPTIONAL_DATE),
    FieldSpec("distance", "distance", NUMBER),
    FieldSpec("notes", "notes", OPTIONAL_TEXT),
))

EXPENSE_MAPPER = EntityMapper(Expense, "expenses", _common(
    FieldSpec("trip_id", "trip_id", REFERENCE),
    FieldSpec("vehicle_id", "vehicle_id", REFERENCE),
    FieldSpec("category", "category", CHOICE),
    FieldSpec("amount", "amount", MONEY),
    FieldSpec("date", "date", DATE),
    FieldSpec("description", "description", TEXT),
    FieldSpec("receipt_url", "receipt_url", OPTIONAL_TEXT),
))

TOLL_MAPPER = EntityMapper(Toll, "tolls", _common(
    FieldSpec("name", "name", TEXT),
    FieldSpec("location", "location", TEXT),
    FieldSpec("category", "category", TEXT),
    FieldSpec("route", "route", TEXT),
    FieldSpec("price", "price", MONEY),
    FieldSpec("coordinates", "coordinates", OPTIONAL_TEXT),
    FieldSpec("description", "description", OPTIONAL_TEXT),
))

TOLL_RECORD_MAPPER = EntityMapper(TollRecord, "toll_records", _common(
    FieldSpec("vehicle_id", "vehicle_id", REFERENCE),
    FieldSpec("trip_id", "trip_id", REFERENCE),
    FieldSpec("toll_id", "toll_id", REFERENCE),
    FieldSpec("date", "date", DATE),
    FieldSpec("price", "price", MONEY),
    FieldSpec("payment_method", "payment_method", CHOICE),
    FieldSpec("receipt", "receipt", OPTIONAL_TEXT),
    FieldSpec("notes", "notes", OPTIONAL_TEXT),
))

AUDIT_LOG_MAPPER = EntityMapper(AuditLogEntry, "audit_logs", [
    FieldSpec("id", "id", REFERENCE),
    FieldSpec("owner_id", "user_id", REFERENCE),
    FieldSpec("table_name", "table_name", TEXT),
    FieldSpec("operation", "operation", TEXT),
    FieldSpec("record_id", "record_id", OPTIONAL_TEXT),
    FieldSpec("old_values", "old_values", JSON),
    FieldSpec("new_values", "new_values", JSON),
    FieldSpec("additional_info", "additional_info", JSON),
    FieldSpec("ip_address", "ip_address", OPTIONAL_TEXT),
    FieldSpec("user_agent", "user_agent", OPTIONAL_TEXT),
    FieldSpec("session_id", "session_id", OPTIONAL_TEXT),
    FieldSpec("created_at", "created_at", TIMESTAMP),
])
