"""
Pure validation rules, one function per entity.

No I/O and no state: safe to call before any network operation. Each
validator returns a ValidationResult; the is_valid_* wrappers return a bool.
With partial=True only the supplied keys are checked (update patches).
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Iterable, List, Mapping, Optional

from fleet_ledger.config import settings
from fleet_ledger.entities import ExpenseCategory, FuelType, PaymentMethod
from fleet_ledger.utils.mappers import (
    EXPENSE_MAPPER, TOLL_MAPPER, TOLL_RECORD_MAPPER, TRIP_MAPPER, VEHICLE_MAPPER,
    GENERATED_FIELDS, parse_number,
)

EXPENSE_CATEGORIES = frozenset(c.value for c in ExpenseCategory)
FUEL_TYPES = frozenset(f.value for f in FuelType)
PAYMENT_METHODS = frozenset(p.value for p in PaymentMethod)


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid


class _Checker:
    """Collects error strings for one payload."""

    def __init__(self, data: Mapping, partial: bool, allowed: Iterable[str]):
        self.data = data
        self.partial = partial
        self.errors: List[str] = []
        unknown = sorted(set(data) - set(allowed))
        if unknown:
            self.errors.append(f"unknown fields: {', '.join(unknown)}")

    def _skip(self, name: str) -> bool:
        return self.partial and name not in self.data

    def _missing(self, name: str) -> bool:
        value = self.data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            self.errors.append(f"{name} is required")
            return True
        return False

    def text(self, name: str, required: bool = True):
        if self._skip(name):
            return
        if required:
            if self._missing(name):
                return
        elif self.data.get(name) is None:
            return
        if not isinstance(self.data[name], str):
            self.errors.append(f"{name} must be text")

    def number(self, name: str, check: Callable[[float], bool], rule: str, integer: bool = False):
        if self._skip(name) or self._missing(name):
            return
        value = self.data[name]
        number = parse_number(value)
        if number is None:
            self.errors.append(f"{name} must be a number")
        elif integer and not number.is_integer():
            self.errors.append(f"{name} must be a whole number")
        elif not check(number):
            self.errors.append(f"{name} must be {rule}")

    def day(self, name: str, required: bool = True):
        if self._skip(name):
            return
        value = self.data.get(name)
        if value is None:
            if required:
                self.errors.append(f"{name} is required")
            return
        if not isinstance(value, date) or isinstance(value, datetime):
            self.errors.append(f"{name} must be a date (YYYY-MM-DD)")

    def choice(self, name: str, options: frozenset, required: bool = True):
        if self._skip(name):
            return
        value = self.data.get(name)
        if value is None and not required:
            return
        if self._missing(name):
            return
        if value not in options:
            self.errors.append(f"{name} must be one of: {', '.join(sorted(options))}")

    def pattern(self, name: str, regex: str):
        value = self.data.get(name)
        if isinstance(value, str) and value.strip() and not re.match(regex, value):
            self.errors.append(f"{name} has an invalid format")

    def result(self) -> ValidationResult:
        return ValidationResult(self.errors)


def _allowed(mapper) -> frozenset:
    return mapper.field_names - GENERATED_FIELDS - {"owner_id"}


def validate_vehicle(data: Mapping, partial: bool = False, today: Optional[date] = None) -> ValidationResult:
    today = today or date.today()
    max_year = today.year + 2
    c = _Checker(data, partial, _allowed(VEHICLE_MAPPER))
    c.text("plate")
    c.pattern("plate", settings.PLATE_PATTERN)
    c.text("brand")
    c.text("model")
    c.number("year", lambda y: settings.MIN_VEHICLE_YEAR <= y <= max_year,
             f"between {settings.MIN_VEHICLE_YEAR} and {max_year}", integer=True)
    for name in ("color", "capacity", "soat_insurance_company", "techno_center",
                 "soat_document_url", "techno_document_url"):
        c.text(name, required=False)
    c.choice("fuel_type", FUEL_TYPES, required=False)
    c.day("soat_expiry_date", required=False)
    c.day("techno_expiry_date", required=False)
    return c.result()


def validate_trip(data: Mapping, partial: bool = False) -> ValidationResult:
    c = _Checker(data, partial, _allowed(TRIP_MAPPER))
    c.text("vehicle_id")
    c.text("origin")
    c.text("destination")
    c.day("start_date")
    c.day("end_date", required=False)
    c.number("distance", lambda d: d > 0, "greater than 0")
    c.text("notes", required=False)
    start, end = data.get("start_date"), data.get("end_date")
    if isinstance(start, date) and isinstance(end, date) and end < start:
        c.errors.append("end_date must not be before start_date")
    return c.result()


def validate_expense(data: Mapping, partial: bool = False) -> ValidationResult:
    c = _Checker(data, partial, _allowed(EXPENSE_MAPPER))
    c.text("trip_id")
    c.text("vehicle_id")
    c.choice("category", EXPENSE_CATEGORIES)
    c.number("amount", lambda a: a > 0, "greater than 0")
    c.day("date")
    c.text("description", required=False)
    c.text("receipt_url", required=False)
    return c.result()


def validate_toll(data: Mapping, partial: bool = False) -> ValidationResult:
    c = _Checker(data, partial, _allowed(TOLL_MAPPER))
    c.text("name")
    c.text("location")
    c.text("category")
    c.text("route")
    c.number("price", lambda p: p >= 0, "zero or more")
    c.text("coordinates", required=False)
    c.text("description", required=False)
    return c.result()


def validate_toll_record(data: Mapping, partial: bool = False) -> ValidationResult:
    c = _Checker(data, partial, _allowed(TOLL_RECORD_MAPPER))
    c.text("vehicle_id")
    c.text("trip_id")
    c.text("toll_id")
    c.day("date")
    c.number("price", lambda p: p > 0, "greater than 0")
    c.choice("payment_method", PAYMENT_METHODS)
    c.text("receipt", required=False)
    c.text("notes", required=False)
    return c.result()


def is_valid_vehicle(data: Mapping) -> bool:
    return validate_vehicle(data).is_valid


def is_valid_trip(data: Mapping) -> bool:
    return validate_trip(data).is_valid


def is_valid_expense(data: Mapping) -> bool:
    return validate_expense(data).is_valid


def is_valid_toll(data: Mapping) -> bool:
    return validate_toll(data).is_valid


def is_valid_toll_record(data: Mapping) -> bool:
    return validate_toll_record(data).is_valid
