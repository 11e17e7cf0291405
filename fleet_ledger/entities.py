"""
Domain entities held in the repositories' in-memory collections.

Entities are frozen dataclasses: repositories replace them (dataclasses.replace)
instead of mutating them, so a published collection never changes under a subscriber.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


class ExpenseCategory(str, Enum):
    FUEL = "fuel"
    TOLL = "toll"
    MAINTENANCE = "maintenance"
    LODGING = "lodging"
    FOOD = "food"
    OTHER = "other"


class FuelType(str, Enum):
    GASOLINE = "gasolina"
    DIESEL = "diesel"
    GAS = "gas"
    ELECTRIC = "electrico"
    HYBRID = "hibrido"


class PaymentMethod(str, Enum):
    CASH = "cash"
    ELECTRONIC = "electronic"
    TAG = "tag"
    OTHER = "other"


class AuditOperation(str, Enum):
    READ = "READ"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class Actor:
    """The authenticated user owning every record in scope."""
    id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class Vehicle:
    id: str
    owner_id: str
    plate: str
    brand: str
    model: str
    year: int
    color: Optional[str] = None
    fuel_type: Optional[str] = None
    capacity: Optional[str] = None
    # Compliance documents (SOAT insurance + technical review)
    soat_expiry_date: Optional[date] = None
    techno_expiry_date: Optional[date] = None
    soat_insurance_company: Optional[str] = None
    techno_center: Optional[str] = None
    soat_document_url: Optional[str] = None
    techno_document_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Trip:
    id: str
    owner_id: str
    vehicle_id: str
    origin: str
    destination: str
    start_date: date
    distance: float
    end_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Expense:
    id: str
    owner_id: str
    trip_id: str
    vehicle_id: str
    category: str
    amount: float
    date: date
    description: str = ""
    receipt_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Toll:
    id: str
    owner_id: str
    name: str
    location: str
    category: str
    route: str
    price: float
    coordinates: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class TollRecord:
    id: str
    owner_id: str
    vehicle_id: str
    trip_id: str
    toll_id: str
    date: date
    price: float
    payment_method: str = PaymentMethod.CASH.value
    receipt: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AuditLogEntry:
    id: str
    owner_id: str
    table_name: str
    operation: str
    record_id: Optional[str] = None
    old_values: Optional[dict] = None
    new_values: Optional[dict] = None
    additional_info: Optional[dict] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    session_id: Optional[str] = None
    created_at: Optional[datetime] = None
