# fleet_ledger/schemas/expense.py
from pydantic import BaseModel
from datetime import date as date_type, datetime
from typing import Optional


class ExpenseCreate(BaseModel):
    trip_id: str
    vehicle_id: Optional[str] = None    # defaults to the trip's vehicle
    category: str                       # fuel | toll | maintenance | lodging | food | other
    amount: float
    date: date_type
    description: Optional[str] = None
    receipt_url: Optional[str] = None


class ExpenseUpdate(BaseModel):
    trip_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    category: Optional[str] = None
    amount: Optional[float] = None
    date: Optional[date_type] = None
    description: Optional[str] = None
    receipt_url: Optional[str] = None


class ExpenseOut(BaseModel):
    id: str
    owner_id: str
    trip_id: str
    vehicle_id: str
    category: str
    amount: float
    date: date_type
    description: str
    receipt_url: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
