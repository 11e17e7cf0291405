# fleet_ledger/schemas/trip.py
from pydantic import BaseModel
from datetime import date, datetime
from typing import Optional


class TripCreate(BaseModel):
    vehicle_id: str
    origin: str
    destination: str
    start_date: date
    end_date: Optional[date] = None
    distance: float                     # km
    notes: Optional[str] = None


class TripUpdate(BaseModel):
    vehicle_id: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    distance: Optional[float] = None
    notes: Optional[str] = None


class TripOut(BaseModel):
    id: str
    owner_id: str
    vehicle_id: str
    origin: str
    destination: str
    start_date: date
    end_date: Optional[date]
    distance: float
    notes: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
