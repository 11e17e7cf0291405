# fleet_ledger/schemas/toll.py
from pydantic import BaseModel
from datetime import date as date_type, datetime
from typing import Optional


class TollCreate(BaseModel):
    name: str
    location: str
    category: str
    route: str
    price: float
    coordinates: Optional[str] = None
    description: Optional[str] = None


class TollUpdate(BaseModel):
    name: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    route: Optional[str] = None
    price: Optional[float] = None
    coordinates: Optional[str] = None
    description: Optional[str] = None


class TollOut(BaseModel):
    id: str
    owner_id: str
    name: str
    location: str
    category: str
    route: str
    price: float
    coordinates: Optional[str]
    description: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class TollRecordCreate(BaseModel):
    trip_id: str
    toll_id: str
    vehicle_id: Optional[str] = None    # defaults to the trip's vehicle
    date: date_type
    price: float
    payment_method: str = "cash"        # cash | electronic | tag | other
    receipt: Optional[str] = None
    notes: Optional[str] = None


class TollRecordUpdate(BaseModel):
    trip_id: Optional[str] = None
    toll_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    date: Optional[date_type] = None
    price: Optional[float] = None
    payment_method: Optional[str] = None
    receipt: Optional[str] = None
    notes: Optional[str] = None


class TollRecordOut(BaseModel):
    id: str
    owner_id: str
    vehicle_id: str
    trip_id: str
    toll_id: str
    date: date_type
    price: float
    payment_method: str
    receipt: Optional[str]
    notes: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
