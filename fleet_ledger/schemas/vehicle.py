# fleet_ledger/schemas/vehicle.py
from pydantic import BaseModel
from datetime import date, datetime
from typing import Optional


class VehicleCreate(BaseModel):
    plate: str
    brand: str
    model: str
    year: int
    color: Optional[str] = None
    fuel_type: Optional[str] = None     # gasolina | diesel | gas | electrico | hibrido
    capacity: Optional[str] = None
    soat_expiry_date: Optional[date] = None
    techno_expiry_date: Optional[date] = None
    soat_insurance_company: Optional[str] = None
    techno_center: Optional[str] = None
    soat_document_url: Optional[str] = None
    techno_document_url: Optional[str] = None


class VehicleUpdate(BaseModel):
    plate: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    color: Optional[str] = None
    fuel_type: Optional[str] = None
    capacity: Optional[str] = None
    soat_expiry_date: Optional[date] = None
    techno_expiry_date: Optional[date] = None
    soat_insurance_company: Optional[str] = None
    techno_center: Optional[str] = None
    soat_document_url: Optional[str] = None
    techno_document_url: Optional[str] = None


class VehicleOut(BaseModel):
    id: str
    owner_id: str
    plate: str
    brand: str
    model: str
    year: int
    color: Optional[str]
    fuel_type: Optional[str]
    capacity: Optional[str]
    soat_expiry_date: Optional[date]
    techno_expiry_date: Optional[date]
    soat_insurance_company: Optional[str]
    techno_center: Optional[str]
    soat_document_url: Optional[str]
    techno_document_url: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
