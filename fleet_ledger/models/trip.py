"""Trips table. Each trip belongs to one vehicle of the same owner."""

from sqlalchemy import Column, String, Date, Numeric, Text, ForeignKey
from fleet_ledger.database import Base
from fleet_ledger.models._columns import id_column, owner_column, created_at_column, updated_at_column


class Trip(Base):
    __tablename__ = "trips"

    id = id_column()
    user_id = owner_column()
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    origin = Column(String(200), nullable=False)
    destination = Column(String(200), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    distance = Column(Numeric(10, 2), nullable=False)   # km
    notes = Column(Text)
    created_at = created_at_column()
    updated_at = updated_at_column()

    def __repr__(self):
        return f"<Trip {self.id} {self.origin} → {self.destination}>"
