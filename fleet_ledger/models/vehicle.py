"""
Vehicles table.
Plates are stored normalised (upper-case, no spaces) and are unique per owner.
Compliance documents (SOAT insurance and technical review) are kept as metadata only.
"""

from sqlalchemy import Column, Integer, String, Date, Text, UniqueConstraint
from fleet_ledger.database import Base
from fleet_ledger.models._columns import id_column, owner_column, created_at_column, updated_at_column


class Vehicle(Base):
    __tablename__ = "vehicles"
    __table_args__ = (UniqueConstraint("user_id", "plate", name="uq_vehicles_owner_plate"),)

    id = id_column()
    user_id = owner_column()
    plate = Column(String(20), nullable=False, index=True)
    brand = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    color = Column(String(50))
    fuel_type = Column(String(20))           # gasolina | diesel | gas | electrico | hibrido
    capacity = Column(String(100))
    soat_expiry_date = Column(Date)
    techno_expiry_date = Column(Date)
    soat_insurance_company = Column(String(200))
    techno_center = Column(String(200))
    soat_document_url = Column(Text)
    techno_document_url = Column(Text)
    created_at = created_at_column()
    updated_at = updated_at_column()

    def __repr__(self):
        return f"<Vehicle {self.plate} {self.brand} {self.model} ({self.year})>"
