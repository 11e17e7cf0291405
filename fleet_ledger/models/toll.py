"""
Toll catalogue and toll passage records.
A toll's (name, location) pair is unique per owner; the repository compares it
case- and whitespace-insensitively before the insert reaches this table.
"""

from sqlalchemy import Column, String, Date, Numeric, Text, ForeignKey
from fleet_ledger.database import Base
from fleet_ledger.models._columns import id_column, owner_column, created_at_column, updated_at_column


class Toll(Base):
    __tablename__ = "tolls"

    id = id_column()
    user_id = owner_column()
    name = Column(String(200), nullable=False)
    location = Column(String(200), nullable=False)
    category = Column(String(50), nullable=False)
    route = Column(String(200), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    coordinates = Column(String(100))
    description = Column(Text)
    created_at = created_at_column()
    updated_at = updated_at_column()

    def __repr__(self):
        return f"<Toll {self.name} @ {self.location}>"


class TollRecord(Base):
    __tablename__ = "toll_records"

    id = id_column()
    user_id = owner_column()
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    toll_id = Column(String(36), ForeignKey("tolls.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(20), nullable=False)   # cash | electronic | tag | other
    receipt = Column(Text)
    notes = Column(Text)
    created_at = created_at_column()
    updated_at = updated_at_column()

    def __repr__(self):
        return f"<TollRecord {self.id} toll={self.toll_id} price={self.price}>"
