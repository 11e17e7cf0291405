"""Expenses table. vehicle_id always mirrors the vehicle of the referenced trip."""

from sqlalchemy import Column, String, Date, Numeric, Text, ForeignKey
from fleet_ledger.database import Base
from fleet_ledger.models._columns import id_column, owner_column, created_at_column, updated_at_column


class Expense(Base):
    __tablename__ = "expenses"

    id = id_column()
    user_id = owner_column()
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    category = Column(String(20), nullable=False, index=True)  # fuel | toll | maintenance | lodging | food | other
    amount = Column(Numeric(14, 2), nullable=False)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    receipt_url = Column(Text)
    created_at = created_at_column()
    updated_at = updated_at_column()

    def __repr__(self):
        return f"<Expense {self.id} {self.category} amount={self.amount}>"
