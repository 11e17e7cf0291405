"""
Audit trail table — append-only record of every CREATE/UPDATE/DELETE and bulk READ.
Written by the audit procedure endpoint or, as a fallback, by a direct insert.
The application never updates or deletes rows here.
"""

from sqlalchemy import Column, String, JSON, Text
from fleet_ledger.database import Base
from fleet_ledger.models._columns import id_column, created_at_column


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = id_column()
    user_id = Column(String(36), nullable=False, index=True)
    table_name = Column(String(50), nullable=False, index=True)
    operation = Column(String(10), nullable=False)   # READ | CREATE | UPDATE | DELETE
    record_id = Column(String(36))
    old_values = Column(JSON)
    new_values = Column(JSON)
    additional_info = Column(JSON)
    ip_address = Column(String(64))
    user_agent = Column(Text)
    session_id = Column(String(36), index=True)
    created_at = created_at_column()

    def __repr__(self):
        return f"<AuditLog {self.id} {self.operation} {self.table_name}:{self.record_id}>"
