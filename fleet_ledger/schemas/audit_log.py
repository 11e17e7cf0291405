# fleet_ledger/schemas/audit_log.py
from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, Optional


class AuditEntryIn(BaseModel):
    user_id: str
    table_name: str
    operation: str                      # READ | CREATE | UPDATE | DELETE
    record_id: Optional[str] = None
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    additional_info: Optional[Dict[str, Any]] = None
    user_agent: Optional[str] = None
    session_id: Optional[str] = None
    created_at: Optional[datetime] = None


class AuditProcedureRequest(BaseModel):
    audit_data: Optional[AuditEntryIn] = None


class AuditLogOut(BaseModel):
    id: str
    owner_id: str
    table_name: str
    operation: str
    record_id: Optional[str]
    old_values: Optional[Dict[str, Any]]
    new_values: Optional[Dict[str, Any]]
    additional_info: Optional[Dict[str, Any]]
    ip_address: Optional[str]
    user_agent: Optional[str]
    session_id: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
