# fleet_ledger/routers/audit.py
"""
Audit trail endpoints.

POST /functions/create-audit-log is the remote audit procedure the AuditLogger
calls first: it stamps the caller's IP address and appends the entry.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from datetime import datetime

from fleet_ledger.database import get_db
from fleet_ledger.models.audit_log import AuditLog
from fleet_ledger.routers.deps import get_data_context
from fleet_ledger.schemas.audit_log import AuditLogOut, AuditProcedureRequest
from fleet_ledger.services.data_context import DataContext
from fleet_ledger.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


@router.post("/functions/create-audit-log", summary="Append one audit entry")
def create_audit_log(body: AuditProcedureRequest, request: Request, db: Session = Depends(get_db)):
    if body.audit_data is None:
        raise HTTPException(status_code=400, detail="audit_data is required")
    data = body.audit_data
    entry = AuditLog(
        user_id=data.user_id,
        table_name=data.table_name,
        operation=data.operation,
        record_id=data.record_id,
        old_values=data.old_values,
        new_values=data.new_values,
        additional_info=data.additional_info,
        ip_address=client_ip(request),
        user_agent=data.user_agent or request.headers.get("user-agent"),
        session_id=data.session_id,
        created_at=data.created_at or datetime.utcnow(),
    )
    db.add(entry)
    db.commit()
    logger.info(f"[AuditProcedure] {entry.operation} {entry.table_name}:{entry.record_id} from {entry.ip_address}")
    return {"success": True, "id": entry.id}


@router.get("/audit-logs", response_model=list[AuditLogOut], summary="The actor's audit history (newest first)")
async def list_audit_logs(limit: int = 50, offset: int = 0, ctx: DataContext = Depends(get_data_context)):
    return await ctx.audit_logs(limit=min(max(limit, 1), 500), offset=max(offset, 0))
