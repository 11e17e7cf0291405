# fleet_ledger/routers/health.py
"""Liveness: database round-trip, audit procedure configuration, open sessions."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from fleet_ledger.database import get_db
from fleet_ledger.config import settings
from fleet_ledger.routers.deps import get_registry
from fleet_ledger.services.data_context import ContextRegistry
from datetime import datetime
import time

router = APIRouter()


@router.get("/health", summary="Database and audit pipeline status")
def health_check(db: Session = Depends(get_db), registry: ContextRegistry = Depends(get_registry)):
    started = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
        database = {"status": "ok", "latency_ms": round((time.perf_counter() - started) * 1000, 2)}
    except SQLAlchemyError as e:
        database = {"status": "error", "message": str(e)}

    return {
        "status": "ok" if database["status"] == "ok" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "database": database,
        # without a procedure URL every entry takes the direct-insert path
        "audit_procedure": "configured" if settings.AUDIT_FUNCTION_URL else "not_configured",
        "active_sessions": len(registry.active_actors()),
    }
