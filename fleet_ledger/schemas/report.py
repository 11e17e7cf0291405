# fleet_ledger/schemas/report.py
from pydantic import BaseModel
from datetime import datetime
from typing import Dict, List

from fleet_ledger.schemas.expense import ExpenseOut


class ExpenseReportOut(BaseModel):
    expenses: List[ExpenseOut]
    total: float
    by_category: Dict[str, float]

    class Config:
        from_attributes = True


class TollSpendingOut(BaseModel):
    toll_id: str
    name: str
    count: int
    total: float


class SessionOut(BaseModel):
    actor_id: str
    session_id: str
    loaded: Dict[str, int]


class NotificationOut(BaseModel):
    level: str
    message: str
    created_at: datetime

    class Config:
        from_attributes = True
