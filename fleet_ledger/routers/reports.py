# fleet_ledger/routers/reports.py
"""Expense / toll reports and spreadsheet downloads."""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
import io

from fleet_ledger.routers.deps import get_data_context, get_expense_filters
from fleet_ledger.schemas.expense import ExpenseOut
from fleet_ledger.schemas.report import ExpenseReportOut, TollSpendingOut
from fleet_ledger.services.data_context import COLLECTIONS, DataContext
from fleet_ledger.services.export_service import export_filename
from fleet_ledger.services.reports import ExpenseFilters
from fleet_ledger.utils.errors import NotFoundError

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/reports/expenses", response_model=ExpenseReportOut, summary="Filtered expenses with totals")
async def expense_report(filters: ExpenseFilters = Depends(get_expense_filters),
                         ctx: DataContext = Depends(get_data_context)):
    return ctx.expense_report(filters)


@router.get("/reports/expenses/by-category", response_model=dict[str, list[ExpenseOut]],
            summary="Filtered expenses grouped by category")
async def expenses_by_category(filters: ExpenseFilters = Depends(get_expense_filters),
                               ctx: DataContext = Depends(get_data_context)):
    return {category: list(items) for category, items in ctx.expenses_by_category(filters).items()}


@router.get("/reports/expenses/monthly", response_model=dict[str, float], summary="Expense totals per month")
async def monthly_totals(filters: ExpenseFilters = Depends(get_expense_filters),
                         ctx: DataContext = Depends(get_data_context)):
    return ctx.monthly_expense_totals(filters)


@router.get("/reports/tolls", response_model=list[TollSpendingOut], summary="Spending per toll")
async def toll_spending(ctx: DataContext = Depends(get_data_context)):
    return ctx.toll_spending_by_toll()


@router.get("/exports/{collection}", summary="Download a collection as .xlsx")
async def export_collection(collection: str, ctx: DataContext = Depends(get_data_context)):
    name = collection.replace("-", "_")
    if name not in COLLECTIONS:
        raise NotFoundError(f"Unknown collection: {collection}")
    payload = ctx.export_bytes(ctx.repository(name).list())
    filename = export_filename(name)
    return StreamingResponse(
        io.BytesIO(payload),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
