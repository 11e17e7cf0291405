# fleet_ledger/routers/expenses.py
from fastapi import APIRouter, Depends, status

from fleet_ledger.routers.deps import get_data_context, get_expense_filters
from fleet_ledger.schemas.expense import ExpenseCreate, ExpenseOut, ExpenseUpdate
from fleet_ledger.services.data_context import DataContext
from fleet_ledger.services.reports import ExpenseFilters
from fleet_ledger.utils.errors import NotFoundError
from fleet_ledger.utils.messages import t

router = APIRouter()


@router.get("/expenses", response_model=list[ExpenseOut], summary="List expenses, optionally filtered")
async def list_expenses(filters: ExpenseFilters = Depends(get_expense_filters),
                        ctx: DataContext = Depends(get_data_context)):
    return list(ctx.filtered_expenses(filters))


@router.get("/expenses/{expense_id}", response_model=ExpenseOut, summary="Get one expense")
async def get_expense(expense_id: str, ctx: DataContext = Depends(get_data_context)):
    expense = ctx.get_expense_by_id(expense_id)
    if expense is None:
        raise NotFoundError(t("not_found", "expenses"))
    return expense


@router.post("/expenses", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED,
             summary="Record an expense on a trip")
async def create_expense(body: ExpenseCreate, ctx: DataContext = Depends(get_data_context)):
    """vehicle_id may be omitted: the trip's vehicle is used."""
    return await ctx.add_expense(body.model_dump(exclude_none=True))


@router.patch("/expenses/{expense_id}", response_model=ExpenseOut, summary="Update an expense")
async def update_expense(expense_id: str, body: ExpenseUpdate, ctx: DataContext = Depends(get_data_context)):
    await ctx.update_expense(expense_id, body.model_dump(exclude_unset=True))
    return ctx.expenses.find(expense_id)


@router.delete("/expenses/{expense_id}", summary="Remove an expense")
async def delete_expense(expense_id: str, ctx: DataContext = Depends(get_data_context)):
    await ctx.delete_expense(expense_id)
    return {"status": "deleted", "id": expense_id}
