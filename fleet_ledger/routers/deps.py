# fleet_ledger/routers/deps.py
"""
Request-scoped dependencies: the acting user and their DataContext.

The actor comes from the X-User-Id / X-User-Email headers set by the
authenticating gateway. A context is created (and bootstrapped) on the
actor's first request.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from fleet_ledger.entities import Actor
from fleet_ledger.services.data_context import ContextRegistry, DataContext, build_registry
from fleet_ledger.services.reports import ExpenseFilters
from fleet_ledger.utils.errors import NotAuthenticatedError
from fleet_ledger.utils.mappers import parse_date
from fleet_ledger.utils.messages import t

_registry: Optional[ContextRegistry] = None


def get_registry() -> ContextRegistry:
    global _registry
    if _registry is None:
        _registry = build_registry()
    return _registry


def get_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
) -> Actor:
    if not x_user_id or not x_user_id.strip():
        raise NotAuthenticatedError(t("not_authenticated"))
    return Actor(id=x_user_id.strip(), email=x_user_email)


async def get_data_context(
    request: Request,
    actor: Actor = Depends(get_actor),
    registry: ContextRegistry = Depends(get_registry),
) -> DataContext:
    context = registry.get(actor.id)
    if context is None:
        context = await registry.sign_in(actor, request.headers.get("user-agent"))
    return context


def get_expense_filters(
    search: str = "",
    vehicle_id: Optional[str] = None,
    trip_id: Optional[str] = None,
    category: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> ExpenseFilters:
    return ExpenseFilters(
        search_term=search,
        vehicle_id=vehicle_id,
        trip_id=trip_id,
        category=category,
        date_from=parse_date(date_from),
        date_to=parse_date(date_to),
    )
