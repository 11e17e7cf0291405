# fleet_ledger/routers/session.py
"""Sign-in / sign-out lifecycle and the actor's pending notifications."""

from fastapi import APIRouter, Depends, Request

from fleet_ledger.entities import Actor
from fleet_ledger.routers.deps import get_actor, get_data_context, get_registry
from fleet_ledger.schemas.report import NotificationOut, SessionOut
from fleet_ledger.services.data_context import ContextRegistry, DataContext

router = APIRouter()


@router.post("/session", response_model=SessionOut, summary="Sign in and load every collection")
async def sign_in(request: Request, actor: Actor = Depends(get_actor),
                  registry: ContextRegistry = Depends(get_registry)):
    context = await registry.sign_in(actor, request.headers.get("user-agent"))
    loaded = {name: len(context.repository(name).list()) for name in
              ("vehicles", "trips", "expenses", "tolls", "toll_records")}
    return SessionOut(actor_id=actor.id, session_id=context.session.session_id, loaded=loaded)


@router.delete("/session", summary="Sign out and drop cached data")
async def sign_out(actor: Actor = Depends(get_actor), registry: ContextRegistry = Depends(get_registry)):
    signed_out = await registry.sign_out(actor.id)
    return {"status": "signed_out" if signed_out else "not_signed_in", "actor_id": actor.id}


@router.get("/notifications", response_model=list[NotificationOut], summary="Drain pending notifications")
async def notifications(ctx: DataContext = Depends(get_data_context)):
    return ctx.notifier.drain()
