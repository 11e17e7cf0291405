# fleet_ledger/routers/tolls.py
"""Toll catalogue and toll passages (toll records)."""

from fastapi import APIRouter, Depends, status

from fleet_ledger.routers.deps import get_data_context
from fleet_ledger.schemas.toll import (
    TollCreate, TollOut, TollRecordCreate, TollRecordOut, TollRecordUpdate, TollUpdate,
)
from fleet_ledger.services.data_context import DataContext
from fleet_ledger.utils.errors import NotFoundError
from fleet_ledger.utils.messages import t

router = APIRouter()


# ── Tolls ─────────────────────────────────────────────────────────────────────

@router.get("/tolls", response_model=list[TollOut], summary="List tolls")
async def list_tolls(ctx: DataContext = Depends(get_data_context)):
    return list(ctx.tolls.list())


@router.get("/tolls/{toll_id}", response_model=TollOut, summary="Get one toll")
async def get_toll(toll_id: str, ctx: DataContext = Depends(get_data_context)):
    toll = ctx.get_toll_by_id(toll_id)
    if toll is None:
        raise NotFoundError(t("not_found", "tolls"))
    return toll


@router.post("/tolls", response_model=TollOut, status_code=status.HTTP_201_CREATED, summary="Add a toll")
async def create_toll(body: TollCreate, ctx: DataContext = Depends(get_data_context)):
    return await ctx.add_toll(body.model_dump(exclude_none=True))


@router.patch("/tolls/{toll_id}", response_model=TollOut, summary="Update a toll")
async def update_toll(toll_id: str, body: TollUpdate, ctx: DataContext = Depends(get_data_context)):
    await ctx.update_toll(toll_id, body.model_dump(exclude_unset=True))
    return ctx.tolls.find(toll_id)


@router.delete("/tolls/{toll_id}", summary="Remove a toll without records")
async def delete_toll(toll_id: str, ctx: DataContext = Depends(get_data_context)):
    await ctx.delete_toll(toll_id)
    return {"status": "deleted", "id": toll_id}


# ── Toll records ──────────────────────────────────────────────────────────────

@router.get("/toll-records", response_model=list[TollRecordOut], summary="List toll passages")
async def list_toll_records(trip_id: str = None, toll_id: str = None,
                            ctx: DataContext = Depends(get_data_context)):
    records = ctx.toll_records.list()
    if trip_id:
        records = [r for r in records if r.trip_id == trip_id]
    if toll_id:
        records = [r for r in records if r.toll_id == toll_id]
    return list(records)


@router.get("/toll-records/{record_id}", response_model=TollRecordOut, summary="Get one toll passage")
async def get_toll_record(record_id: str, ctx: DataContext = Depends(get_data_context)):
    record = ctx.get_toll_record_by_id(record_id)
    if record is None:
        raise NotFoundError(t("not_found", "toll_records"))
    return record


@router.post("/toll-records", response_model=TollRecordOut, status_code=status.HTTP_201_CREATED,
             summary="Record a toll passage on a trip")
async def create_toll_record(body: TollRecordCreate, ctx: DataContext = Depends(get_data_context)):
    return await ctx.add_toll_record(body.model_dump(exclude_none=True))


@router.patch("/toll-records/{record_id}", response_model=TollRecordOut, summary="Update a toll passage")
async def update_toll_record(record_id: str, body: TollRecordUpdate, ctx: DataContext = Depends(get_data_context)):
    await ctx.update_toll_record(record_id, body.model_dump(exclude_unset=True))
    return ctx.toll_records.find(record_id)


@router.delete("/toll-records/{record_id}", summary="Remove a toll passage")
async def delete_toll_record(record_id: str, ctx: DataContext = Depends(get_data_context)):
    await ctx.delete_toll_record(record_id)
    return {"status": "deleted", "id": record_id}
