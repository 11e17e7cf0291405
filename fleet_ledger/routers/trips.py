# fleet_ledger/routers/trips.py
from fastapi import APIRouter, Depends, status

from fleet_ledger.routers.deps import get_data_context
from fleet_ledger.schemas.trip import TripCreate, TripOut, TripUpdate
from fleet_ledger.services.data_context import DataContext
from fleet_ledger.utils.errors import NotFoundError
from fleet_ledger.utils.messages import t

router = APIRouter()


@router.get("/trips", response_model=list[TripOut], summary="List trips (newest first)")
async def list_trips(vehicle_id: str = None, ctx: DataContext = Depends(get_data_context)):
    trips = ctx.trips.list()
    if vehicle_id:
        trips = [trip for trip in trips if trip.vehicle_id == vehicle_id]
    return list(trips)


@router.get("/trips/{trip_id}", response_model=TripOut, summary="Get one trip")
async def get_trip(trip_id: str, ctx: DataContext = Depends(get_data_context)):
    trip = ctx.get_trip_by_id(trip_id)
    if trip is None:
        raise NotFoundError(t("not_found", "trips"))
    return trip


@router.post("/trips", response_model=TripOut, status_code=status.HTTP_201_CREATED, summary="Record a trip")
async def create_trip(body: TripCreate, ctx: DataContext = Depends(get_data_context)):
    return await ctx.add_trip(body.model_dump(exclude_none=True))


@router.patch("/trips/{trip_id}", response_model=TripOut, summary="Update a trip")
async def update_trip(trip_id: str, body: TripUpdate, ctx: DataContext = Depends(get_data_context)):
    await ctx.update_trip(trip_id, body.model_dump(exclude_unset=True))
    return ctx.trips.find(trip_id)


@router.delete("/trips/{trip_id}", summary="Remove a trip without expenses or toll records")
async def delete_trip(trip_id: str, ctx: DataContext = Depends(get_data_context)):
    await ctx.delete_trip(trip_id)
    return {"status": "deleted", "id": trip_id}
