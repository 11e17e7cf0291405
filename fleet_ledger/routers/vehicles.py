# fleet_ledger/routers/vehicles.py
"""Vehicles — CRUD over the actor's fleet."""

from fastapi import APIRouter, Depends, status

from fleet_ledger.routers.deps import get_data_context
from fleet_ledger.schemas.vehicle import VehicleCreate, VehicleOut, VehicleUpdate
from fleet_ledger.services.data_context import DataContext
from fleet_ledger.utils.errors import NotFoundError
from fleet_ledger.utils.messages import t

router = APIRouter()


@router.get("/vehicles", response_model=list[VehicleOut], summary="List vehicles (newest first)")
async def list_vehicles(ctx: DataContext = Depends(get_data_context)):
    return list(ctx.vehicles.list())


@router.get("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Get one vehicle")
async def get_vehicle(vehicle_id: str, ctx: DataContext = Depends(get_data_context)):
    vehicle = ctx.get_vehicle_by_id(vehicle_id)
    if vehicle is None:
        raise NotFoundError(t("not_found", "vehicles"))
    return vehicle


@router.post("/vehicles", response_model=VehicleOut, status_code=status.HTTP_201_CREATED,
             summary="Register a vehicle")
async def create_vehicle(body: VehicleCreate, ctx: DataContext = Depends(get_data_context)):
    """The plate must be unique among the actor's vehicles."""
    return await ctx.add_vehicle(body.model_dump(exclude_none=True))


@router.patch("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Update a vehicle")
async def update_vehicle(vehicle_id: str, body: VehicleUpdate, ctx: DataContext = Depends(get_data_context)):
    await ctx.update_vehicle(vehicle_id, body.model_dump(exclude_unset=True))
    return ctx.vehicles.find(vehicle_id)


@router.delete("/vehicles/{vehicle_id}", summary="Remove a vehicle without trips")
async def delete_vehicle(vehicle_id: str, ctx: DataContext = Depends(get_data_context)):
    await ctx.delete_vehicle(vehicle_id)
    return {"status": "deleted", "id": vehicle_id}
