"""
Trips belong to a vehicle of the same owner.

A trip cannot be deleted, nor moved to another vehicle, while expenses or toll
records reference it (they carry the trip's vehicle).
"""

from fleet_ledger.services.base_repository import EntityRepository
from fleet_ledger.utils.errors import DependencyExistsError, ReferentialIntegrityError, ValidationError
from fleet_ledger.utils.logger import get_logger
from fleet_ledger.utils.mappers import TRIP_MAPPER
from fleet_ledger.utils.messages import t
from fleet_ledger.utils.validators import validate_trip

logger = get_logger(__name__)


class TripRepository(EntityRepository):
    table_name = "trips"
    noun = "trip"
    mapper = TRIP_MAPPER
    validator = validate_trip
    audited_fields = ("vehicle_id", "origin", "destination", "start_date", "distance")

    def check_merged(self, merged):
        dates = {"start_date": merged.get("start_date"), "end_date": merged.get("end_date")}
        result = validate_trip(dates, partial=True)
        if not result.is_valid:
            raise ValidationError(
                t("invalid_data", self.table_name, details="; ".join(result.errors)), result.errors)

    async def check_references(self, data, current, changed):
        if current is not None and "vehicle_id" not in changed:
            return
        self._require_parent("vehicles", data.get("vehicle_id"), "vehicle_missing")
        if current is not None and data.get("vehicle_id") != current.vehicle_id:
            if await self._is_referenced(current.id):
                raise ReferentialIntegrityError(
                    t("trip_vehicle_locked"), f"trip {current.id} has expenses or toll records")

    async def check_dependents(self, entity):
        if await self._is_referenced(entity.id):
            logger.info(f"[trips] delete of {entity.id} blocked: expenses or toll records reference it")
            raise DependencyExistsError(t("trip_has_dependents"))

    async def _is_referenced(self, trip_id: str) -> bool:
        return (await self._has_dependents("expenses", "trip_id", trip_id)
                or await self._has_dependents("toll_records", "trip_id", trip_id))
