"""Vehicles: plate unique per owner; cannot be deleted while trips reference them."""

from fleet_ledger.services.base_repository import EntityRepository
from fleet_ledger.utils.errors import DependencyExistsError, UniquenessViolation
from fleet_ledger.utils.logger import get_logger
from fleet_ledger.utils.mappers import VEHICLE_MAPPER, normalize_plate
from fleet_ledger.utils.messages import t
from fleet_ledger.utils.validators import validate_vehicle

logger = get_logger(__name__)


class VehicleRepository(EntityRepository):
    table_name = "vehicles"
    noun = "vehicle"
    mapper = VEHICLE_MAPPER
    validator = validate_vehicle
    audited_fields = ("plate", "brand", "model", "year")

    def find_by_plate(self, plate: str):
        """Local lookup by normalised plate."""
        key = normalize_plate(plate or "")
        return next((v for v in self.list() if v.plate == key), None)

    def check_unique(self, data, current, changed):
        if current is not None and "plate" not in changed:
            return
        existing = self.find_by_plate(data.get("plate"))
        if existing is not None and (current is None or existing.id != current.id):
            raise UniquenessViolation(t("duplicate_plate", plate=existing.plate),
                                      f"plate {existing.plate} already used by {existing.id}")

    async def check_dependents(self, entity):
        if await self._has_dependents("trips", "vehicle_id", entity.id):
            logger.info(f"[vehicles] delete of {entity.id} blocked: trips reference it")
            raise DependencyExistsError(t("vehicle_has_trips"))
