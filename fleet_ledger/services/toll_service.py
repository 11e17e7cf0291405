"""Tolls: the toll catalogue. (name, location) is unique per owner, ignoring case and spacing."""

from fleet_ledger.services.base_repository import EntityRepository
from fleet_ledger.utils.errors import DependencyExistsError, UniquenessViolation
from fleet_ledger.utils.logger import get_logger
from fleet_ledger.utils.mappers import TOLL_MAPPER, normalize_key
from fleet_ledger.utils.messages import t
from fleet_ledger.utils.validators import validate_toll

logger = get_logger(__name__)


class TollRepository(EntityRepository):
    table_name = "tolls"
    noun = "toll"
    mapper = TOLL_MAPPER
    validator = validate_toll
    audited_fields = ("name", "location", "category", "route", "price")

    def check_unique(self, data, current, changed):
        if current is not None and not changed & {"name", "location"}:
            return
        key = (normalize_key(data.get("name")), normalize_key(data.get("location")))
        for toll in self.list():
            if current is not None and toll.id == current.id:
                continue
            if (normalize_key(toll.name), normalize_key(toll.location)) == key:
                raise UniquenessViolation(t("duplicate_toll"), f"toll {toll.id} has the same name and location")

    async def check_dependents(self, entity):
        if await self._has_dependents("toll_records", "toll_id", entity.id):
            logger.info(f"[tolls] delete of {entity.id} blocked: toll records reference it")
            raise DependencyExistsError(t("toll_has_records"))
