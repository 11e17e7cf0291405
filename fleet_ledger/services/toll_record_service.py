"""Toll records: a toll passage on a trip, paid with the trip's vehicle."""

from fleet_ledger.services.base_repository import EntityRepository
from fleet_ledger.utils.mappers import TOLL_RECORD_MAPPER
from fleet_ledger.utils.validators import validate_toll_record


class TollRecordRepository(EntityRepository):
    table_name = "toll_records"
    noun = "toll_record"
    mapper = TOLL_RECORD_MAPPER
    validator = validate_toll_record
    audited_fields = ("vehicle_id", "trip_id", "toll_id", "price", "payment_method")

    def complete_new(self, data):
        return self._inherit_trip_vehicle(data)

    def complete_patch(self, changes, current):
        if "trip_id" in changes and "vehicle_id" not in changes:
            return self._inherit_trip_vehicle(changes)
        return changes

    async def check_references(self, data, current, changed):
        if current is None or changed & {"trip_id", "vehicle_id"}:
            self._check_trip_vehicle(data)
        if current is None or "toll_id" in changed:
            self._require_parent("tolls", data.get("toll_id"), "toll_missing")
