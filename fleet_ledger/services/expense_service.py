"""Expenses: each one belongs to a trip and carries that trip's vehicle."""

from fleet_ledger.services.base_repository import EntityRepository
from fleet_ledger.utils.mappers import EXPENSE_MAPPER
from fleet_ledger.utils.validators import validate_expense


class ExpenseRepository(EntityRepository):
    table_name = "expenses"
    noun = "expense"
    mapper = EXPENSE_MAPPER
    validator = validate_expense
    audited_fields = ("trip_id", "vehicle_id", "category", "amount", "date")

    def complete_new(self, data):
        return self._inherit_trip_vehicle(data)

    def complete_patch(self, changes, current):
        # moving to another trip moves to that trip's vehicle unless one is given
        if "trip_id" in changes and "vehicle_id" not in changes:
            return self._inherit_trip_vehicle(changes)
        return changes

    async def check_references(self, data, current, changed):
        if current is None or changed & {"trip_id", "vehicle_id"}:
            self._check_trip_vehicle(data)
