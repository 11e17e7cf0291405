# tests/test_validators.py
"""Unit tests for the pure validation rules."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date
from fleet_ledger.utils.mappers import VEHICLE_MAPPER
from fleet_ledger.utils.validators import (
    is_valid_expense, is_valid_toll, is_valid_vehicle,
    validate_expense, validate_toll, validate_toll_record, validate_trip, validate_vehicle,
)

TODAY = date(2025, 6, 1)


def vehicle(**overrides):
    data = {"plate": "ABC123", "brand": "Ford", "model": "F150", "year": 2020}
    data.update(overrides)
    return data


class TestVehicleRules:
    def test_valid_vehicle(self):
        assert validate_vehicle(vehicle(), today=TODAY).is_valid

    @pytest.mark.parametrize("year,ok", [(1899, False), (1900, True), (2027, True), (2028, False), (2020.5, False)])
    def test_year_range(self, year, ok):
        assert validate_vehicle(vehicle(year=year), today=TODAY).is_valid is ok

    def test_blank_brand_is_missing(self):
        result = validate_vehicle(vehicle(brand="   "), today=TODAY)
        assert "brand is required" in result.errors

    def test_plate_format(self):
        assert not validate_vehicle(vehicle(plate="A"), today=TODAY).is_valid

    def test_fuel_type_must_be_known(self):
        assert not validate_vehicle(vehicle(fuel_type="coal"), today=TODAY).is_valid
        assert not validate_vehicle(vehicle(fuel_type="gasoline"), today=TODAY).is_valid
        assert validate_vehicle(vehicle(fuel_type=None), today=TODAY).is_valid

    @pytest.mark.parametrize("fuel_type", ["gasolina", "diesel", "gas", "electrico", "hibrido", "Diesel", " HIBRIDO "])
    def test_stored_fuel_types_pass_after_normalising(self, fuel_type):
        data = VEHICLE_MAPPER.normalize(vehicle(fuel_type=fuel_type))
        assert validate_vehicle(data, today=TODAY).is_valid

    def test_unknown_fields_are_rejected(self):
        result = validate_vehicle(vehicle(owner_id="someone-else"), today=TODAY)
        assert any("unknown fields" in e for e in result.errors)

    def test_partial_checks_only_supplied_keys(self):
        assert validate_vehicle({"color": "red"}, partial=True).is_valid
        assert not validate_vehicle({"plate": ""}, partial=True).is_valid

    def test_boolean_wrapper(self):
        assert is_valid_vehicle(vehicle())
        assert not is_valid_vehicle({})


class TestTripRules:
    def test_end_before_start(self):
        result = validate_trip({"vehicle_id": "v", "origin": "A", "destination": "B",
                                "start_date": date(2025, 1, 2), "end_date": date(2025, 1, 1), "distance": 10})
        assert "end_date must not be before start_date" in result.errors

    def test_distance_must_be_positive(self):
        assert not validate_trip({"distance": 0}, partial=True).is_valid

    def test_start_date_must_be_a_date(self):
        assert not validate_trip({"start_date": "2025-13-45"}, partial=True).is_valid


class TestExpenseRules:
    def test_amount_must_be_positive(self):
        base = {"trip_id": "t", "vehicle_id": "v", "category": "fuel", "date": date(2025, 1, 1)}
        assert not is_valid_expense({**base, "amount": 0})
        assert not is_valid_expense({**base, "amount": "abc"})
        assert is_valid_expense({**base, "amount": 0.01})

    def test_category_enum(self):
        result = validate_expense({"category": "parking"}, partial=True)
        assert not result.is_valid


class TestTollRules:
    def test_zero_price_is_allowed_for_tolls(self):
        assert is_valid_toll({"name": "N", "location": "L", "category": "I", "route": "R", "price": 0})
        assert not validate_toll({"price": -1}, partial=True).is_valid

    def test_toll_record_price_and_payment(self):
        assert not validate_toll_record({"price": 0}, partial=True).is_valid
        assert not validate_toll_record({"payment_method": "card"}, partial=True).is_valid
        assert validate_toll_record({"payment_method": "tag"}, partial=True).is_valid
