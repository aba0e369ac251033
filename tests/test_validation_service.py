"""
Tests for ValidationService: manual-entry rules and import batch checks.
"""
from datetime import date, datetime

import pytest

from services.validation_service import (
    MAX_IMPORT_ERRORS,
    ValidationService,
    parse_int,
    parse_iso_date,
)

TODAY = date(2024, 6, 1)


def _form(**overrides):
    data = {
        'date': '2024-05-20',
        'amount': '40',
        'cost': '6000',
        'mileage': '12000',
        'station': 'ENEOS',
    }
    data.update(overrides)
    return data


def _validate(form_data, existing=()):
    return ValidationService.validate_fuel_record(form_data, existing, today=TODAY)


class TestValidateFuelRecord:
    def test_valid_record(self):
        result = _validate(_form())

        assert result == {'is_valid': True, 'errors': [], 'warnings': []}

    def test_out_of_band_amount_and_cost_both_reported(self):
        result = _validate(_form(amount='0.5', cost='60'))

        assert result['is_valid'] is False
        assert 'Amount is below 1L; please check the value' in result['errors']
        assert 'Cost is below 100; please check the value' in result['errors']

    @pytest.mark.parametrize('field', ['date', 'amount', 'cost', 'mileage', 'station'])
    def test_missing_fields(self, field):
        result = _validate(_form(**{field: ''}))

        assert result['is_valid'] is False
        assert any('required' in message for message in result['errors'])

    def test_future_date_rejected(self):
        result = _validate(_form(date='2024-06-02'))

        assert 'Date cannot be in the future' in result['errors']

    def test_malformed_date_rejected(self):
        result = _validate(_form(date='2024/05/20'))

        assert 'Date must be in YYYY-MM-DD format' in result['errors']

    def test_fractional_cost_rejected(self):
        result = _validate(_form(cost='6000.5'))

        assert 'Cost must be a positive whole number' in result['errors']

    def test_amount_above_band(self):
        result = _validate(_form(amount='250', cost='40000'))

        assert 'Amount exceeds 200L; please check the value' in result['errors']

    def test_unit_price_band(self):
        high = _validate(_form(amount='10', cost='4000'))
        low = _validate(_form(amount='40', cost='2000'))

        assert any('unusually high' in message for message in high['errors'])
        assert any('unusually low' in message for message in low['errors'])

    def test_station_length_limit(self):
        assert _validate(_form(station='S' * 50))['is_valid'] is True
        assert _validate(_form(station='S' * 51))['is_valid'] is False

    def test_datetime_value_is_treated_as_its_date(self):
        result = _validate(_form(date=datetime(2024, 5, 20, 9, 30)))

        assert result['is_valid'] is True

    def test_negative_mileage_rejected(self):
        result = _validate(_form(mileage='-1'))

        assert 'Mileage must be zero or a positive number' in result['errors']


class TestCrossRecordChecks:
    def test_mileage_regression_rejected(self, make_record):
        existing = [make_record('2024-05-01', 40, 6000, 5000)]

        result = _validate(_form(date='2024-05-10', mileage='4000'), existing)

        assert result['is_valid'] is False
        assert 'Mileage is less than the previous record (5000.0km)' in result['errors']

    def test_back_dated_entry_is_not_compared(self, make_record):
        existing = [make_record('2024-05-01', 40, 6000, 5000)]

        result = _validate(_form(date='2024-04-20', mileage='4000'), existing)

        assert result['is_valid'] is True

    def test_compares_with_latest_by_date(self, make_record):
        existing = [
            make_record('2024-05-10', 40, 6000, 6000),
            make_record('2024-04-01', 40, 6000, 9000),
        ]

        result = _validate(_form(date='2024-05-20', mileage='6500'), existing)

        assert result['is_valid'] is True

    def test_long_daily_distance_is_only_a_warning(self, make_record):
        existing = [make_record('2024-05-19', 40, 6000, 5000)]

        result = _validate(_form(date='2024-05-20', mileage='7000'), existing)

        assert result['is_valid'] is True
        assert len(result['warnings']) == 1

    def test_old_date_is_only_a_warning(self):
        result = _validate(_form(date='2023-01-15'))

        assert result['is_valid'] is True
        assert result['warnings'] == ['Date is more than a year ago; please check it is correct']


class TestValidateImportData:
    def test_valid_rows(self):
        rows = [{'date': '2024-01-01', 'amount': 40, 'cost': 6000, 'mileage': 0, 'station': 'ENEOS'}]

        assert ValidationService.validate_import_data(rows)['is_valid'] is True

    def test_not_a_list(self):
        result = ValidationService.validate_import_data({'date': '2024-01-01'})

        assert result['errors'] == ['Import data must be a list of records']

    def test_empty_list(self):
        assert ValidationService.validate_import_data([])['errors'] == ['There is no data to import']

    def test_row_labels_are_one_based(self):
        rows = [
            {'date': '2024-01-01', 'amount': 40, 'cost': 6000, 'mileage': 0, 'station': 'ENEOS'},
            {'date': '01/02/2024', 'amount': 0, 'cost': 6000, 'mileage': 10, 'station': ''},
        ]

        errors = ValidationService.validate_import_data(rows)['errors']

        assert errors == [
            'Row 2: date invalid (expected YYYY-MM-DD)',
            'Row 2: amount invalid',
            'Row 2: station missing',
        ]

    def test_fractional_cost_rejected(self):
        rows = [{'date': '2024-01-01', 'amount': 40, 'cost': 6000.5, 'mileage': 0, 'station': 'ENEOS'}]

        errors = ValidationService.validate_import_data(rows)['errors']

        assert errors == ['Row 1: cost invalid (whole number expected)']

    def test_station_longer_than_column_rejected(self):
        rows = [{'date': '2024-01-01', 'amount': 40, 'cost': 6000, 'mileage': 0, 'station': 'S' * 51}]

        errors = ValidationService.validate_import_data(rows)['errors']

        assert errors == ['Row 1: station longer than 50 characters']

    def test_errors_are_capped(self):
        rows = [{'date': '', 'amount': '', 'cost': '', 'mileage': '', 'station': ''}] * 10

        result = ValidationService.validate_import_data(rows)

        assert result['is_valid'] is False
        assert len(result['errors']) == MAX_IMPORT_ERRORS


class TestParsers:
    def test_parse_int_accepts_integral_floats(self):
        assert parse_int('6000') == 6000
        assert parse_int('6000.0') == 6000
        assert parse_int('6000.5') is None
        assert parse_int('abc') is None

    def test_parse_iso_date_rejects_impossible_dates(self):
        assert parse_iso_date('2024-02-29') == date(2024, 2, 29)
        assert parse_iso_date('2023-02-29') is None

    def test_parse_iso_date_truncates_datetimes(self):
        assert parse_iso_date(datetime(2024, 1, 1, 9)) == date(2024, 1, 1)
