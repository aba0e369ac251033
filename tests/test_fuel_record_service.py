"""
Tests for FuelRecordService: validated writes scoped to the current user.
"""
from datetime import date

import pytest

from extensions import db
from models.fuel import FuelRecord
from services.fuel_record_service import FuelRecordService

TODAY = date(2024, 6, 1)


def _form(**overrides):
    data = {
        'date': '2024-05-01',
        'amount': '40',
        'cost': '6000',
        'mileage': '5000',
        'station': 'ENEOS',
    }
    data.update(overrides)
    return data


@pytest.fixture
def as_user(user, patch_user):
    patch_user(user.id)
    return user


class TestCreateRecord:
    def test_valid_form_is_saved(self, as_user):
        record, validation = FuelRecordService.create_record(_form(station='  Cosmo '), today=TODAY)

        assert validation['is_valid'] is True
        assert record.id is not None
        assert record.user_id == as_user.id
        assert record.date == date(2024, 5, 1)
        assert record.cost == 6000
        assert record.station == 'Cosmo'

    def test_invalid_form_is_not_saved(self, as_user):
        record, validation = FuelRecordService.create_record(_form(amount='0.5', cost='60'), today=TODAY)

        assert record is None
        assert len(validation['errors']) == 2
        assert FuelRecord.query.count() == 0

    def test_mileage_regression_blocks_insert(self, as_user):
        FuelRecordService.create_record(_form(), today=TODAY)

        record, validation = FuelRecordService.create_record(
            _form(date='2024-05-10', mileage='4000'), today=TODAY
        )

        assert record is None
        assert 'Mileage is less than the previous record (5000.0km)' in validation['errors']

    def test_other_users_log_is_not_consulted(self, as_user, other_user):
        db.session.add(FuelRecord(
            user_id=other_user.id, date=date(2024, 5, 1), amount=40, cost=6000, mileage=90000, station='X',
        ))
        db.session.commit()

        record, _ = FuelRecordService.create_record(_form(date='2024-05-10', mileage='100'), today=TODAY)

        assert record is not None


class TestUpdateRecord:
    def test_edit_is_validated_against_other_records_only(self, as_user):
        record, _ = FuelRecordService.create_record(_form(), today=TODAY)

        # Lowering the only record's mileage is fine: there is nothing to compare with
        updated, validation = FuelRecordService.update_record(record.id, _form(mileage='4500'), today=TODAY)

        assert validation['is_valid'] is True
        assert updated.mileage == 4500

    def test_edit_rejected_against_earlier_record(self, as_user):
        FuelRecordService.create_record(_form(), today=TODAY)
        second, _ = FuelRecordService.create_record(_form(date='2024-05-10', mileage='5400'), today=TODAY)

        updated, validation = FuelRecordService.update_record(
            second.id, _form(date='2024-05-10', mileage='4900'), today=TODAY
        )

        assert updated is None
        assert validation['is_valid'] is False
        assert db.session.get(FuelRecord, second.id).mileage == 5400

    def test_unknown_record(self, as_user):
        assert FuelRecordService.update_record(999, _form(), today=TODAY) == (None, None)


class TestDeleteRecord:
    def test_delete_own_record(self, as_user):
        record, _ = FuelRecordService.create_record(_form(), today=TODAY)

        assert FuelRecordService.delete_record(record.id) is True
        assert FuelRecordService.list_records() == []

    def test_cannot_delete_other_users_record(self, as_user, other_user):
        theirs = FuelRecord(
            user_id=other_user.id, date=date(2024, 5, 1), amount=40, cost=6000, mileage=1000, station='X',
        )
        db.session.add(theirs)
        db.session.commit()

        assert FuelRecordService.delete_record(theirs.id) is False
        assert db.session.get(FuelRecord, theirs.id) is not None


class TestListAndImport:
    def test_import_then_list_in_date_order(self, as_user):
        rows = [
            {'date': '2024-02-01', 'amount': 40.0, 'cost': 6200, 'mileage': 1500.0, 'station': 'Y'},
            {'date': '2024-01-01', 'amount': 40.0, 'cost': 6000, 'mileage': 1000.0, 'station': 'X'},
        ]

        imported = FuelRecordService.import_records(rows)

        assert len(imported) == 2
        assert [r.station for r in FuelRecordService.list_records()] == ['X', 'Y']
        assert [r.station for r in FuelRecordService.list_records(descending=True)] == ['Y', 'X']

    def test_import_for_explicit_user(self, app, user, other_user):
        rows = [{'date': '2024-01-01', 'amount': 40.0, 'cost': 6000, 'mileage': 1000.0, 'station': 'X'}]

        FuelRecordService.import_records(rows, user_id=other_user.id)

        assert FuelRecord.query.filter_by(user_id=other_user.id).count() == 1

    def test_known_stations(self, as_user):
        FuelRecordService.create_record(_form(station='Shell'), today=TODAY)
        FuelRecordService.create_record(_form(date='2024-05-10', mileage='5300', station='Cosmo'), today=TODAY)
        FuelRecordService.create_record(_form(date='2024-05-20', mileage='5600', station='Shell'), today=TODAY)

        assert FuelRecordService.known_stations() == ['Cosmo', 'Shell']
