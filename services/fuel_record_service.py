"""
Fuel Record Service
===================
Create, edit, delete and bulk-import fuel records for the logged-in user.

Every write is validated first against the user's other records; nothing
derived (efficiency, distance, unit price) is stored, so edits and deletes
never leave stale figures behind.

Primary entry points
--------------------
  list_records()     — the user's log, ascending by date (or descending)
  create_record()    — validate then insert; returns (record, validation)
  update_record()    — validate against every *other* record then save
  delete_record()    — remove by id
  import_records()   — insert a batch of parsed rows in one commit
  known_stations()   — distinct station names from the user's log
"""
import logging

from extensions import db
from models.fuel import FuelRecord
from services.aggregation_service import AggregationService
from services.validation_service import ValidationService, parse_float, parse_int, parse_iso_date
from utils.db_helpers import user_query, user_get, get_user_id

logger = logging.getLogger(__name__)


def _apply_form(record, form_data):
    record.date = parse_iso_date(form_data.get('date'))
    record.amount = parse_float(form_data.get('amount'))
    record.cost = parse_int(form_data.get('cost'))
    record.mileage = parse_float(form_data.get('mileage'))
    record.station = str(form_data.get('station')).strip()
    return record


class FuelRecordService:

    @staticmethod
    def list_records(descending=False):
        order = FuelRecord.date.desc() if descending else FuelRecord.date.asc()
        return user_query(FuelRecord).order_by(order, FuelRecord.id).all()

    @staticmethod
    def get_record(record_id):
        return user_get(FuelRecord, record_id)

    @staticmethod
    def create_record(form_data, today=None):
        """
        Validate *form_data* against the user's log and insert it.

        Returns:
            (FuelRecord or None, validation result)
        """
        existing = FuelRecordService.list_records()
        validation = ValidationService.validate_fuel_record(form_data, existing, today=today)
        if not validation['is_valid']:
            return None, validation

        record = _apply_form(FuelRecord(user_id=get_user_id()), form_data)
        db.session.add(record)
        db.session.commit()
        logger.info("fuel record %s created for user %s", record.id, record.user_id)
        return record, validation

    @staticmethod
    def update_record(record_id, form_data, today=None):
        """
        Validate *form_data* against every other record, then overwrite.

        Returns (None, None) when the record does not belong to the user.
        """
        record = user_get(FuelRecord, record_id)
        if record is None:
            return None, None

        others = [r for r in FuelRecordService.list_records() if r.id != record.id]
        validation = ValidationService.validate_fuel_record(form_data, others, today=today)
        if not validation['is_valid']:
            return None, validation

        _apply_form(record, form_data)
        db.session.commit()
        logger.info("fuel record %s updated", record.id)
        return record, validation

    @staticmethod
    def delete_record(record_id):
        """Delete a record; False if it does not belong to the user."""
        record = user_get(FuelRecord, record_id)
        if record is None:
            return False
        db.session.delete(record)
        db.session.commit()
        logger.info("fuel record %s deleted", record_id)
        return True

    @staticmethod
    def import_records(rows, user_id=None):
        """
        Insert rows produced by ImportService in a single transaction.

        Either every row is stored or, on a database error, none are.
        *user_id* defaults to the logged-in user (the CLI passes it explicitly).
        """
        user_id = user_id or get_user_id()
        records = [_apply_form(FuelRecord(user_id=user_id), row) for row in rows]
        try:
            db.session.add_all(records)
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.exception("fuel import of %d rows failed", len(records))
            raise
        logger.info("imported %d fuel records for user %s", len(records), user_id)
        return records

    @staticmethod
    def known_stations():
        return AggregationService.known_stations(FuelRecordService.list_records())
