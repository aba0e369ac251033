"""
Validation Service
==================
Business-rule checks for fuel records before they reach the database.

Two entry points with different scopes:

  validate_fuel_record()  — a single record typed in by the user, checked
                            field by field and against the rest of the log
                            (odometer must not go backwards).
  validate_import_data()  — a batch of imported rows, checked for presence
                            and basic type/sign only.  No range bands and no
                            cross-record checks; those belong to manual entry.

Neither function raises.  Both return a result dict::

    {'is_valid': bool, 'errors': [...], 'warnings': [...]}

``errors`` block submission.  ``warnings`` are advisories the caller may
show (a fill-up dated more than a year ago, an implausible distance per
day) but they never affect ``is_valid``.
"""
import logging
import math
import re
from datetime import date, datetime

from dateutil.relativedelta import relativedelta

from services.efficiency_service import date_key

logger = logging.getLogger(__name__)

MIN_AMOUNT = 1
MAX_AMOUNT = 200
MIN_COST = 100
MAX_COST = 50000
MIN_PRICE_PER_LITER = 80
MAX_PRICE_PER_LITER = 300
MAX_MILEAGE = 1000000
MAX_DISTANCE_PER_DAY = 1000
MAX_STATION_LENGTH = 50
MAX_IMPORT_ERRORS = 20

ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def _is_blank(value):
    return value is None or str(value).strip() == ''


def parse_float(value):
    """float(value) or None when it is not a finite number."""
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_int(value):
    """Whole number from *value* (``"6000"`` or ``"6000.0"``), else None."""
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    number = parse_float(text)
    if number is None or not number.is_integer():
        return None
    return int(number)


def parse_iso_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not ISO_DATE_RE.match(text):
        return None
    try:
        return datetime.strptime(text, '%Y-%m-%d').date()
    except ValueError:
        return None


def _result(errors, warnings=None):
    return {
        'is_valid': len(errors) == 0,
        'errors': errors,
        'warnings': warnings or [],
    }


class ValidationService:
    """Field and cross-record checks for fuel records."""

    @staticmethod
    def validate_fuel_record(form_data, existing_records=(), today=None):
        """
        Validate one candidate record.

        Args:
            form_data:         mapping with ``date``, ``amount``, ``cost``,
                               ``mileage`` and ``station`` (strings or numbers).
            existing_records:  the rest of the user's log.  When editing, the
                               record being edited must already be excluded.
            today:             reference date (defaults to ``date.today()``).

        Returns:
            {'is_valid', 'errors', 'warnings'}
        """
        today = today or date.today()
        errors = []
        warnings = []

        raw_date = form_data.get('date')
        raw_amount = form_data.get('amount')
        raw_cost = form_data.get('cost')
        raw_mileage = form_data.get('mileage')
        raw_station = form_data.get('station')

        # Date
        fuel_date = None
        if _is_blank(raw_date):
            errors.append('Date is required')
        else:
            fuel_date = parse_iso_date(raw_date)
            if fuel_date is None:
                errors.append('Date must be in YYYY-MM-DD format')
            else:
                if fuel_date > today:
                    errors.append('Date cannot be in the future')
                if fuel_date < today - relativedelta(years=1):
                    warnings.append('Date is more than a year ago; please check it is correct')

        # Amount
        amount = None
        if _is_blank(raw_amount):
            errors.append('Amount is required')
        else:
            amount = parse_float(raw_amount)
            if amount is None or amount <= 0:
                errors.append('Amount must be a positive number')
                amount = None
            elif amount > MAX_AMOUNT:
                errors.append(f'Amount exceeds {MAX_AMOUNT}L; please check the value')
            elif amount < MIN_AMOUNT:
                errors.append(f'Amount is below {MIN_AMOUNT}L; please check the value')

        # Cost
        cost = None
        if _is_blank(raw_cost):
            errors.append('Cost is required')
        else:
            cost = parse_int(raw_cost)
            if cost is None or cost <= 0:
                errors.append('Cost must be a positive whole number')
                cost = None
            elif cost > MAX_COST:
                errors.append(f'Cost exceeds {MAX_COST:,}; please check the value')
            elif cost < MIN_COST:
                errors.append(f'Cost is below {MIN_COST}; please check the value')

        # Unit price
        if amount is not None and cost is not None:
            price_per_liter = cost / amount
            if price_per_liter > MAX_PRICE_PER_LITER:
                errors.append(
                    f'Unit price of {price_per_liter:.1f}/L is unusually high; please check the values'
                )
            elif price_per_liter < MIN_PRICE_PER_LITER:
                errors.append(
                    f'Unit price of {price_per_liter:.1f}/L is unusually low; please check the values'
                )

        # Mileage
        if _is_blank(raw_mileage):
            errors.append('Mileage is required')
        else:
            mileage = parse_float(raw_mileage)
            if mileage is None or mileage < 0:
                errors.append('Mileage must be zero or a positive number')
            else:
                if mileage > MAX_MILEAGE:
                    errors.append(f'Mileage exceeds {MAX_MILEAGE:,}km; please check the value')
                if existing_records and fuel_date is not None:
                    ValidationService._check_against_latest(
                        fuel_date, mileage, existing_records, errors, warnings
                    )

        # Station
        station = '' if raw_station is None else str(raw_station).strip()
        if not station:
            errors.append('Station is required')
        elif len(station) > MAX_STATION_LENGTH:
            errors.append(f'Station must be {MAX_STATION_LENGTH} characters or fewer')

        if errors:
            logger.debug("fuel record rejected: %s", errors)
        return _result(errors, warnings)

    @staticmethod
    def _check_against_latest(fuel_date, mileage, existing_records, errors, warnings):
        """Odometer monotonicity and distance-per-day plausibility."""
        latest = sorted(existing_records, key=date_key)[-1]
        latest_date = parse_iso_date(date_key(latest))
        if latest_date is None:
            return

        if fuel_date >= latest_date and mileage < latest.mileage:
            errors.append(
                f'Mileage is less than the previous record ({latest.mileage:.1f}km)'
            )

        if fuel_date > latest_date:
            days_diff = (fuel_date - latest_date).days
            distance_per_day = (mileage - latest.mileage) / days_diff
            if distance_per_day > MAX_DISTANCE_PER_DAY:
                warnings.append(
                    f'{distance_per_day:.0f}km per day since the last fill-up is unusually long; '
                    'please check the mileage'
                )

    @staticmethod
    def validate_import_data(rows):
        """
        Presence and type/sign checks for imported rows.

        One message per failing field per row, labelled with the 1-based row
        number; at most MAX_IMPORT_ERRORS messages are returned.
        """
        if not isinstance(rows, list):
            return _result(['Import data must be a list of records'])
        if not rows:
            return _result(['There is no data to import'])

        errors = []
        for index, row in enumerate(rows):
            label = f'Row {index + 1}'

            raw_date = row.get('date')
            if _is_blank(raw_date):
                errors.append(f'{label}: date missing')
            elif parse_iso_date(raw_date) is None:
                errors.append(f'{label}: date invalid (expected YYYY-MM-DD)')

            for field, allow_zero in (('amount', False), ('cost', False), ('mileage', True)):
                value = row.get(field)
                if value is None or value == '':
                    errors.append(f'{label}: {field} missing')
                    continue
                number = parse_float(value)
                if number is None or number < 0 or (number == 0 and not allow_zero):
                    errors.append(f'{label}: {field} invalid')
                elif field == 'cost' and not number.is_integer():
                    errors.append(f'{label}: cost invalid (whole number expected)')

            station = row.get('station')
            if not isinstance(station, str) or not station.strip():
                errors.append(f'{label}: station missing')
            elif len(station.strip()) > MAX_STATION_LENGTH:
                errors.append(f'{label}: station longer than {MAX_STATION_LENGTH} characters')

        if errors:
            logger.info("import validation failed with %d issue(s)", len(errors))
        return _result(errors[:MAX_IMPORT_ERRORS])
