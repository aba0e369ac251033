"""
Import Service
==============
Parse CSV and JSON fuel-log files into normalised rows ready for the store.

CSV
---
The header row is matched loosely: each logical column (date, amount, cost,
mileage, station) is located by the first header containing one of a set of
label fragments, Japanese or English, so files written by ExportService and
hand-made spreadsheets both load.  Rows whose field count differs from the
header are skipped without being reported.  Numeric cells have thousands
separators and currency symbols stripped; anything still unparsable becomes
0.  A row is kept only when date, station, amount and cost are all present
and non-zero (a zero mileage is kept, since a first odometer reading of 0 is
legitimate).

JSON
----
Accepts a bare array, or an object with a ``records`` or ``data`` array.
Field names are normalised through a table of aliases.

Both paths sort the kept rows by date and run
ValidationService.validate_import_data(); any failure aborts the whole
import and nothing is returned for partial application.

Results are dicts::

    {'success': bool, 'data': [...], 'errors': [...], 'message': str}
"""
import csv
import json
import logging
import re

from services.validation_service import ValidationService, parse_float

logger = logging.getLogger(__name__)

CSV_COLUMN_FRAGMENTS = {
    'date': ('日付', '給油日', 'date'),
    'amount': ('給油量', 'amount', 'litre', 'liter'),
    'cost': ('金額', 'cost'),
    'mileage': ('走行距離', 'mileage', 'odometer'),
    'station': ('スタンド', 'station'),
}

JSON_FIELD_ALIASES = {
    'date': ('date', '給油日', '日付'),
    'amount': ('amount', '給油量', '給油量(L)'),
    'cost': ('cost', '金額', '金額(円)'),
    'mileage': ('mileage', '走行距離', '走行距離(km)'),
    'station': ('station', 'スタンド名', 'スタンド'),
}

FIELD_ORDER = ('date', 'amount', 'cost', 'mileage', 'station')

# Thousands separators, whitespace and currency marks
NUMERIC_NOISE_RE = re.compile(r'[,\s¥￥$£€円]')


def _failure(errors):
    return {'success': False, 'data': [], 'errors': errors, 'message': ''}


def _success(data):
    return {
        'success': True,
        'data': data,
        'errors': [],
        'message': f'Loaded {len(data)} record(s)',
    }


def clean_number(value, integer=False):
    """Strip separators/currency and parse; unparsable input becomes 0."""
    number = parse_float(NUMERIC_NOISE_RE.sub('', str(value)))
    if number is None:
        return 0
    return int(number) if integer else number


def _validated(rows):
    rows.sort(key=lambda r: r['date'])
    validation = ValidationService.validate_import_data(rows)
    if not validation['is_valid']:
        return _failure(validation['errors'])
    return _success(rows)


class ImportService:

    @staticmethod
    def locate_columns(headers):
        """Map logical field -> header index; missing fields are absent from the map."""
        columns = {}
        for field in FIELD_ORDER:
            for index, header in enumerate(headers):
                label = header.lower()
                if any(fragment.lower() in label for fragment in CSV_COLUMN_FRAGMENTS[field]):
                    columns[field] = index
                    break
        return columns

    @staticmethod
    def parse_csv(text):
        """Parse CSV text (optionally BOM-prefixed) into validated rows."""
        lines = text.lstrip('\ufeff').strip().splitlines()
        if len(lines) < 2:
            return _failure(['The CSV file contains no data rows'])

        try:
            rows = list(csv.reader(lines))
        except csv.Error as exc:
            return _failure([f'Could not parse the CSV file: {exc}'])

        headers = [h.strip().replace('"', '') for h in rows[0]]
        columns = ImportService.locate_columns(headers)
        missing = [field for field in FIELD_ORDER if field not in columns]
        if missing:
            return _failure([f"Missing required columns: {', '.join(missing)}"])

        data = []
        skipped = 0
        for line_number, values in enumerate(rows[1:], start=2):
            if len(values) != len(headers):
                skipped += 1
                logger.debug("csv line %d skipped: %d fields, expected %d",
                             line_number, len(values), len(headers))
                continue

            values = [v.strip() for v in values]
            record = {
                'date': values[columns['date']],
                'amount': clean_number(values[columns['amount']]),
                'cost': clean_number(values[columns['cost']], integer=True),
                'mileage': clean_number(values[columns['mileage']]),
                'station': values[columns['station']],
            }
            if record['date'] and record['amount'] and record['cost'] and record['station']:
                data.append(record)
            else:
                skipped += 1

        if skipped:
            logger.info("csv import: %d line(s) skipped", skipped)
        if not data:
            return _failure(['No valid records were found in the CSV file'])
        return _validated(data)

    @staticmethod
    def _pick(record, field):
        for alias in JSON_FIELD_ALIASES[field]:
            value = record.get(alias)
            if value is not None and value != '':
                return value
        return None

    @staticmethod
    def normalize_record(record):
        """Resolve aliases and coerce types; unparsable numbers are left as-is for validation."""
        normalized = {}
        for field in ('amount', 'mileage'):
            value = ImportService._pick(record, field)
            number = parse_float(value) if value is not None else None
            normalized[field] = number if number is not None else value

        cost = ImportService._pick(record, 'cost')
        number = parse_float(cost) if cost is not None else None
        if number is not None and number.is_integer():
            cost = int(number)
        elif number is not None:
            cost = number
        normalized['cost'] = cost

        raw_date = ImportService._pick(record, 'date')
        normalized['date'] = str(raw_date) if raw_date is not None else ''
        station = ImportService._pick(record, 'station')
        normalized['station'] = str(station) if station is not None else ''
        return {field: normalized[field] for field in FIELD_ORDER}

    @staticmethod
    def parse_json(text):
        """Parse a JSON export (or compatible file) into validated rows."""
        try:
            parsed = json.loads(text.lstrip('\ufeff'))
        except ValueError as exc:
            return _failure([f'Could not parse the JSON file: {exc}'])

        if isinstance(parsed, list):
            data = parsed
        elif isinstance(parsed, dict) and isinstance(parsed.get('records'), list):
            data = parsed['records']
        elif isinstance(parsed, dict) and isinstance(parsed.get('data'), list):
            data = parsed['data']
        else:
            return _failure(['The JSON file is not in a recognised format'])

        if not data:
            return _failure(['There is no data to import'])
        if not all(isinstance(item, dict) for item in data):
            return _failure(['Every JSON record must be an object'])

        return _validated([ImportService.normalize_record(item) for item in data])

    @staticmethod
    def parse_file(filename, text):
        """Dispatch on file extension (``.csv`` or ``.json``)."""
        name = (filename or '').lower()
        if name.endswith('.csv'):
            return ImportService.parse_csv(text)
        if name.endswith('.json'):
            return ImportService.parse_json(text)
        return _failure(['Unsupported file type; upload a .csv or .json file'])

    @staticmethod
    def sample_csv():
        """Template CSV users can fill in and re-import."""
        lines = [
            '日付,スタンド名,給油量(L),金額(円),走行距離(km)',
            '2024-01-15,ENEOS Tanaka,40.5,6075,50250.0',
            '2024-02-01,Idemitsu Self Yamada,38.2,5730,50680.5',
            '2024-02-18,Cosmo Sato,42.1,6315,51120.8',
        ]
        return '\ufeff' + '\n'.join(lines)
