"""
Export Service
==============
Serialise a fuel log to CSV, JSON and a plain-text monthly report.

The CSV and JSON exports derive unit price and efficiency against the
preceding element *of the list passed in*; they do not re-sort, so callers
pass the log already filtered and in ascending date order.  The report
groups by month with the same rules as AggregationService.

Primary entry points
--------------------
  to_csv()           — BOM-prefixed CSV with the fixed Japanese header
  to_json()          — {exportDate, totalRecords, records}
  monthly_report()   — Markdown-flavoured text, newest month first
  export_filename()  — download file name for a given export kind
"""
import json
from datetime import date, datetime, timezone

from services.aggregation_service import AggregationService
from services.efficiency_service import EfficiencyService, date_key
from utils.formatting import (
    fixed1, round1, format_currency, format_price, format_distance, format_fuel_efficiency,
)

CSV_BOM = '\ufeff'
CSV_HEADERS = ['日付', 'スタンド名', '給油量(L)', '金額(円)', '単価(円/L)', '走行距離(km)', '燃費(km/L)']
EMPTY_CELL = '-'

EXPORT_FILENAMES = {
    'csv': 'fuel_records_{day}.csv',
    'json': 'fuel_records_{day}.json',
    'report': 'fuel_monthly_report_{day}.txt',
}


def _quote(text):
    return '"' + str(text).replace('"', '""') + '"'


def _record_fields(record):
    if hasattr(record, 'to_dict'):
        return record.to_dict()
    return {
        'date': date_key(record),
        'amount': record.amount,
        'cost': record.cost,
        'mileage': record.mileage,
        'station': record.station,
    }


class ExportService:

    @staticmethod
    def to_csv(records):
        """CSV text (with BOM) for *records* in the order given."""
        lines = [','.join(CSV_HEADERS)]
        previous = None
        for record in records:
            efficiency = EfficiencyService.fuel_efficiency(record, previous)
            lines.append(','.join([
                date_key(record),
                _quote(record.station),
                fixed1(record.amount),
                str(int(record.cost)),
                fixed1(EfficiencyService.price_per_liter(record)),
                fixed1(record.mileage),
                fixed1(efficiency) if efficiency is not None else EMPTY_CELL,
            ]))
            previous = record
        return CSV_BOM + '\n'.join(lines)

    @staticmethod
    def to_json(records, exported_at=None):
        """JSON document with derived fields rounded to one decimal."""
        exported_at = exported_at or datetime.now(timezone.utc)
        export_records = []
        previous = None
        for record in records:
            item = _record_fields(record)
            efficiency = EfficiencyService.fuel_efficiency(record, previous)
            distance = EfficiencyService.distance_between(record, previous)
            item.update({
                'pricePerLiter': round1(EfficiencyService.price_per_liter(record)),
                'fuelEfficiency': round1(efficiency),
                'distanceFromPrevious': round1(distance),
            })
            export_records.append(item)
            previous = record

        document = {
            'exportDate': exported_at.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            'totalRecords': len(export_records),
            'records': export_records,
        }
        return json.dumps(document, ensure_ascii=False, indent=2)

    @staticmethod
    def monthly_report(records, generated_at=None):
        """Monthly summary report, newest month first, then whole-period totals."""
        generated_at = generated_at or datetime.now()
        lines = [
            '# Fuel Monthly Report',
            f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M')}",
        ]
        if not records:
            lines.append('')
            lines.append('No fuel records to report.')
            return '\n'.join(lines)

        dates = sorted(date_key(r) for r in records)
        lines.extend([
            f'Period: {dates[0]} - {dates[-1]}',
            '',
            '## Monthly Summary',
            '',
        ])

        for month in reversed(AggregationService.monthly_stats(records)):
            lines.append(f"### {month['month']}")
            lines.append(f"- Fill-ups: {month['record_count']}")
            lines.append(f"- Total amount: {fixed1(month['total_amount'])}L")
            lines.append(f"- Total cost: {format_currency(month['total_cost'])}")
            lines.append(f"- Average price: {format_price(month['average_price'])}")
            lines.append(f"- Distance: {format_distance(month['total_distance'])}")
            if month['total_distance'] > 0:
                lines.append(f"- Average efficiency: {format_fuel_efficiency(month['average_fuel_efficiency'])}")
            lines.append('')

        totals = AggregationService.totals(records)
        lines.append('## All-Time Totals')
        lines.append(f"- Total fill-ups: {totals['total_records']}")
        lines.append(f"- Total amount: {fixed1(totals['total_amount'])}L")
        lines.append(f"- Total cost: {format_currency(totals['total_cost'])}")
        lines.append(f"- Average price: {format_price(totals['average_price'])}")
        return '\n'.join(lines)

    @staticmethod
    def export_filename(kind, today=None):
        today = today or date.today()
        return EXPORT_FILENAMES[kind].format(day=today.isoformat())
