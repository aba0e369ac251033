"""
Aggregation Service
===================
Monthly, per-station and whole-log aggregates over a set of fuel records.

All traversals start from the log sorted ascending by date, and every
distance is the positive odometer delta against the record's true
chronological predecessor, never against another member of the same month
or station group.

Group efficiency is (sum of distances) / (sum of litres) for the group, so
single-record groups and small top-ups are weighted by the fuel they carry
rather than skewing a mean of ratios.  Every division is guarded and falls
back to 0.

Station efficiency looks forward: the leg driven *after* filling up at a
station, up to the next record, is credited to that station, since that is
the fuel that carried the car over it.

Primary entry points
--------------------
  aggregate()            — {monthly_stats, station_stats, totals}
  monthly_stats()        — one entry per YYYY-MM present, ascending
  station_stats()        — one entry per station string, most used first
  totals()               — whole-log sums and extremes
  known_stations()       — distinct station names derived from the log
"""
from datetime import datetime

from services.efficiency_service import EfficiencyService, date_key, month_key


def _ratio(numerator, denominator):
    return numerator / denominator if denominator else 0


class AggregationService:
    """Group and total fuel records; pure functions over an explicit record list."""

    @staticmethod
    def monthly_stats(records):
        """Per-month aggregates in ascending month order."""
        sorted_records = EfficiencyService.sort_records(records)
        months = {}

        for index, record in enumerate(sorted_records):
            month = month_key(record)
            data = months.setdefault(month, {
                'record_count': 0,
                'total_cost': 0,
                'total_amount': 0,
                'total_distance': 0,
            })
            data['record_count'] += 1
            data['total_cost'] += record.cost
            data['total_amount'] += record.amount

            previous = sorted_records[index - 1] if index > 0 else None
            distance = EfficiencyService.distance_between(record, previous)
            if distance is not None:
                data['total_distance'] += distance

        stats = []
        for month in sorted(months):
            data = months[month]
            stats.append({
                'month': month,
                'display_month': datetime.strptime(month, '%Y-%m').strftime('%b %Y'),
                'record_count': data['record_count'],
                'total_cost': data['total_cost'],
                'total_amount': data['total_amount'],
                'total_distance': data['total_distance'],
                'average_fuel_efficiency': _ratio(data['total_distance'], data['total_amount']),
                'average_price': _ratio(data['total_cost'], data['total_amount']),
                'cost_per_km': _ratio(data['total_cost'], data['total_distance']),
            })
        return stats

    @staticmethod
    def station_stats(records):
        """Per-station aggregates ordered by descending number of visits."""
        sorted_records = EfficiencyService.sort_records(records)
        stations = {}

        for index, record in enumerate(sorted_records):
            data = stations.setdefault(record.station, {
                'record_count': 0,
                'total_cost': 0,
                'total_amount': 0,
                'total_distance': 0,
                'last_visit': date_key(record),
            })
            data['record_count'] += 1
            data['total_cost'] += record.cost
            data['total_amount'] += record.amount
            # Ascending traversal, so the latest visit is the last one seen
            data['last_visit'] = date_key(record)

            if index < len(sorted_records) - 1:
                following = sorted_records[index + 1]
                distance = EfficiencyService.distance_between(following, record)
                if distance is not None:
                    data['total_distance'] += distance

        stats = [
            {
                'station': station,
                'record_count': data['record_count'],
                'total_cost': data['total_cost'],
                'total_amount': data['total_amount'],
                'average_price': _ratio(data['total_cost'], data['total_amount']),
                'last_visit': data['last_visit'],
                'fuel_efficiency': _ratio(data['total_distance'], data['total_amount']),
            }
            for station, data in stations.items()
        ]
        # Stable sort: equally used stations keep first-visit order
        stats.sort(key=lambda s: s['record_count'], reverse=True)
        return stats

    @staticmethod
    def efficiency_values(records):
        """Per-adjacent-pair efficiencies over the sorted log (undefined pairs dropped)."""
        return [
            point['efficiency']
            for point in EfficiencyService.efficiency_series(records)
            if point['efficiency'] is not None
        ]

    @staticmethod
    def efficiency_extremes(records):
        """(best, worst) efficiency; (0, 0) when no pair yields a figure."""
        values = AggregationService.efficiency_values(records)
        if not values:
            return 0, 0
        return max(values), min(values)

    @staticmethod
    def price_extremes(records):
        """(cheapest, most expensive) unit price; (0, 0) for an empty log."""
        prices = [EfficiencyService.price_per_liter(r) for r in records]
        if not prices:
            return 0, 0
        return min(prices), max(prices)

    @staticmethod
    def totals(records):
        """Whole-log sums, averages and extremes."""
        sorted_records = EfficiencyService.sort_records(records)
        total_cost = sum(r.cost for r in sorted_records)
        total_amount = sum(r.amount for r in sorted_records)

        total_distance = 0
        for index in range(1, len(sorted_records)):
            distance = EfficiencyService.distance_between(
                sorted_records[index], sorted_records[index - 1]
            )
            if distance is not None:
                total_distance += distance

        efficiencies = AggregationService.efficiency_values(sorted_records)
        best, worst = AggregationService.efficiency_extremes(sorted_records)
        cheapest, expensive = AggregationService.price_extremes(sorted_records)

        return {
            'total_records': len(sorted_records),
            'total_cost': total_cost,
            'total_amount': total_amount,
            'total_distance': total_distance,
            'average_fuel_efficiency': _ratio(sum(efficiencies), len(efficiencies)),
            'average_price': _ratio(total_cost, total_amount),
            'average_amount_per_fillup': _ratio(total_amount, len(sorted_records)),
            'best_fuel_efficiency': best,
            'worst_fuel_efficiency': worst,
            'cheapest_price': cheapest,
            'expensive_price': expensive,
        }

    @staticmethod
    def aggregate(records):
        return {
            'monthly_stats': AggregationService.monthly_stats(records),
            'station_stats': AggregationService.station_stats(records),
            'totals': AggregationService.totals(records),
        }

    @staticmethod
    def known_stations(records):
        """Sorted distinct station names (exact, case-sensitive match)."""
        return sorted({r.station for r in records})
