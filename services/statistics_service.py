"""
Statistics Service
==================
One consistent snapshot of everything derived from a user's fuel log.

``calculate_statistics()`` runs the efficiency, aggregation and trend
services over the same ascending-date ordering and combines them.  It is
total: an empty log yields ``empty_statistics()`` rather than an error, and
nothing is cached, so every call reflects the records it is given.
"""
import logging

from services.aggregation_service import AggregationService
from services.efficiency_service import EfficiencyService
from services.trend_service import TrendService, empty_trends

logger = logging.getLogger(__name__)


def empty_statistics():
    return {
        'total_records': 0,
        'total_cost': 0,
        'total_amount': 0,
        'total_distance': 0,
        'average_fuel_efficiency': 0,
        'average_price': 0,
        'average_cost_per_month': 0,
        'average_amount_per_fillup': 0,
        'best_fuel_efficiency': 0,
        'worst_fuel_efficiency': 0,
        'cheapest_price': 0,
        'expensive_price': 0,
        'first_record': None,
        'latest_record': None,
        'monthly_stats': [],
        'station_stats': [],
        'trends': empty_trends(),
    }


class StatisticsService:

    @staticmethod
    def calculate_statistics(records):
        """Build the StatisticsData snapshot for *records* (any order)."""
        if not records:
            return empty_statistics()

        sorted_records = EfficiencyService.sort_records(records)
        aggregates = AggregationService.aggregate(sorted_records)
        monthly_stats = aggregates['monthly_stats']
        totals = aggregates['totals']

        month_count = len(monthly_stats) or 1

        statistics = dict(totals)
        statistics.update({
            'average_cost_per_month': totals['total_cost'] / month_count,
            'first_record': sorted_records[0],
            'latest_record': sorted_records[-1],
            'monthly_stats': monthly_stats,
            'station_stats': aggregates['station_stats'],
            'trends': TrendService.calculate_trends(monthly_stats),
        })
        logger.debug(
            "statistics: %d records over %d months",
            statistics['total_records'], len(monthly_stats)
        )
        return statistics

    @staticmethod
    def serialize(statistics):
        """JSON-safe copy of a snapshot (record references become dicts)."""
        data = dict(statistics)
        for key in ('first_record', 'latest_record'):
            record = data.get(key)
            if record is not None and hasattr(record, 'to_dict'):
                data[key] = record.to_dict()
        return data
