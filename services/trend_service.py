"""
Trend Service
=============
Period-over-period movement in price, efficiency and spend.

``calculate_trends()`` compares the two most recent months of an ascending
monthly_stats list.  ``recent_trend()`` compares the latest run of fill-ups
with the run before it, for logs where month boundaries are too coarse.
Equal values count as neither improving nor increasing.
"""
from services.efficiency_service import EfficiencyService


def empty_trends():
    return {
        'price_change': 0,
        'efficiency_change': 0,
        'cost_change': 0,
        'is_improving_efficiency': False,
        'is_price_increasing': False,
    }


class TrendService:

    @staticmethod
    def calculate_trends(monthly_stats):
        """Latest month vs. the month before it; zeroed with fewer than two months."""
        if len(monthly_stats) < 2:
            return empty_trends()

        latest = monthly_stats[-1]
        previous = monthly_stats[-2]

        price_change = latest['average_price'] - previous['average_price']
        efficiency_change = latest['average_fuel_efficiency'] - previous['average_fuel_efficiency']
        cost_change = latest['total_cost'] - previous['total_cost']

        return {
            'price_change': price_change,
            'efficiency_change': efficiency_change,
            'cost_change': cost_change,
            'is_improving_efficiency': efficiency_change > 0,
            'is_price_increasing': price_change > 0,
        }

    @staticmethod
    def _window_efficiency(window):
        # Pairs are taken inside the window only
        values = []
        for index in range(1, len(window)):
            efficiency = EfficiencyService.fuel_efficiency(window[index], window[index - 1])
            if efficiency is not None:
                values.append(efficiency)
        return sum(values) / len(values) if values else 0

    @staticmethod
    def _window_price(window):
        prices = [EfficiencyService.price_per_liter(r) for r in window]
        return sum(prices) / len(prices) if prices else 0

    @staticmethod
    def recent_trend(records, window=5):
        """
        Compare the last *window* fill-ups with the *window* before them.

        Returns None unless both runs contain at least two records.
        """
        sorted_records = EfficiencyService.sort_records(records)
        recent = sorted_records[-window:]
        older = sorted_records[-2 * window:-window]

        if len(recent) < 2 or len(older) < 2:
            return None

        recent_efficiency = TrendService._window_efficiency(recent)
        older_efficiency = TrendService._window_efficiency(older)
        recent_price = TrendService._window_price(recent)
        older_price = TrendService._window_price(older)

        return {
            'efficiency_change': recent_efficiency - older_efficiency,
            'price_change': recent_price - older_price,
            'is_improving_efficiency': recent_efficiency > older_efficiency,
            'is_price_increasing': recent_price > older_price,
        }
