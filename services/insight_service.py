"""
Insight Service
===============
Dashboard figures layered on top of a StatisticsData snapshot: an
efficiency grade, progress against the user's efficiency goal and monthly
budget, alerts and plain-language recommendations.
"""
from services.trend_service import TrendService
from utils.formatting import format_currency

# (minimum km/L, grade), best first
EFFICIENCY_GRADES = [
    (20, 'A+'),
    (18, 'A'),
    (16, 'B+'),
    (14, 'B'),
    (12, 'C+'),
    (10, 'C'),
]
PRICE_SPREAD_THRESHOLD = 20
MANY_STATIONS_THRESHOLD = 3


class InsightService:

    @staticmethod
    def efficiency_grade(efficiency):
        for minimum, grade in EFFICIENCY_GRADES:
            if efficiency >= minimum:
                return grade
        return 'D'

    @staticmethod
    def build_dashboard(statistics, records, efficiency_goal, monthly_budget):
        """
        Summarise *statistics* for the dashboard.

        Args:
            statistics:       snapshot from StatisticsService.calculate_statistics().
            records:          the same records, used for the recent-fill-up trend.
            efficiency_goal:  target km/L.
            monthly_budget:   target spend per month.

        Returns:
            dict with grade, achievement ratios, alerts, recommendations and
            the recent trend (None when there are too few fill-ups).
        """
        average_efficiency = statistics['average_fuel_efficiency']
        average_cost_per_month = statistics['average_cost_per_month']
        trend = TrendService.recent_trend(records)

        efficiency_achievement = average_efficiency / efficiency_goal if efficiency_goal else 0
        budget_achievement = monthly_budget / average_cost_per_month if average_cost_per_month else 0

        alerts = []
        if average_efficiency < efficiency_goal:
            alerts.append({
                'type': 'warning',
                'message': (
                    f'Fuel efficiency is {efficiency_goal - average_efficiency:.1f}km/L '
                    'below your goal'
                ),
            })
        if average_cost_per_month > monthly_budget:
            alerts.append({
                'type': 'danger',
                'message': (
                    f'Monthly fuel spend is '
                    f'{format_currency(average_cost_per_month - monthly_budget)} over budget'
                ),
            })
        if trend and not trend['is_improving_efficiency']:
            alerts.append({
                'type': 'info',
                'message': 'Recent fuel efficiency is trending worse',
            })

        recommendations = []
        if average_efficiency < efficiency_goal:
            recommendations.extend([
                'Drive smoothly: avoid hard acceleration and braking',
                'Check your tyre pressures',
                'Keep up with regular maintenance',
            ])
        if statistics['expensive_price'] - statistics['cheapest_price'] > PRICE_SPREAD_THRESHOLD:
            recommendations.append('Prices vary widely between stations; favour the cheaper ones')
        if len(statistics['station_stats']) > MANY_STATIONS_THRESHOLD:
            recommendations.append('Check loyalty discounts at the stations you use most')

        return {
            'grade': InsightService.efficiency_grade(average_efficiency),
            'efficiency_goal': efficiency_goal,
            'monthly_budget': monthly_budget,
            'efficiency_achievement': efficiency_achievement,
            'budget_achievement': budget_achievement,
            'alerts': alerts,
            'recommendations': recommendations,
            'recent_trend': trend,
        }
