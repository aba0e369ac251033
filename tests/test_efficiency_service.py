"""
Tests for EfficiencyService: per-record distance, efficiency and price.
"""
import pytest

from services.efficiency_service import EfficiencyService, date_key, month_key


class TestFuelEfficiency:
    def test_distance_over_litres(self, make_record):
        previous = make_record('2024-01-01', 40, 6000, 1000)
        current = make_record('2024-02-01', 40, 6200, 1500)

        assert EfficiencyService.fuel_efficiency(current, previous) == pytest.approx(12.5)

    def test_first_record_has_no_efficiency(self, make_record):
        first = make_record('2024-01-01', 40, 6000, 1000)

        assert EfficiencyService.fuel_efficiency(first, None) is None

    @pytest.mark.parametrize('mileage', [1000, 900])
    def test_non_positive_distance_is_undefined_not_negative(self, make_record, mileage):
        previous = make_record('2024-01-01', 40, 6000, 1000)
        current = make_record('2024-02-01', 40, 6200, mileage)

        assert EfficiencyService.fuel_efficiency(current, previous) is None
        assert EfficiencyService.distance_between(current, previous) is None


class TestPricePerLiter:
    def test_cost_over_amount(self, make_record):
        assert EfficiencyService.price_per_liter(make_record('2024-01-01', 40, 6000, 0)) == 150

    def test_zero_amount_guarded(self, make_record):
        assert EfficiencyService.price_per_liter(make_record('2024-01-01', 0, 6000, 0)) == 0


class TestEfficiencySeries:
    def test_previous_is_chronological_not_insertion_order(self, make_record):
        late = make_record('2024-03-01', 50, 8000, 2100)
        early = make_record('2024-01-01', 40, 6000, 1000)
        middle = make_record('2024-02-01', 40, 6200, 1500)

        series = EfficiencyService.efficiency_series([late, early, middle])

        assert [p['date'] for p in series] == ['2024-01-01', '2024-02-01', '2024-03-01']
        assert series[0]['efficiency'] is None
        assert series[1]['efficiency'] == pytest.approx(12.5)
        assert series[2]['distance'] == 600
        assert series[2]['efficiency'] == pytest.approx(12.0)

    def test_odometer_rollback_never_negative(self, make_record):
        records = [
            make_record('2024-01-01', 40, 6000, 5000),
            make_record('2024-01-10', 40, 6000, 4000),
            make_record('2024-01-20', 40, 6000, 4400),
        ]

        efficiencies = [p['efficiency'] for p in EfficiencyService.efficiency_series(records)]

        assert efficiencies == [None, None, pytest.approx(10.0)]


class TestKeys:
    def test_string_and_date_values_share_keys(self, make_record):
        record = make_record('2024-05-09', 40, 6000, 0)

        assert date_key(record) == '2024-05-09'
        assert month_key(record) == '2024-05'
