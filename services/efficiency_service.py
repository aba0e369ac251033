"""
Efficiency Service
==================
Distance and fuel-efficiency figures derived from consecutive fill-ups.

A fill-up's efficiency is the distance driven since the previous fill-up
divided by the litres put in at this one.  "Previous" always means the
immediately preceding record in ascending date order across the whole log.
The first record has no predecessor, and a zero or negative odometer delta
(rollback, duplicate reading, misordered data) yields no figure at all;
neither case is ever reported as zero or negative efficiency.

Records may be FuelRecord rows or any object exposing ``date``, ``amount``,
``cost``, ``mileage`` and ``station``.  ``date`` may be a ``datetime.date``
or an ISO ``YYYY-MM-DD`` string.

Primary entry points
--------------------
  fuel_efficiency()    — km/L for a record against its predecessor, or None
  distance_between()   — positive odometer delta, or None
  price_per_liter()    — cost / amount
  sort_records()       — stable ascending sort by date
  efficiency_series()  — per-record chart points over the sorted log
"""


def date_key(record):
    """ISO ``YYYY-MM-DD`` string for a record's date."""
    value = record.date
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)


def month_key(record):
    """``YYYY-MM`` grouping key for a record."""
    return date_key(record)[:7]


class EfficiencyService:
    """Pure per-record derivations; nothing here touches the database."""

    @staticmethod
    def sort_records(records):
        """Return a new list sorted ascending by date (ties keep input order)."""
        return sorted(records, key=date_key)

    @staticmethod
    def distance_between(current, previous):
        """Kilometres driven from *previous* to *current*, or None if not positive."""
        if previous is None:
            return None
        distance = current.mileage - previous.mileage
        if distance <= 0:
            return None
        return distance

    @staticmethod
    def fuel_efficiency(current, previous):
        """
        km/L for *current* measured against *previous*.

        Returns None when there is no previous record, when the odometer did
        not advance, or when the fill-up amount is zero.
        """
        distance = EfficiencyService.distance_between(current, previous)
        if distance is None or not current.amount:
            return None
        return distance / current.amount

    @staticmethod
    def price_per_liter(record):
        if not record.amount:
            return 0
        return record.cost / record.amount

    @staticmethod
    def efficiency_series(records):
        """
        One chart point per record in ascending date order.

        Each point carries the record's date, fill-up figures, unit price and
        the distance/efficiency against its chronological predecessor (None
        where undefined).
        """
        series = []
        previous = None
        for record in EfficiencyService.sort_records(records):
            series.append({
                'date': date_key(record),
                'station': record.station,
                'amount': record.amount,
                'cost': record.cost,
                'price_per_liter': EfficiencyService.price_per_liter(record),
                'distance': EfficiencyService.distance_between(record, previous),
                'efficiency': EfficiencyService.fuel_efficiency(record, previous),
            })
            previous = record
        return series
