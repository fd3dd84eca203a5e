import datetime as dt
import math

import pytest

from vaccine_report.aggregate import (
    series_by_date_manufacturer,
    series_points,
    totals_by_country,
    worldwide_total,
)
from vaccine_report.models import NormalizedRecord, SeriesKey


def _rec(location, day, vaccine, total):
    return NormalizedRecord(
        location=location,
        date=dt.date(2021, 1, day),
        vaccine=vaccine,
        total_vaccinations=total,
    )


SAMPLE = [
    _rec("US", 2, "Pfizer", 2.0),
    _rec("DE", 1, "Moderna", 0.3),
    _rec("US", 1, "Pfizer", 1.0),
    _rec("FR", 1, "Moderna", None),
    _rec("DE", 1, "Pfizer", 0.4),
    _rec("FR", 2, "Pfizer", 0.1),
]


def test_two_day_us_scenario():
    records = [_rec("US", 1, "Pfizer", 1.0), _rec("US", 2, "Pfizer", 2.0)]

    assert worldwide_total(records) == 3.0
    assert [(c.location, c.total) for c in totals_by_country(records)] == [("US", 3.0)]
    assert list(series_by_date_manufacturer(records).items()) == [
        (SeriesKey(dt.date(2021, 1, 1), "Pfizer"), 1.0),
        (SeriesKey(dt.date(2021, 1, 2), "Pfizer"), 2.0),
    ]


def test_absent_count_is_zero_for_totals_but_excluded_from_series():
    records = [_rec("FR", 1, "Moderna", None)]

    assert worldwide_total(records) == 0.0
    assert [(c.location, c.total) for c in totals_by_country(records)] == [("FR", 0.0)]
    assert series_by_date_manufacturer(records) == {}


def test_empty_input_is_not_an_error():
    assert worldwide_total([]) == 0.0
    assert totals_by_country([]) == []
    assert series_by_date_manufacturer([]) == {}
    assert series_points({}) == []


def test_worldwide_equals_sum_of_country_totals():
    countries = totals_by_country(SAMPLE)

    assert worldwide_total(SAMPLE) == pytest.approx(math.fsum(c.total for c in countries))
    assert len({c.location for c in countries}) == len(countries)


def test_countries_sorted_descending():
    totals = [c.total for c in totals_by_country(SAMPLE)]

    assert totals == sorted(totals, reverse=True)
    assert totals_by_country(SAMPLE)[0].location == "US"


def test_country_ties_keep_encounter_order():
    first = [_rec("BR", 1, "Pfizer", 1.0), _rec("AR", 1, "Pfizer", 1.0)]
    second = list(reversed(first))

    assert [c.location for c in totals_by_country(first)] == ["BR", "AR"]
    assert [c.location for c in totals_by_country(second)] == ["AR", "BR"]


def test_series_orders_by_date_then_first_seen_manufacturer():
    series = series_by_date_manufacturer(SAMPLE)

    assert list(series) == [
        SeriesKey(dt.date(2021, 1, 1), "Pfizer"),
        SeriesKey(dt.date(2021, 1, 1), "Moderna"),
        SeriesKey(dt.date(2021, 1, 2), "Pfizer"),
    ]
    assert series[SeriesKey(dt.date(2021, 1, 1), "Pfizer")] == pytest.approx(1.4)
    assert series[SeriesKey(dt.date(2021, 1, 2), "Pfizer")] == pytest.approx(2.1)
    assert all(total >= 0 for total in series.values())


def test_series_manufacturer_order_ignores_absent_records():
    records = [
        _rec("FR", 1, "Moderna", None),
        _rec("US", 1, "Pfizer", 1.0),
        _rec("DE", 1, "Moderna", 0.5),
    ]

    assert [key.vaccine for key in series_by_date_manufacturer(records)] == [
        "Pfizer",
        "Moderna",
    ]


def test_aggregations_are_idempotent():
    assert totals_by_country(SAMPLE) == totals_by_country(SAMPLE)
    assert series_by_date_manufacturer(SAMPLE) == series_by_date_manufacturer(SAMPLE)
    assert worldwide_total(SAMPLE) == worldwide_total(SAMPLE)


def test_series_points_preserve_order():
    points = series_points(series_by_date_manufacturer(SAMPLE))

    assert [(p.date.day, p.vaccine) for p in points] == [
        (1, "Pfizer"),
        (1, "Moderna"),
        (2, "Pfizer"),
    ]
