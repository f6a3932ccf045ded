"""Unit tests for the seasonal projection engine"""

import pytest
from datetime import date, timedelta

from cashflow_gateway.domain.models import WeeklyFinancialData, WeeklyMetrics
from cashflow_gateway.domain.seasonal import (
    aggregate_country_metrics,
    city_to_country,
    find_seasonal_match,
    project_seasonal,
)
from cashflow_gateway.utils.date_utils import one_year_before

ANCHOR = date(2026, 3, 16)


def weekly_metrics(first_week: date, count: int) -> WeeklyMetrics:
    """Weekly series whose sales equal the week index"""
    weeks = [(first_week + timedelta(weeks=i)).isoformat() for i in range(count)]
    return WeeklyMetrics(
        weeks=weeks,
        total_sales=[float(i) for i in range(count)],
        total_catering=[float(i * 10) for i in range(count)],
        total_delivery=[1.0] * count,
        avg_gross_margin=[0.3] * count,
    )


def test_project_seasonal_copies_matching_weeks():
    """Closest week to one year before the anchor starts the baseline"""
    metrics = weekly_metrics(date(2025, 1, 6), 20)  # Mondays; 2025-03-17 is index 10

    result = project_seasonal(metrics, 4, ANCHOR)

    assert result.matched_week == "2025-03-17"
    assert result.projected_sales == [10, 11, 12, 13]
    assert result.projected_catering == [100, 110, 120, 130]
    assert result.confidence == pytest.approx(0.85)


def test_project_seasonal_fills_past_end_with_trailing_average():
    """When the series runs out, the trailing 4-week average fills the rest"""
    metrics = weekly_metrics(date(2025, 1, 6), 12)  # indexes 0..11

    result = project_seasonal(metrics, 4, ANCHOR)

    assert result.projected_sales == [10, 11, 9.5, 9.5]  # avg(8, 9, 10, 11)
    assert result.confidence == pytest.approx(0.85)


def test_project_seasonal_falls_back_without_prior_year_data():
    """No week near last year's date: trailing average repeated, low confidence"""
    metrics = weekly_metrics(date(2020, 1, 6), 10)

    result = project_seasonal(metrics, 3, ANCHOR)

    assert result.matched_week is None
    assert result.confidence == pytest.approx(0.5)
    assert result.projected_sales == [7.5, 7.5, 7.5]  # avg(6, 7, 8, 9)
    assert len(result.projected_catering) == 3


def test_project_seasonal_empty_series():
    metrics = WeeklyMetrics(weeks=[], total_sales=[], total_catering=[], total_delivery=[], avg_gross_margin=[])

    result = project_seasonal(metrics, 2, ANCHOR)

    assert result.projected_sales == [0, 0]
    assert result.confidence == pytest.approx(0.5)


def test_find_seasonal_match_ties_go_to_first_occurrence():
    weeks = ["2025-03-13", "2025-03-19"]  # both 3 days from 2025-03-16
    assert find_seasonal_match(weeks, date(2025, 3, 16)) == 0


def test_find_seasonal_match_skips_unparseable_labels():
    weeks = ["Week 11", "", "2025-03-17"]
    assert find_seasonal_match(weeks, date(2025, 3, 16)) == 2


def test_one_year_before_leap_day():
    assert one_year_before(date(2028, 2, 29)) == date(2027, 2, 28)
    assert one_year_before(ANCHOR) == date(2025, 3, 16)


def test_aggregate_country_metrics_sums_country_cities():
    data = WeeklyFinancialData(
        weeks=["2025-03-10", "2025-03-17"],
        cities_data={
            "Lima": {"Sales": [100, 200], "Catering": [10, 20], "Delivery": [1, 2], "Gross margin": [0.4, 0.0]},
            "Piura": {"Sales": [50, 60], "Gross margin": [0.2, 0.3]},
            "Bogota": {"Sales": [999, 999], "Gross margin": [0.9, 0.9]},
        },
    )

    peru = aggregate_country_metrics(data, "Peru")

    assert peru.total_sales == [150, 260]
    assert peru.total_catering == [10, 20]
    assert peru.total_delivery == [1, 2]
    assert peru.avg_gross_margin == pytest.approx([0.3, 0.3])  # zero margins are skipped
    assert len(peru.weeks) == len(peru.total_sales)


def test_aggregate_country_metrics_global_and_missing():
    data = WeeklyFinancialData(
        weeks=["2025-03-10"],
        cities_data={"Lima": {"Sales": [100]}, "CDMX": {"Sales": [40]}},
    )

    assert aggregate_country_metrics(data, "Global").total_sales == pytest.approx([100 / 3.80 + 40 / 18.50])
    assert aggregate_country_metrics(data, "Colombia") is None
    assert aggregate_country_metrics(None, "Peru") is None


def test_aggregate_country_metrics_global_converts_each_city_to_usd():
    """Every city's local-currency series is normalized before summing"""
    data = WeeklyFinancialData(
        weeks=["2025-03-10", "2025-03-17"],
        cities_data={
            "Lima": {"Sales": [3800, 7600], "Catering": [380, 0]},
            "Bogota": {"Sales": [4_000_000, 4_000_000], "Delivery": [400_000, 0]},
            "Madrid": {"Sales": [50, 50]},  # unmapped city: already USD
        },
    )

    world = aggregate_country_metrics(data, "Global")

    assert world.total_sales == pytest.approx([2050, 3050])
    assert world.total_catering == pytest.approx([100, 0])
    assert world.total_delivery == pytest.approx([100, 0])


def test_aggregate_country_metrics_single_country_keeps_local_currency():
    data = WeeklyFinancialData(weeks=["2025-03-10"], cities_data={"Bogota": {"Sales": [4_000_000]}})

    assert aggregate_country_metrics(data, "Colombia").total_sales == [4_000_000]


def test_city_to_country():
    assert city_to_country("Guadalajara") == "Mexico"
    assert city_to_country("Bogota") == "Colombia"
    assert city_to_country("Madrid") == "Global"
