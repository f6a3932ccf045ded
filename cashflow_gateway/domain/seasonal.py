"""Seasonal baseline projection from the prior-year weekly financial model"""

from datetime import date, datetime
from typing import List, Optional, Sequence

from cashflow_gateway.domain.currency import COUNTRY_CURRENCIES, convert_to_usd
from cashflow_gateway.domain.models import (
    Country,
    SeasonalProjection,
    WeeklyFinancialData,
    WeeklyMetrics,
)
from cashflow_gateway.utils.date_utils import one_year_before, parse_date

SEASONAL_CONFIDENCE = 0.85
FALLBACK_CONFIDENCE = 0.5
TRAILING_WEEKS = 4

# A prior-year week further than this from the target date is not a seasonal match
SEASONAL_MATCH_TOLERANCE_DAYS = 28

CITY_COUNTRIES = {
    "Lima": Country.PERU.value,
    "Piura": Country.PERU.value,
    "Bogota": Country.COLOMBIA.value,
    "CDMX": Country.MEXICO.value,
    "Guadalajara": Country.MEXICO.value,
}


def city_to_country(city: str) -> str:
    """Map a weekly-model city to its country; unknown cities only count for Global"""
    return CITY_COUNTRIES.get(city, Country.GLOBAL.value)


def _add_series(totals: List[float], values: Optional[Sequence[float]], currency: Optional[str] = None) -> None:
    for idx, value in enumerate(values or []):
        if idx < len(totals):
            value = value or 0
            totals[idx] += convert_to_usd(value, currency) if currency else value


def aggregate_country_metrics(data: Optional[WeeklyFinancialData], country: str) -> Optional[WeeklyMetrics]:
    """
    Sum sales, catering and delivery across a country's cities, week by week.

    Gross margin is the mean of the non-zero city margins for each week. Returns
    None when the payload is missing or has no city for the country.

    Global sums every city after converting its amounts to USD with the city's
    local currency, matching the USD stats it is projected against.
    """
    if not data or not data.cities_data:
        return None

    is_global = country == Country.GLOBAL.value
    cities = [
        city for city in data.cities_data
        if is_global or city_to_country(city) == country
    ]
    if not cities:
        return None

    size = len(data.weeks)
    total_sales = [0.0] * size
    total_catering = [0.0] * size
    total_delivery = [0.0] * size
    margins: List[Sequence[float]] = []

    for city in cities:
        metrics = data.cities_data.get(city) or {}
        currency = COUNTRY_CURRENCIES[city_to_country(city)] if is_global else None
        _add_series(total_sales, metrics.get("Sales"), currency)
        _add_series(total_catering, metrics.get("Catering"), currency)
        _add_series(total_delivery, metrics.get("Delivery"), currency)
        if metrics.get("Gross margin"):
            margins.append(metrics["Gross margin"])

    avg_gross_margin = []
    for idx in range(size):
        week_margins = [m[idx] for m in margins if idx < len(m) and m[idx]]
        avg_gross_margin.append(sum(week_margins) / len(week_margins) if week_margins else 0.0)

    return WeeklyMetrics(
        weeks=list(data.weeks),
        total_sales=total_sales,
        total_catering=total_catering,
        total_delivery=total_delivery,
        avg_gross_margin=avg_gross_margin,
    )


def trailing_average(values: Sequence[float], weeks: int = TRAILING_WEEKS) -> float:
    """Mean of the last `weeks` values; 0.0 for an empty series"""
    recent = list(values)[-weeks:]
    return sum(recent) / len(recent) if recent else 0.0


def find_seasonal_match(weeks: Sequence[str], target: date) -> Optional[int]:
    """
    Index of the week closest to `target`, first occurrence winning ties.

    None when no parseable week lies within SEASONAL_MATCH_TOLERANCE_DAYS.
    """
    closest_idx = None
    min_diff = None

    for idx, label in enumerate(weeks):
        week_date = parse_date(label)
        if week_date is None:
            continue
        diff = abs((week_date - target).days)
        if min_diff is None or diff < min_diff:
            min_diff = diff
            closest_idx = idx

    if closest_idx is None or min_diff > SEASONAL_MATCH_TOLERANCE_DAYS:
        return None
    return closest_idx


def project_seasonal(
    weekly_metrics: WeeklyMetrics,
    future_week_count: int,
    anchor_date: date,
) -> SeasonalProjection:
    """
    Project `future_week_count` weeks by copying last year's matching weeks.

    The week closest to one year before `anchor_date` starts the baseline. Weeks
    past the end of the series are filled with the trailing 4-week average. With
    no seasonal match at all, the trailing average is repeated for every week and
    confidence drops from 0.85 to 0.5.
    """
    if isinstance(anchor_date, datetime):
        anchor_date = anchor_date.date()

    sales_avg = trailing_average(weekly_metrics.total_sales)
    catering_avg = trailing_average(weekly_metrics.total_catering)
    delivery_avg = trailing_average(weekly_metrics.total_delivery)

    match_idx = find_seasonal_match(weekly_metrics.weeks, one_year_before(anchor_date))

    if match_idx is None:
        return SeasonalProjection(
            projected_sales=[sales_avg] * future_week_count,
            projected_catering=[catering_avg] * future_week_count,
            projected_delivery=[delivery_avg] * future_week_count,
            confidence=FALLBACK_CONFIDENCE,
        )

    sales: List[float] = []
    catering: List[float] = []
    delivery: List[float] = []
    for offset in range(future_week_count):
        idx = match_idx + offset
        if idx < len(weekly_metrics.total_sales):
            sales.append(weekly_metrics.total_sales[idx] or 0.0)
            catering.append(weekly_metrics.total_catering[idx] or 0.0)
            delivery.append(weekly_metrics.total_delivery[idx] or 0.0)
        else:
            sales.append(sales_avg)
            catering.append(catering_avg)
            delivery.append(delivery_avg)

    return SeasonalProjection(
        projected_sales=sales,
        projected_catering=catering,
        projected_delivery=delivery,
        confidence=SEASONAL_CONFIDENCE,
        matched_week=weekly_metrics.weeks[match_idx],
    )
