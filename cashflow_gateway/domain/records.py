"""Record helpers: amount coercion, country/date filtering and week bucketing"""

import math
from datetime import date
from typing import List, Sequence, Tuple

from cashflow_gateway.domain.currency import sum_amounts_with_conversion
from cashflow_gateway.domain.models import Country, TransactionRecord, WeekActuals


def coerce_amount(value: object) -> Tuple[float, bool]:
    """
    Turn a raw amount into a float.

    Non-numeric, empty and non-finite values become 0.0. The second element tells
    whether the value had to be coerced, so callers can count bad rows.
    """
    if isinstance(value, bool):
        return 0.0, True
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).replace(",", "").strip())
        except (TypeError, ValueError):
            return 0.0, True

    if not math.isfinite(number):
        return 0.0, True
    return number, False


def matches_country(record: TransactionRecord, country: str) -> bool:
    """Global matches everything; otherwise a case-insensitive substring match"""
    if country == Country.GLOBAL.value:
        return True
    return bool(record.country) and country.lower() in record.country.lower()


def filter_by_country_and_date_range(
    records: Sequence[TransactionRecord],
    country: str,
    start: date,
    end: date,
) -> List[TransactionRecord]:
    """Keep records for `country` dated within [start, end]; undated records are dropped"""
    return [
        r for r in records
        if r.date is not None and start <= r.date <= end and matches_country(r, country)
    ]


def group_by_week(
    inflows: Sequence[TransactionRecord],
    outflows: Sequence[TransactionRecord],
    week_ranges: Sequence[Tuple[date, date]],
    country: str,
) -> List[WeekActuals]:
    """
    Bucket inflow/outflow records into the given inclusive week ranges, in order.

    Amounts are converted to USD when `country` is Global.
    """
    normalize = country == Country.GLOBAL.value
    buckets = []

    for index, (start, end) in enumerate(week_ranges):
        week_in = [r for r in inflows if r.date is not None and start <= r.date <= end]
        week_out = [r for r in outflows if r.date is not None and start <= r.date <= end]

        total_in = sum_amounts_with_conversion(
            ((coerce_amount(r.amount)[0], r.currency_tag) for r in week_in), normalize
        )
        total_out = sum_amounts_with_conversion(
            ((coerce_amount(r.amount)[0], r.currency_tag) for r in week_out), normalize
        )

        buckets.append(
            WeekActuals(
                week=index + 1,
                total_inflows=total_in,
                total_outflows=total_out,
                net_cash_flow=total_in - total_out,
                has_data=bool(week_in or week_out),
            )
        )

    return buckets
