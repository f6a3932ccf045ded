"""Historical statistics over a trailing window of daily inflows"""

import logging
import math
from datetime import date, datetime, timezone
from typing import List, Sequence, Tuple, Union

from cashflow_gateway.domain.currency import convert_to_usd
from cashflow_gateway.domain.models import HistoricalStats, TransactionRecord
from cashflow_gateway.domain.records import coerce_amount
from cashflow_gateway.utils.date_utils import generate_date_range, trailing_window

logger = logging.getLogger(__name__)


def _as_date(now: Union[date, datetime, None]) -> date:
    if now is None:
        return datetime.now(timezone.utc).date()
    if isinstance(now, datetime):
        return now.date()
    return now


def daily_series(
    records: Sequence[TransactionRecord],
    days: List[date],
    normalize_currency: bool = False,
) -> Tuple[List[float], int]:
    """
    Sum record amounts per calendar day into a dense list aligned with `days`.

    Records dated outside `days` (or undated) are ignored. Returns the series and
    the number of amounts that had to be coerced to zero.
    """
    position = {day: i for i, day in enumerate(days)}
    totals = [0.0] * len(days)
    coerced = 0

    for record in records:
        idx = position.get(record.date) if record.date is not None else None
        if idx is None:
            continue

        amount, was_coerced = coerce_amount(record.amount)
        if was_coerced:
            coerced += 1
            logger.warning(
                "Non-numeric amount treated as zero",
                extra={"record_id": record.record_id, "raw_amount": repr(record.amount)},
            )
            continue

        if normalize_currency:
            amount = convert_to_usd(amount, record.currency_tag)
        totals[idx] += amount

    return totals, coerced


def linear_trend(values: Sequence[float]) -> float:
    """
    Ordinary least-squares slope of `values` against their index.

    slope = (nΣxy − ΣxΣy) / (nΣx² − (Σx)²); 0.0 for empty, single-point or
    constant series.
    """
    n = len(values)
    if n < 2 or max(values) == min(values):
        return 0.0

    sum_x = sum_y = sum_xy = sum_xx = 0.0
    for x, y in enumerate(values):
        sum_x += x
        sum_y += y
        sum_xy += x * y
        sum_xx += x * x

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def population_stddev(values: Sequence[float]) -> float:
    """Population standard deviation around the mean; 0.0 for an empty series"""
    n = len(values)
    if n == 0:
        return 0.0
    mean = sum(values) / n
    return math.sqrt(sum((v - mean) ** 2 for v in values) / n)


def compute_stats(
    sales: Sequence[TransactionRecord],
    purchases: Sequence[TransactionRecord],
    window_days: int,
    normalize_currency: bool = False,
    now: Union[date, datetime, None] = None,
) -> HistoricalStats:
    """
    Reduce sales (inflows) and purchase orders (outflows) to trailing-window stats.

    The window covers the `window_days` calendar days ending on `now` (inclusive).
    Trend and volatility are computed over the same daily inflow series used for
    the averages, so avg_daily_inflows == total_inflows / window_days.

    Empty input or a non-positive window yields all-zero stats.
    """
    if window_days <= 0:
        return HistoricalStats(
            total_inflows=0.0,
            total_outflows=0.0,
            avg_daily_inflows=0.0,
            avg_daily_outflows=0.0,
            trend=0.0,
            volatility=0.0,
            window_days=0,
        )

    start, end = trailing_window(_as_date(now), window_days)
    days = generate_date_range(start, end)

    daily_inflows, coerced_in = daily_series(sales, days, normalize_currency)
    daily_outflows, coerced_out = daily_series(purchases, days, normalize_currency)

    total_inflows = sum(daily_inflows)
    total_outflows = sum(daily_outflows)

    return HistoricalStats(
        total_inflows=total_inflows,
        total_outflows=total_outflows,
        avg_daily_inflows=total_inflows / window_days,
        avg_daily_outflows=total_outflows / window_days,
        trend=linear_trend(daily_inflows),
        volatility=population_stddev(daily_inflows),
        window_days=window_days,
        coerced_records=coerced_in + coerced_out,
    )
