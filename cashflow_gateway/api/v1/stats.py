"""GET /v1/stats/{country} - Trailing-window historical statistics"""

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from cashflow_gateway.api.dependencies import get_now, get_request_id, get_sheets_client
from cashflow_gateway.api.v1.schemas import HistoricalStatsResponse
from cashflow_gateway.config import settings
from cashflow_gateway.domain.currency import COUNTRY_CURRENCIES
from cashflow_gateway.domain.exceptions import SpreadsheetAPIError
from cashflow_gateway.domain.models import Country, HistoricalStats, TransactionRecord
from cashflow_gateway.domain.records import filter_by_country_and_date_range
from cashflow_gateway.domain.statistics import compute_stats
from cashflow_gateway.infrastructure.clients.sheets import SheetsClient
from cashflow_gateway.infrastructure.observability.metrics import (
    coerced_amounts_counter,
    sheets_fetch_failures_counter,
)
from cashflow_gateway.utils.date_utils import trailing_window

router = APIRouter()


def build_country_stats(
    country: str,
    sales: Sequence[TransactionRecord],
    purchases: Sequence[TransactionRecord],
    days: int,
    now: datetime,
) -> HistoricalStats:
    """Filter records to `country` and the trailing window, then aggregate"""
    start, end = trailing_window(now.date(), days)
    stats = compute_stats(
        filter_by_country_and_date_range(sales, country, start, end),
        filter_by_country_and_date_range(purchases, country, start, end),
        days,
        normalize_currency=country == Country.GLOBAL.value,
        now=now,
    )
    if stats.coerced_records:
        coerced_amounts_counter.inc(stats.coerced_records)
    return stats


@router.get("/stats/{country}", response_model=HistoricalStatsResponse)
async def get_stats(
    country: Country,
    request: Request,
    days: Optional[int] = Query(None, ge=1, le=366, description="Trailing window in days"),
    now: datetime = Depends(get_now),
    sheets_client: SheetsClient = Depends(get_sheets_client),
):
    """
    Aggregate sales and purchase orders over the trailing window.

    Global converts every amount to USD before summing.
    """
    request_id = get_request_id(request)
    window = days or settings.historical_days

    try:
        sales, purchases = await sheets_client.get_records()
    except SpreadsheetAPIError as e:
        sheets_fetch_failures_counter.inc()
        logging.error(f"Spreadsheet API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Spreadsheet service unavailable")

    stats = build_country_stats(country.value, sales, purchases, window, now)

    return HistoricalStatsResponse(
        country=country.value,
        currency=COUNTRY_CURRENCIES[country.value],
        **asdict(stats),
    )
