"""/v1/projections/{country} - Generate, fetch and compare cash-flow projection plans"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from cashflow_gateway.api.dependencies import (
    get_now,
    get_request_id,
    get_sheets_client,
    get_weekly_model_client,
)
from cashflow_gateway.api.v1.schemas import ComparisonResponse, ProjectionPlanResponse
from cashflow_gateway.api.v1.stats import build_country_stats
from cashflow_gateway.config import settings
from cashflow_gateway.domain.comparison import accuracy_metrics, compare_to_actual
from cashflow_gateway.domain.exceptions import PlanNotFoundError, SpreadsheetAPIError
from cashflow_gateway.domain.models import Country, ProjectionPlan
from cashflow_gateway.domain.planning import build_projection_plan, is_plan_expired, with_fixed_factors
from cashflow_gateway.domain.scenarios import FIXED_SCENARIO_FACTORS, derive_scenario_factors
from cashflow_gateway.domain.seasonal import aggregate_country_metrics, project_seasonal
from cashflow_gateway.domain.serialization import comparison_to_dict, plan_to_dict
from cashflow_gateway.infrastructure.clients.sheets import SheetsClient
from cashflow_gateway.infrastructure.clients.weekly_model import WeeklyModelClient
from cashflow_gateway.infrastructure.database.repositories import PlanRepository
from cashflow_gateway.infrastructure.database.session import get_db
from cashflow_gateway.infrastructure.observability.logging import log_comparison, log_plan_generated
from cashflow_gateway.infrastructure.observability.metrics import (
    plan_generated_counter,
    record_comparison,
    record_plan_lookup,
    sheets_fetch_failures_counter,
)

router = APIRouter()


async def generate_plan(
    country: str,
    weeks: int,
    now: datetime,
    sheets_client: SheetsClient,
    weekly_client: WeeklyModelClient,
) -> ProjectionPlan:
    """
    Build a fresh projection plan for `country`.

    Flow:
    1. Fetch sales/purchase records and the weekly model concurrently
    2. Aggregate trailing-window stats
    3. Seasonal baseline from last year's matching weeks, when the model has the country
    4. Derive (or fix) scenario factors and apply them to the baseline
    """
    (sales, purchases), weekly_data = await asyncio.gather(
        sheets_client.get_records(),
        weekly_client.get_weekly_data(),
    )

    stats = build_country_stats(country, sales, purchases, settings.historical_days, now)

    seasonal = None
    metrics = aggregate_country_metrics(weekly_data, country)
    if metrics is not None:
        seasonal = project_seasonal(metrics, weeks, now.date())
        logging.info(
            "Seasonal baseline computed",
            extra={"country": country, "matched_week": seasonal.matched_week, "confidence": seasonal.confidence},
        )

    factors = derive_scenario_factors(stats, country)
    if settings.scenario_factor_mode == "fixed":
        factors = with_fixed_factors(factors, FIXED_SCENARIO_FACTORS)

    return build_projection_plan(
        country,
        stats,
        factors,
        now,
        weeks=weeks,
        seasonal=seasonal,
        ttl_days=settings.plan_ttl_days,
    )


async def _generate_and_store(
    country: str,
    weeks: int,
    now: datetime,
    request_id: str,
    db: Session,
    sheets_client: SheetsClient,
    weekly_client: WeeklyModelClient,
) -> ProjectionPlan:
    start_time = time.time()

    plan = await generate_plan(country, weeks, now, sheets_client, weekly_client)
    PlanRepository(db).save(country, plan)
    db.commit()

    seasonal = plan.metadata.seasonal_confidence is not None
    plan_generated_counter.labels(country=country, baseline="seasonal" if seasonal else "trend").inc()
    log_plan_generated(
        request_id,
        country,
        plan.id,
        plan.metadata.confidence,
        seasonal,
        (time.time() - start_time) * 1000,
    )
    return plan


@router.post("/projections/{country}", response_model=ProjectionPlanResponse)
async def create_projection(
    country: Country,
    request: Request,
    weeks: Optional[int] = Query(None, ge=1, le=52, description="Weeks to project"),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
    sheets_client: SheetsClient = Depends(get_sheets_client),
    weekly_client: WeeklyModelClient = Depends(get_weekly_model_client),
):
    """Generate a new plan, replacing the stored one for this country"""
    request_id = get_request_id(request)

    try:
        plan = await _generate_and_store(
            country.value, weeks or settings.projection_weeks, now, request_id, db, sheets_client, weekly_client
        )
        return ProjectionPlanResponse.model_validate(plan_to_dict(plan))

    except SpreadsheetAPIError as e:
        sheets_fetch_failures_counter.inc()
        db.rollback()
        logging.error(f"Spreadsheet API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Spreadsheet service unavailable")

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/projections/{country}", response_model=ProjectionPlanResponse)
async def get_projection(
    country: Country,
    request: Request,
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
    sheets_client: SheetsClient = Depends(get_sheets_client),
    weekly_client: WeeklyModelClient = Depends(get_weekly_model_client),
):
    """
    Return the stored plan for this country.

    A missing or expired plan is regenerated and stored before returning.
    """
    request_id = get_request_id(request)

    try:
        plan = PlanRepository(db).load(country.value)
        expired = plan is not None and is_plan_expired(plan, now)
        record_plan_lookup(found=plan is not None, expired=expired)

        if plan is None or expired:
            plan = await _generate_and_store(
                country.value, settings.projection_weeks, now, request_id, db, sheets_client, weekly_client
            )
        return ProjectionPlanResponse.model_validate(plan_to_dict(plan))

    except SpreadsheetAPIError as e:
        sheets_fetch_failures_counter.inc()
        db.rollback()
        logging.error(f"Spreadsheet API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Spreadsheet service unavailable")

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/projections/{country}/comparison", response_model=ComparisonResponse)
async def get_comparison(
    country: Country,
    request: Request,
    scenario: Literal["base", "optimistic", "conservative"] = Query("base"),
    db: Session = Depends(get_db),
    sheets_client: SheetsClient = Depends(get_sheets_client),
):
    """
    Compare the stored plan against freshly fetched actuals.

    Returns per-week variance and an aggregate accuracy score.
    """
    request_id = get_request_id(request)

    try:
        plan = PlanRepository(db).load(country.value)
        if plan is None:
            raise PlanNotFoundError(f"No projection plan stored for {country.value}")

        sales, purchases = await sheets_client.get_records()
        comparison = compare_to_actual(plan, sales, purchases, scenario=scenario)

        metrics = accuracy_metrics(comparison)
        record_comparison(country.value, metrics["accuracy"])
        log_comparison(request_id, country.value, plan.id, metrics, comparison.summary.weeks_with_data)

        return ComparisonResponse.model_validate(comparison_to_dict(comparison))

    except PlanNotFoundError as e:
        logging.warning(f"Plan not found: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))

    except SpreadsheetAPIError as e:
        sheets_fetch_failures_counter.inc()
        logging.error(f"Spreadsheet API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Spreadsheet service unavailable")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
