"""Pydantic schemas for API responses"""

import math
import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator


class HistoricalStatsResponse(BaseModel):
    """Response for GET /v1/stats/{country}"""

    country: str
    currency: str
    total_inflows: float
    total_outflows: float
    avg_daily_inflows: float
    avg_daily_outflows: float
    trend: float
    volatility: float
    window_days: int
    coerced_records: int = 0


class HistoricalStatsSchema(BaseModel):
    """Stats snapshot stored in plan metadata"""

    total_inflows: float
    total_outflows: float
    avg_daily_inflows: float
    avg_daily_outflows: float
    trend: float
    volatility: float
    window_days: int
    coerced_records: int = 0


class ScenarioFactorsSchema(BaseModel):
    inflow_factor: float
    outflow_factor: float
    rationale: str


class ProjectionFactorsSchema(BaseModel):
    scenarios: Dict[str, ScenarioFactorsSchema]
    insights: List[str]
    risks: List[str]
    confidence: float


class FlowDetailSchema(BaseModel):
    base: float
    factor: float
    result: float


class ProjectionWeekSchema(BaseModel):
    """Single projected week with optional actuals"""

    week: int
    start_date: dt.date
    end_date: dt.date
    projected_inflows: float
    inflows_detail: FlowDetailSchema
    projected_outflows: float
    outflows_detail: FlowDetailSchema
    net_cash_flow: float
    cumulative_cash_flow: float
    actual_inflows: Optional[float] = None
    actual_outflows: Optional[float] = None
    actual_net: Optional[float] = None
    variance: Optional[float] = None
    variance_absolute: Optional[float] = None


class PlanMetadataSchema(BaseModel):
    historical_days: int
    confidence: float
    factors: ProjectionFactorsSchema
    historical_stats: HistoricalStatsSchema
    seasonal_confidence: Optional[float] = None


class ProjectionPlanResponse(BaseModel):
    """Response for POST/GET /v1/projections/{country}"""

    id: str
    country: str
    created_at: dt.datetime
    expires_at: dt.datetime
    scenarios: Dict[str, List[ProjectionWeekSchema]]
    metadata: PlanMetadataSchema


class TransactionRecordSchema(BaseModel):
    """Sales or purchase-order line used in a comparison"""

    record_id: str
    date: Optional[dt.date] = None
    amount: float
    country: str
    category: str
    counterparty: str = ""
    description: str = ""
    currency: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def non_numeric_as_zero(cls, value):
        # Unparseable sheet amounts are carried as NaN, which JSON cannot encode
        if isinstance(value, float) and not math.isfinite(value):
            return 0.0
        return value


class ComparisonSummarySchema(BaseModel):
    total_variance: float
    avg_variance: float
    weeks_with_data: int
    accuracy: float


class ComparisonResponse(BaseModel):
    """Response for GET /v1/projections/{country}/comparison"""

    plan: ProjectionPlanResponse
    real_inflows: List[TransactionRecordSchema]
    real_outflows: List[TransactionRecordSchema]
    comparison_by_week: List[ProjectionWeekSchema]
    summary: ComparisonSummarySchema
