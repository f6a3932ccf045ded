"""Projection plan assembly and lifecycle"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from cashflow_gateway.domain.models import (
    SCENARIO_NAMES,
    HistoricalStats,
    PlanMetadata,
    ProjectionFactors,
    ProjectionPlan,
    ScenarioFactors,
    SeasonalProjection,
)
from cashflow_gateway.domain.scenarios import apply_scenario, calculate_base_projections

PLAN_TTL_DAYS = 28


def blend_confidence(factors: ProjectionFactors, seasonal: Optional[SeasonalProjection]) -> float:
    """Average in the seasonal confidence when it beats the factor confidence"""
    if seasonal is None or seasonal.confidence <= factors.confidence:
        return factors.confidence
    return (factors.confidence + seasonal.confidence) / 2


def build_projection_plan(
    country: str,
    stats: HistoricalStats,
    factors: ProjectionFactors,
    now: datetime,
    weeks: int = 4,
    seasonal: Optional[SeasonalProjection] = None,
    ttl_days: int = PLAN_TTL_DAYS,
) -> ProjectionPlan:
    """
    Assemble a plan with base, optimistic and conservative scenarios.

    All three scenarios start from the same baseline (seasonal when available)
    and each gets its own cumulative accumulator. The plan expires `ttl_days`
    after creation.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    baseline = calculate_base_projections(stats, weeks, now.date(), seasonal)
    scenarios = {name: apply_scenario(baseline, factors.scenarios[name]) for name in SCENARIO_NAMES}

    confidence = blend_confidence(factors, seasonal)
    insights = list(factors.insights)
    if confidence != factors.confidence:
        insights.insert(
            0,
            f"Projection enhanced with the weekly financial model (confidence: {seasonal.confidence * 100:.0f}%)",
        )

    return ProjectionPlan(
        id=f"plan-{country}-{int(now.timestamp() * 1000)}",
        country=country,
        created_at=now,
        expires_at=now + timedelta(days=ttl_days),
        scenarios=scenarios,
        metadata=PlanMetadata(
            historical_days=stats.window_days,
            confidence=confidence,
            factors=ProjectionFactors(
                scenarios=dict(factors.scenarios),
                insights=insights,
                risks=list(factors.risks),
                confidence=confidence,
            ),
            historical_stats=stats,
            seasonal_confidence=seasonal.confidence if seasonal is not None else None,
        ),
    )


def with_fixed_factors(factors: ProjectionFactors, fixed: Dict[str, ScenarioFactors]) -> ProjectionFactors:
    """Keep the analysis (insights, risks, confidence) but swap in a fixed factor set"""
    return ProjectionFactors(
        scenarios=dict(fixed),
        insights=list(factors.insights),
        risks=list(factors.risks),
        confidence=factors.confidence,
    )


def is_plan_expired(plan: ProjectionPlan, now: datetime) -> bool:
    """A plan is valid until expires_at and expired strictly after it"""
    expires_at = plan.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now > expires_at
