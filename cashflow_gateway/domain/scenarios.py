"""Scenario factor derivation and application to baseline weekly projections"""

from dataclasses import replace
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from cashflow_gateway.domain.models import (
    Country,
    FlowDetail,
    HistoricalStats,
    ProjectionFactors,
    ProjectionWeek,
    ScenarioFactors,
    SeasonalProjection,
)

DAYS_PER_WEEK = 7

# Static growth assumptions over the prior-year seasonal baseline
FIXED_SCENARIO_FACTORS: Dict[str, ScenarioFactors] = {
    "base": ScenarioFactors(
        inflow_factor=1.10,
        outflow_factor=1.05,
        rationale="Base scenario: 10% growth over last year's baseline",
    ),
    "optimistic": ScenarioFactors(
        inflow_factor=1.18,
        outflow_factor=1.08,
        rationale="Optimistic scenario: strong commercial traction (+18%)",
    ),
    "conservative": ScenarioFactors(
        inflow_factor=1.02,
        outflow_factor=1.03,
        rationale="Conservative scenario: flat or minimal growth (+2%)",
    ),
}

MARKET_NOTES = {
    Country.PERU.value: "Peruvian market: account for Fiestas Patrias and year-end seasonality",
    Country.COLOMBIA.value: "Colombian market: check the impact of local public holidays",
    Country.MEXICO.value: "Mexican market: account for the corporate events season",
}


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def derive_scenario_factors(stats: HistoricalStats, country: str) -> ProjectionFactors:
    """
    Derive base/optimistic/conservative factors from trend and volatility.

    Factor rules:
    - Trend stronger than 5% of the daily average moves the base inflow factor,
      capped at +10% / -8%
    - Outflows follow inflows at 70% of the adjustment
    - Scenario spread widens with the coefficient of variation:
      8% when stable (CV < 0.2), 15% when volatile (CV > 0.4), 12% otherwise
    - Every factor is soft-clamped so no scenario leaves roughly 0.80-1.25

    Confidence starts at 0.75 and is adjusted for stability, history length and
    trend strength, then clamped to 0.3-0.95.
    """
    avg_in = stats.avg_daily_inflows
    has_inflows = avg_in > 0

    trend_pct = (stats.trend / avg_in) * 100 if has_inflows else 0.0
    trending_up = trend_pct > 0
    trend_strength = abs(trend_pct)

    cv = stats.volatility / avg_in if has_inflows else 0.0
    is_stable = has_inflows and cv < 0.2
    is_volatile = cv > 0.4

    base_in = 1.0
    if trending_up and trend_strength > 5:
        base_in += min(trend_pct / 100, 0.10)
    elif not trending_up and trend_strength > 5:
        base_in -= min(trend_strength / 100, 0.08)
    base_out = 1.0 + (base_in - 1.0) * 0.7

    spread = 0.15 if is_volatile else 0.08 if is_stable else 0.12
    volatility_label = "low" if is_stable else "high" if is_volatile else "moderate"

    scenarios = {
        "base": ScenarioFactors(
            inflow_factor=_clamp(base_in, 0.85, 1.15),
            outflow_factor=_clamp(base_out, 0.90, 1.10),
            rationale=(
                f"Projection based on a {'positive' if trending_up else 'negative'} trend of "
                f"{trend_strength:.1f}% and {volatility_label} volatility"
            ),
        ),
        "optimistic": ScenarioFactors(
            inflow_factor=_clamp(base_in + spread, 1.05, 1.25),
            outflow_factor=_clamp(base_out - spread * 0.5, 0.85, 1.05),
            rationale="Optimistic scenario assuming improving conditions and lower costs",
        ),
        "conservative": ScenarioFactors(
            inflow_factor=_clamp(base_in - spread, 0.80, 1.10),
            outflow_factor=_clamp(base_out + spread * 0.5, 0.95, 1.15),
            rationale="Conservative scenario assuming a slowdown and rising costs",
        ),
    }

    insights: List[str] = []
    risks: List[str] = []

    if trending_up:
        insights.append(f"Positive trend: inflows growing {trend_strength:.1f}% on average")
    else:
        insights.append(f"Negative trend: inflows shrinking {trend_strength:.1f}% on average")

    if is_stable:
        insights.append(f"Stable flows with low volatility (CV: {cv * 100:.1f}%)")
    elif is_volatile:
        insights.append(f"High volatility (CV: {cv * 100:.1f}%) - projections carry more risk")

    if has_inflows:
        ratio = stats.avg_daily_outflows / avg_in
        if ratio > 0.8:
            insights.append(f"High outflow/inflow ratio ({ratio * 100:.0f}%) - watch margins")
        else:
            insights.append(f"Healthy margin: outflows are {ratio * 100:.0f}% of inflows")
        if ratio > 0.85:
            risks.append("Tight operating margin - exposed to cost increases")
    else:
        risks.append("No inflows in the historical window - projections rely on outflows only")

    if country in MARKET_NOTES:
        insights.append(MARKET_NOTES[country])

    if is_volatile:
        risks.append("High volatility can push actuals more than 15% away from the projection")
    if not trending_up and trend_strength > 3:
        risks.append("Persistent negative trend could reduce projected inflows")
    if stats.window_days < 20:
        risks.append(f"Limited history ({stats.window_days} days) - less reliable projections")

    confidence = 0.75
    if is_stable:
        confidence += 0.15
    elif is_volatile:
        confidence -= 0.20
    if stats.window_days >= 30:
        confidence += 0.10
    elif stats.window_days < 15:
        confidence -= 0.15
    if trend_strength > 10:
        confidence -= 0.05

    return ProjectionFactors(
        scenarios=scenarios,
        insights=insights,
        risks=risks or ["No significant risks detected in historical data"],
        confidence=_clamp(confidence, 0.3, 0.95),
    )


def calculate_base_projections(
    stats: HistoricalStats,
    weeks: int,
    start_date: date,
    seasonal: Optional[SeasonalProjection] = None,
) -> List[ProjectionWeek]:
    """
    Build unadjusted baseline weeks (factor 1.0) starting at `start_date`.

    Weekly inflows come from the seasonal projection when one is given, otherwise
    from the daily average plus a linear trend adjustment. Outflows are always the
    daily average times seven. Each week spans seven days, end date inclusive.
    """
    baseline_out = stats.avg_daily_outflows * DAYS_PER_WEEK
    projections = []
    cumulative = 0.0

    for week in range(1, weeks + 1):
        week_start = start_date + timedelta(days=(week - 1) * DAYS_PER_WEEK)
        week_end = week_start + timedelta(days=DAYS_PER_WEEK - 1)

        if seasonal is not None and week - 1 < len(seasonal.projected_sales):
            baseline_in = seasonal.projected_sales[week - 1]
        else:
            baseline_in = stats.avg_daily_inflows * DAYS_PER_WEEK + stats.trend * DAYS_PER_WEEK * week

        net = baseline_in - baseline_out
        cumulative += net

        projections.append(
            ProjectionWeek(
                week=week,
                start_date=week_start,
                end_date=week_end,
                projected_inflows=baseline_in,
                inflows_detail=FlowDetail(base=baseline_in, factor=1.0, result=baseline_in),
                projected_outflows=baseline_out,
                outflows_detail=FlowDetail(base=baseline_out, factor=1.0, result=baseline_out),
                net_cash_flow=net,
                cumulative_cash_flow=cumulative,
            )
        )

    return projections


def apply_scenario(baseline_weeks: Sequence[ProjectionWeek], factors: ScenarioFactors) -> List[ProjectionWeek]:
    """
    Apply scenario multipliers to baseline weeks, returning new week objects.

    The cumulative cash flow is a left fold starting at 0 and local to this call,
    so scenarios built from the same baseline never share running state.
    """
    cumulative = 0.0
    adjusted = []

    for week in baseline_weeks:
        inflows = week.inflows_detail.base * factors.inflow_factor
        outflows = week.outflows_detail.base * factors.outflow_factor
        net = inflows - outflows
        cumulative += net

        adjusted.append(
            replace(
                week,
                projected_inflows=inflows,
                inflows_detail=FlowDetail(base=week.inflows_detail.base, factor=factors.inflow_factor, result=inflows),
                projected_outflows=outflows,
                outflows_detail=FlowDetail(base=week.outflows_detail.base, factor=factors.outflow_factor, result=outflows),
                net_cash_flow=net,
                cumulative_cash_flow=cumulative,
            )
        )

    return adjusted
