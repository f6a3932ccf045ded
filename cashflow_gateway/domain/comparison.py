"""Plan-vs-actual comparison of a stored projection against fresh records"""

from dataclasses import replace
from typing import Dict, Optional, Sequence

from cashflow_gateway.domain.models import (
    ComparisonSummary,
    PlanVsRealComparison,
    ProjectionPlan,
    TransactionRecord,
)
from cashflow_gateway.domain.records import filter_by_country_and_date_range, group_by_week


def week_variance(actual_net: float, projected_net: float) -> Optional[float]:
    """Percentage variance of actual vs projected net; None when projected net is 0"""
    if projected_net == 0:
        return None
    return (actual_net - projected_net) / projected_net * 100


def compare_to_actual(
    plan: ProjectionPlan,
    fresh_sales: Sequence[TransactionRecord],
    fresh_purchases: Sequence[TransactionRecord],
    scenario: str = "base",
) -> PlanVsRealComparison:
    """
    Compare one scenario of `plan` with actual records, week by week.

    Records are bucketed into the plan's own week ranges so real data lines up
    with the weeks it was projected for. Weeks without any record keep their
    actual fields as None.

    Summary:
    - avg_variance: mean absolute percentage variance over weeks with a defined
      variance (projected net of 0 leaves variance None and is skipped)
    - accuracy: max(0, 100 - avg_variance), 100 when no week has a variance
    """
    weeks = plan.scenarios[scenario]
    if not weeks:
        return PlanVsRealComparison(
            plan=plan,
            real_inflows=[],
            real_outflows=[],
            comparison_by_week=[],
            summary=ComparisonSummary(total_variance=0.0, avg_variance=0.0, weeks_with_data=0, accuracy=100.0),
        )

    plan_start = weeks[0].start_date
    plan_end = weeks[-1].end_date

    real_sales = filter_by_country_and_date_range(fresh_sales, plan.country, plan_start, plan_end)
    real_purchases = filter_by_country_and_date_range(fresh_purchases, plan.country, plan_start, plan_end)

    week_ranges = [(w.start_date, w.end_date) for w in weeks]
    actuals = group_by_week(real_sales, real_purchases, week_ranges, plan.country)

    comparison_by_week = []
    for projected, real in zip(weeks, actuals):
        if not real.has_data:
            comparison_by_week.append(replace(projected))
            continue

        comparison_by_week.append(
            replace(
                projected,
                actual_inflows=real.total_inflows,
                actual_outflows=real.total_outflows,
                actual_net=real.net_cash_flow,
                variance=week_variance(real.net_cash_flow, projected.net_cash_flow),
                variance_absolute=real.net_cash_flow - projected.net_cash_flow,
            )
        )

    weeks_with_data = sum(1 for w in comparison_by_week if w.actual_net is not None)
    variances = [abs(w.variance) for w in comparison_by_week if w.variance is not None]
    total_variance = sum(variances)
    avg_variance = total_variance / len(variances) if variances else 0.0

    return PlanVsRealComparison(
        plan=plan,
        real_inflows=real_sales,
        real_outflows=real_purchases,
        comparison_by_week=comparison_by_week,
        summary=ComparisonSummary(
            total_variance=total_variance,
            avg_variance=avg_variance,
            weeks_with_data=weeks_with_data,
            accuracy=max(0.0, 100.0 - avg_variance),
        ),
    )


def accuracy_metrics(comparison: PlanVsRealComparison) -> Dict[str, float]:
    """Headline accuracy figures for dashboards and logs"""
    return {
        "accuracy": comparison.summary.accuracy,
        "avg_variance": comparison.summary.avg_variance,
        "total_variance": comparison.summary.total_variance,
    }
