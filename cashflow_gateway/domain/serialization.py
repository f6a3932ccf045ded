"""JSON-safe conversion of domain value objects"""

from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Dict

from cashflow_gateway.domain.models import (
    FlowDetail,
    HistoricalStats,
    PlanMetadata,
    PlanVsRealComparison,
    ProjectionFactors,
    ProjectionPlan,
    ProjectionWeek,
    ScenarioFactors,
)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def to_dict(obj: Any) -> Dict[str, Any]:
    """Dataclass -> dict with dates rendered as ISO strings"""
    return _jsonable(asdict(obj))


def plan_to_dict(plan: ProjectionPlan) -> Dict[str, Any]:
    return to_dict(plan)


def comparison_to_dict(comparison: PlanVsRealComparison) -> Dict[str, Any]:
    return to_dict(comparison)


def _week_from_dict(data: Dict[str, Any]) -> ProjectionWeek:
    return ProjectionWeek(
        week=data["week"],
        start_date=date.fromisoformat(data["start_date"]),
        end_date=date.fromisoformat(data["end_date"]),
        projected_inflows=data["projected_inflows"],
        inflows_detail=FlowDetail(**data["inflows_detail"]),
        projected_outflows=data["projected_outflows"],
        outflows_detail=FlowDetail(**data["outflows_detail"]),
        net_cash_flow=data["net_cash_flow"],
        cumulative_cash_flow=data["cumulative_cash_flow"],
        actual_inflows=data.get("actual_inflows"),
        actual_outflows=data.get("actual_outflows"),
        actual_net=data.get("actual_net"),
        variance=data.get("variance"),
        variance_absolute=data.get("variance_absolute"),
    )


def plan_from_dict(data: Dict[str, Any]) -> ProjectionPlan:
    """
    Rebuild a plan from plan_to_dict output.

    Raises:
        KeyError, TypeError, ValueError: On a payload that is not a serialized plan
    """
    meta = data["metadata"]
    factors = meta["factors"]

    return ProjectionPlan(
        id=data["id"],
        country=data["country"],
        created_at=datetime.fromisoformat(data["created_at"]),
        expires_at=datetime.fromisoformat(data["expires_at"]),
        scenarios={
            name: [_week_from_dict(w) for w in weeks]
            for name, weeks in data["scenarios"].items()
        },
        metadata=PlanMetadata(
            historical_days=meta["historical_days"],
            confidence=meta["confidence"],
            factors=ProjectionFactors(
                scenarios={name: ScenarioFactors(**f) for name, f in factors["scenarios"].items()},
                insights=list(factors.get("insights", [])),
                risks=list(factors.get("risks", [])),
                confidence=factors.get("confidence", meta["confidence"]),
            ),
            historical_stats=HistoricalStats(**meta["historical_stats"]),
            seasonal_confidence=meta.get("seasonal_confidence"),
        ),
    )
