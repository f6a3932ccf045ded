"""Domain models - pure Python dataclasses representing cash-flow entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional


class Country(str, Enum):
    """Markets covered by the dashboard. GLOBAL aggregates all of them in USD."""

    PERU = "Peru"
    COLOMBIA = "Colombia"
    MEXICO = "Mexico"
    GLOBAL = "Global"


SCENARIO_NAMES = ("base", "optimistic", "conservative")


@dataclass(frozen=True)
class TransactionRecord:
    """Sales (inflow) or purchase-order (outflow) line from the spreadsheet API"""

    record_id: str
    date: Optional[date]  # None when the sheet cell could not be parsed
    amount: float
    country: str
    category: str
    counterparty: str = ""
    description: str = ""
    currency: Optional[str] = None

    @property
    def currency_tag(self) -> str:
        """Tag used for USD conversion: explicit currency, else the country label"""
        return self.currency or self.country


@dataclass
class HistoricalStats:
    """Trailing-window statistics derived from the daily inflow series"""

    total_inflows: float
    total_outflows: float
    avg_daily_inflows: float
    avg_daily_outflows: float
    trend: float  # OLS slope per day
    volatility: float  # population stddev
    window_days: int
    coerced_records: int = 0


@dataclass
class WeeklyFinancialData:
    """Raw weekly financial model payload"""

    weeks: List[str]
    cities_data: Dict[str, Dict[str, List[float]]]


@dataclass
class WeeklyMetrics:
    """Per-country weekly metrics; every list is indexed like `weeks`"""

    weeks: List[str]
    total_sales: List[float]
    total_catering: List[float]
    total_delivery: List[float]
    avg_gross_margin: List[float]


@dataclass
class SeasonalProjection:
    """Output of the seasonal baseline lookup"""

    projected_sales: List[float]
    projected_catering: List[float]
    projected_delivery: List[float]
    confidence: float
    matched_week: Optional[str] = None


@dataclass
class ScenarioFactors:
    """Multipliers applied to baseline weekly inflows/outflows"""

    inflow_factor: float
    outflow_factor: float
    rationale: str


@dataclass
class ProjectionFactors:
    """Scenario factor set with the analysis that produced it"""

    scenarios: Dict[str, ScenarioFactors]
    insights: List[str] = field(default_factory=list)
    risks: List[str] = field(default_factory=list)
    confidence: float = 0.0


@dataclass
class FlowDetail:
    """Breakdown of a projected flow: baseline x factor = result"""

    base: float
    factor: float
    result: float


@dataclass
class ProjectionWeek:
    """Single projected week; actual_* fields are filled in by the comparator"""

    week: int
    start_date: date
    end_date: date  # inclusive
    projected_inflows: float
    inflows_detail: FlowDetail
    projected_outflows: float
    outflows_detail: FlowDetail
    net_cash_flow: float
    cumulative_cash_flow: float
    actual_inflows: Optional[float] = None
    actual_outflows: Optional[float] = None
    actual_net: Optional[float] = None
    variance: Optional[float] = None  # percent
    variance_absolute: Optional[float] = None


@dataclass
class PlanMetadata:
    """Inputs and confidence recorded alongside a generated plan"""

    historical_days: int
    confidence: float
    factors: ProjectionFactors
    historical_stats: HistoricalStats
    seasonal_confidence: Optional[float] = None


@dataclass
class ProjectionPlan:
    """Three scenario projections generated together for one country"""

    id: str
    country: str
    created_at: datetime
    expires_at: datetime
    scenarios: Dict[str, List[ProjectionWeek]]
    metadata: PlanMetadata


@dataclass
class WeekActuals:
    """Real inflows/outflows bucketed into one plan week"""

    week: int
    total_inflows: float
    total_outflows: float
    net_cash_flow: float
    has_data: bool


@dataclass
class ComparisonSummary:
    """Aggregate variance figures for a plan-vs-actual comparison"""

    total_variance: float
    avg_variance: float
    weeks_with_data: int
    accuracy: float


@dataclass
class PlanVsRealComparison:
    """Output of comparing a stored plan against fresh records"""

    plan: ProjectionPlan
    real_inflows: List[TransactionRecord]
    real_outflows: List[TransactionRecord]
    comparison_by_week: List[ProjectionWeek]
    summary: ComparisonSummary
