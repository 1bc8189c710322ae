"""Domain models - pure Python dataclasses representing analysis entities"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class FrequencyPattern(str, Enum):
    """How often a wallet converts stablecoin out"""

    DAILY = "daily"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    IRREGULAR = "irregular"
    INSUFFICIENT_DATA = "insufficient-data"


class ResultStatus(str, Enum):
    """Tag telling callers whether a stage had enough data to compute"""

    COMPUTED = "computed"
    INSUFFICIENT_DATA = "insufficient_data"


class MissingTimestampPolicy(str, Enum):
    """What the normalizer does with transfers that carry no timestamp"""

    USE_CURRENT_TIME = "use_current_time"
    EXCLUDE_EVENT = "exclude_event"
    SORT_LAST = "sort_last"


class CostType(str, Enum):
    SAVED = "saved"
    LOST = "lost"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class RawContract:
    address: Optional[str] = None
    decimal: Optional[str] = None


@dataclass(frozen=True)
class RawTransfer:
    """On-chain stablecoin transfer as returned by the transfer source"""

    block_num: str
    hash: str
    from_address: str
    to_address: Optional[str]
    value: float
    asset: str
    category: str = "erc20"
    raw_contract: RawContract = field(default_factory=RawContract)
    timestamp: Optional[str] = None  # ISO-8601


@dataclass(frozen=True)
class ConversionEvent:
    """Outbound transfer from the tracked wallet, read as a cash-out decision"""

    timestamp: datetime
    amount: float
    token: str
    to_address: str
    hash: str


@dataclass
class PatternSummary:
    """Aggregate view of a wallet's conversion history"""

    status: ResultStatus
    conversions: List[ConversionEvent]
    total_conversions: int
    frequency: FrequencyPattern
    average_amount: float
    total_volume: float
    average_days_between_conversions: Optional[float]
    first_conversion_date: Optional[datetime]
    last_conversion_date: Optional[datetime]
    transfer_count: int = 0


@dataclass(frozen=True)
class SimulatedConversion:
    """Hypothetical conversion under the monthly discipline rule"""

    timestamp: datetime
    amount: float
    price_at_conversion: float
    converted_to: str


@dataclass
class SimulationResult:
    status: ResultStatus
    simulated_conversions: List[SimulatedConversion]
    conversion_percentage: float
    target_day_of_month: int
    total_simulated_amount: float
    average_simulated_amount: float


@dataclass
class SimulationComparison:
    actual_count: int
    simulated_count: int
    actual_total: float
    simulated_total: float
    frequency_difference: float


@dataclass
class CostResult:
    """Money saved or lost by actual behaviour vs the discipline rule"""

    status: ResultStatus
    cost_or_saved_amount: float  # always non-negative, see cost_type
    currency: str
    cost_type: CostType
    actual_cost: float
    simulated_cost: float
    conversion_count: int


@dataclass(frozen=True)
class PricedConversion:
    timestamp: datetime
    amount: float
    rate: float
    value_in_target: float


@dataclass
class CostBreakdown:
    actual_conversions_with_rates: List[PricedConversion]
    simulated_conversions_with_rates: List[PricedConversion]
    total_actual_value: float
    total_simulated_value: float
    difference: float


@dataclass(frozen=True)
class ScoreComponents:
    frequency_score: int
    consistency_score: int
    timing_score: int


@dataclass
class ScoreResult:
    status: ResultStatus
    score: int  # 0-100
    explanation: str
    components: ScoreComponents


@dataclass(frozen=True)
class ScoreCategory:
    label: str
    color: str


@dataclass
class RecommendationResult:
    recommendation: str


@dataclass
class DetailedRecommendation:
    recommendation: str
    priority: Priority
    actionable_tips: List[str]


@dataclass
class AnalysisReport:
    """Everything one pipeline run produces for persistence and display"""

    simulation: SimulationResult
    cost: CostResult
    score: ScoreResult
    recommendation: RecommendationResult
    detailed_recommendation: DetailedRecommendation
