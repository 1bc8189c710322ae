"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

SupportedChain = Literal["ethereum", "polygon", "arbitrum", "optimism", "base"]
SUPPORTED_CURRENCIES = ("USD", "EUR")


def _normalize_currency(value: str) -> str:
    code = value.upper()
    if code not in SUPPORTED_CURRENCIES:
        raise ValueError("Unsupported currency. Only EUR and USD are supported")
    return code


class AnalysisRequest(BaseModel):
    """Request body for POST /v1/analyses"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    wallet_address: str = Field(..., pattern=r"^0x[0-9a-fA-F]{40}$", description="EVM wallet address")
    blockchain: SupportedChain
    currency: str = Field("USD", description="Target fiat currency (USD or EUR)")

    @field_validator("currency")
    @classmethod
    def check_currency(cls, value: str) -> str:
        return _normalize_currency(value)


class ConversionSchema(BaseModel):
    timestamp: datetime
    amount: float
    token: str
    to_address: str
    hash: str


class AnalysisResponse(BaseModel):
    """Response for POST /v1/analyses: the detected conversion pattern"""

    analysis_id: str
    wallet_address: str
    blockchain: str
    currency: str
    transfer_count: int
    conversions: List[ConversionSchema]
    total_conversions: int
    frequency: str
    average_amount: float
    total_volume: float
    average_days_between_conversions: Optional[float] = None
    first_conversion_date: Optional[datetime] = None
    last_conversion_date: Optional[datetime] = None


class AnalysisItem(BaseModel):
    analysis_id: str
    wallet_address: str
    blockchain: str
    currency: str
    created_at: str


class AnalysisListResponse(BaseModel):
    """Response for GET /v1/analyses"""

    user_id: str
    analyses: List[AnalysisItem]


class ResultsRequest(BaseModel):
    """Request body for POST /v1/results"""

    analysis_id: str = Field(..., min_length=1)
    wallet_balance: float = Field(..., gt=0, description="Current stablecoin balance")
    target_currency: str = "USD"

    @field_validator("target_currency")
    @classmethod
    def check_currency(cls, value: str) -> str:
        return _normalize_currency(value)


class ScoreComponentsSchema(BaseModel):
    frequency_score: int
    consistency_score: int
    timing_score: int


class SimulationDetails(BaseModel):
    conversion_percentage: float
    target_day_of_month: int
    simulated_conversion_count: int
    actual_conversion_count: int


class ResultsResponse(BaseModel):
    """Response for POST /v1/results"""

    result_id: str
    analysis_id: str
    cost_or_saved_amount: float
    currency: str
    cost_type: str
    discipline_score: int
    score_label: str
    score_explanation: str
    score_components: ScoreComponentsSchema
    recommendation: str
    priority: str
    actionable_tips: List[str]
    simulation_details: SimulationDetails


class StoredResultResponse(BaseModel):
    """Response for GET /v1/results"""

    analysis_id: str
    cost_or_saved_amount: Optional[float] = None
    cost_type: Optional[str] = None
    currency: Optional[str] = None
    discipline_score: Optional[float] = None
    recommendation: Optional[str] = None
    preview_visible: bool
    created_at: str
