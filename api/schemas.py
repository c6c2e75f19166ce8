from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Whole numbers stay integers on the wire (55, not 55.0)
Number = Union[int, float]


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(populate_by_name=True)


# ==================== Snapshot ====================

class EnvironmentSnapshot(WireModel):
    aqi: Number = 0
    pm25: Number = 0
    traffic: str
    building_density: str = Field("Low", alias="buildingDensity")
    building_count: int = Field(0, alias="buildingCount", ge=0)
    tree_count: int = Field(0, alias="treeCount")
    tree_density: str = Field("Low", alias="treeDensity")
    area_type: str = Field("Suburban", alias="areaType")


class GeocodeResult(BaseModel):
    lat: float
    lon: float
    display_name: Optional[str] = None
    country: Optional[str] = None


# ==================== Insight ====================

class InsightBase(BaseModel):
    headline: str
    content: str
    tech_specs: str
    recommendation: str


class GeneratedInsight(InsightBase):
    """Narrative written by the generative model"""
    fallback: Literal[False] = False


class FallbackInsight(InsightBase):
    """Narrative synthesized locally when the generative model is unavailable"""
    fallback: Literal[True] = True


AIInsight = Union[GeneratedInsight, FallbackInsight]


# ==================== Simulation ====================

class WeeklyBucket(BaseModel):
    week: int
    avg_value: int
    trend: Literal["Past", "Current"]


class WeeklySummaryPair(BaseModel):
    aqi: List[WeeklyBucket]
    traffic: List[WeeklyBucket]


class SimulationRequest(WireModel):
    block_id: Optional[str] = Field(None, alias="blockId")
    intervention: str = "Green Wall"
    current_aqi: Number = Field(..., alias="currentAQI")
    user_id: Optional[str] = Field(None, alias="userId")
    building_density: str = Field("Low", alias="buildingDensity")
    tree_density: str = Field("Low", alias="treeDensity")
    area_type: str = Field("Suburban", alias="areaType")
    lat: float
    lon: float

    @field_validator("block_id", "user_id", mode="before")
    @classmethod
    def coerce_identifier(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("current_aqi")
    @classmethod
    def non_negative(cls, value):
        if not value >= 0:
            raise ValueError("must be a non-negative number")
        return value


class SimulationResult(WireModel):
    new_aqi: float = Field(..., alias="newAQI")
    reduction_amount: float = Field(..., alias="reductionAmount")
    credits: int
    estimated_cost: int = Field(..., alias="estimatedCost")
    estimated_days: int = Field(..., alias="estimatedDays")
    daily_aqi_history: List[Number] = Field(..., alias="dailyAQIHistory")
    traffic_history: List[int] = Field(..., alias="trafficHistory")
    aqi_forecast: List[Number] = Field(..., alias="aqiForecast")
    traffic_forecast: List[Number] = Field(..., alias="trafficForecast")
    ai_insight: AIInsight = Field(..., alias="aiInsight")


class SimulationHistoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    block_id: Optional[str] = None
    intervention_type: str
    co2_reduced: float
    credits_earned: int
    ai_insight: AIInsight
    history_data: List[Number]
    traffic_data: List[int]
    weekly_summary: WeeklySummaryPair
    created_at: datetime


# ==================== Rewards ====================

class MintRequest(WireModel):
    wallet_address: Optional[str] = Field(None, alias="walletAddress")
    credits: Optional[int] = None


class MintResponse(WireModel):
    success: bool
    tx_hash: str = Field(..., alias="txHash")
