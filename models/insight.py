"""
Insight & Forecast Generator
Asks a generative model for a narrative insight plus a 7-day forecast, and
falls back to a procedural estimate whenever the model is unavailable,
times out, or answers outside the JSON contract
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from api.schemas import AIInsight, FallbackInsight, GeneratedInsight, Number, WeeklyBucket
from config.settings import settings
from utils import constants as C
from utils.exceptions import InsightGenerationError
from utils.helpers import format_number, round_to_int

logger = logging.getLogger(__name__)

CODE_FENCE = re.compile(r"```json|```")


@dataclass(frozen=True)
class InsightContext:
    lat: float
    lon: float
    intervention: str
    building_density: str
    tree_density: str
    area_type: str
    new_aqi: float
    weekly_aqi: List[WeeklyBucket]
    weekly_traffic: List[WeeklyBucket]


@dataclass(frozen=True)
class InsightOutcome:
    insight: AIInsight
    aqi_forecast: List[Number]
    traffic_forecast: List[Number]


class GeneratedPayload(BaseModel):
    """The JSON object the model is instructed to return"""
    headline: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    tech_specs: str = Field(..., min_length=1)
    recommendation: str = Field(..., min_length=1)
    aqi: List[Number] = Field(..., min_length=7, max_length=7)
    traffic: List[Number] = Field(..., min_length=7, max_length=7)

    @field_validator("headline", "content", "tech_specs", "recommendation")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


# ==================== Prompt ====================

def _series_json(buckets: List[WeeklyBucket]) -> str:
    return json.dumps([bucket.model_dump() for bucket in buckets])


def build_prompt(context: InsightContext) -> str:
    """Build the consultant prompt with both weekly series and the output contract"""
    return f"""
Role: Urban Environmental Consultant.
Response Format: JSON ONLY.

Context:
- Location: {context.lat}, {context.lon} ({context.area_type} area, {context.building_density}, {context.tree_density} trees).
- Intervention: {context.intervention} (Targeting AQI {format_number(context.new_aqi)}).

**Weekly Analysis (Past Month):**
- AQI Trend: {_series_json(context.weekly_aqi)}
- Traffic Trend: {_series_json(context.weekly_traffic)}

Task:
1. Analyze the 4-week trend.
2. Suggest a "Pro" tech version of {context.intervention}.
3. Predict next {settings.FORECAST_DAYS} days (Forecast).

Output JSON:
{{
  "headline": "5-word punchy title",
  "content": "Analysis of the weekly trend and why this tech fits.",
  "tech_specs": "Specific tech name",
  "recommendation": "Strategic advice based on the weekly data.",
  "aqi": [{settings.FORECAST_DAYS} numbers],
  "traffic": [{settings.FORECAST_DAYS} numbers]
}}
""".strip()


def parse_model_output(text: str) -> GeneratedPayload:
    """
    Strip markdown code fences and validate the model's JSON answer

    Raises:
        InsightGenerationError: if the text is not a JSON object honoring the contract
    """
    cleaned = CODE_FENCE.sub("", text or "").strip()
    try:
        return GeneratedPayload.model_validate_json(cleaned)
    except ValidationError as e:
        raise InsightGenerationError(f"model output rejected: {e.error_count()} validation error(s)") from e


# ==================== Fallback ====================

def fallback_insight(intervention: str, density: str, new_aqi: float) -> FallbackInsight:
    return FallbackInsight(
        headline=C.FALLBACK_HEADLINE.format(intervention=intervention),
        content=C.FALLBACK_CONTENT.format(density=density, new_aqi=format_number(new_aqi)),
        tech_specs=C.TECH_SPECS.get(intervention, C.DEFAULT_TECH_SPEC),
        recommendation=C.FALLBACK_RECOMMENDATION,
    )


def fallback_forecast(new_aqi: float):
    """AQI easing by half a point a day (rounded, floored at 0) and flat traffic"""
    days = settings.FORECAST_DAYS
    aqi = [max(0, round_to_int(new_aqi - day * C.FALLBACK_FORECAST_DAILY_DROP)) for day in range(days)]
    traffic = [C.FALLBACK_TRAFFIC_SPEED] * days
    return aqi, traffic


def fallback_outcome(context: InsightContext) -> InsightOutcome:
    aqi, traffic = fallback_forecast(context.new_aqi)
    return InsightOutcome(
        insight=fallback_insight(context.intervention, context.building_density, context.new_aqi),
        aqi_forecast=aqi,
        traffic_forecast=traffic,
    )


# ==================== Generator ====================

class InsightGenerator:
    """Generates insights with Gemini when configured, procedurally otherwise"""

    def __init__(self, api_key: Optional[str] = None, model_name: str = None, timeout: float = None):
        self.api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self.model_name = model_name or settings.GEMINI_MODEL
        self.timeout = timeout or settings.GEMINI_TIMEOUT_SECONDS
        self._model = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_model(self):
        if self._model is None:
            import google.generativeai as genai

            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    def _call_model(self, prompt: str) -> str:
        try:
            response = self._get_model().generate_content(
                prompt,
                request_options={"timeout": self.timeout},
            )
            return response.text
        except Exception as e:
            raise InsightGenerationError(f"generative call failed: {e}") from e

    def generate(self, context: InsightContext) -> InsightOutcome:
        """
        Produce an insight and 7-day forecasts; never raises

        Args:
            context: Location, intervention, target AQI and weekly summaries

        Returns:
            InsightOutcome whose insight is tagged fallback when the model was not used
        """
        if not self.configured:
            return fallback_outcome(context)

        try:
            payload = parse_model_output(self._call_model(build_prompt(context)))
        except InsightGenerationError as e:
            logger.warning("⚠️ Gemini insight unavailable, using fallback: %s", e)
            return fallback_outcome(context)

        return InsightOutcome(
            insight=GeneratedInsight(
                headline=payload.headline,
                content=payload.content,
                tech_specs=payload.tech_specs,
                recommendation=payload.recommendation,
            ),
            aqi_forecast=payload.aqi,
            traffic_forecast=payload.traffic,
        )
