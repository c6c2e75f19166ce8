"""
Simulation Pipeline
History -> weekly summaries -> reduction model -> insight, for one intervention
"""

import logging
from concurrent.futures import Executor
from dataclasses import dataclass

from api.schemas import SimulationRequest, SimulationResult, WeeklySummaryPair
from config.settings import settings
from data.history import HistoryFetcher, generate_traffic_history
from models.insight import InsightContext, InsightGenerator
from models.reduction import compute_reduction
from models.summarizer import weekly_summary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationOutcome:
    result: SimulationResult
    weekly: WeeklySummaryPair


class SimulationPipeline:

    def __init__(self, history_fetcher: HistoryFetcher, insight_generator: InsightGenerator, executor: Executor):
        self.history_fetcher = history_fetcher
        self.insight_generator = insight_generator
        self.executor = executor

    def run(self, request: SimulationRequest) -> SimulationOutcome:
        logger.info("🤖 Simulating %s for block %s", request.intervention, request.block_id)

        # The history call and the synthetic traffic series are independent
        history_future = self.executor.submit(
            self.history_fetcher.daily_aqi_history, request.lat, request.lon, request.current_aqi
        )
        traffic_future = self.executor.submit(generate_traffic_history, settings.BASE_TRAFFIC_SPEED)
        daily_aqi = history_future.result()
        traffic = traffic_future.result()

        weekly = WeeklySummaryPair(aqi=weekly_summary(daily_aqi), traffic=weekly_summary(traffic))

        reduction = compute_reduction(request.intervention, request.current_aqi)

        generated = self.insight_generator.generate(InsightContext(
            lat=request.lat,
            lon=request.lon,
            intervention=request.intervention,
            building_density=request.building_density,
            tree_density=request.tree_density,
            area_type=request.area_type,
            new_aqi=reduction.new_aqi,
            weekly_aqi=weekly.aqi,
            weekly_traffic=weekly.traffic,
        ))

        result = SimulationResult(
            new_aqi=reduction.new_aqi,
            reduction_amount=reduction.reduction_amount,
            credits=reduction.credits,
            estimated_cost=reduction.estimated_cost,
            estimated_days=settings.ESTIMATED_DAYS,
            daily_aqi_history=daily_aqi,
            traffic_history=traffic,
            aqi_forecast=generated.aqi_forecast,
            traffic_forecast=generated.traffic_forecast,
            ai_insight=generated.insight,
        )
        return SimulationOutcome(result=result, weekly=weekly)
