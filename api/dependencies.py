"""
Shared resources handed to route handlers

Everything here is safe for concurrent use: one pooled HTTP session, one
worker pool, one insight generator. Tests swap them through
app.dependency_overrides.
"""

from concurrent.futures import ThreadPoolExecutor

from fastapi import Depends

from config.settings import settings
from data.aggregator import SnapshotAggregator
from data.fetcher import EnvironmentDataFetcher
from data.history import HistoryFetcher
from data.minter import CreditMinter, UnconfiguredMinter
from models.insight import InsightGenerator
from models.simulation import SimulationPipeline

executor = ThreadPoolExecutor(max_workers=settings.MAX_WORKERS, thread_name_prefix="ecoblocks")
fetcher = EnvironmentDataFetcher()
insight_generator = InsightGenerator()
credit_minter = UnconfiguredMinter()


def get_executor() -> ThreadPoolExecutor:
    return executor


def get_fetcher() -> EnvironmentDataFetcher:
    return fetcher


def get_insight_generator() -> InsightGenerator:
    return insight_generator


def get_credit_minter() -> CreditMinter:
    return credit_minter


def get_aggregator(
    fetcher: EnvironmentDataFetcher = Depends(get_fetcher),
    executor: ThreadPoolExecutor = Depends(get_executor),
) -> SnapshotAggregator:
    return SnapshotAggregator(fetcher, executor)


def get_pipeline(
    fetcher: EnvironmentDataFetcher = Depends(get_fetcher),
    generator: InsightGenerator = Depends(get_insight_generator),
    executor: ThreadPoolExecutor = Depends(get_executor),
) -> SimulationPipeline:
    return SimulationPipeline(HistoryFetcher(fetcher), generator, executor)


def shutdown():
    executor.shutdown(wait=False, cancel_futures=True)
    fetcher.session.close()
