"""
Reduction Model
Deterministic estimate of what an intervention does to a block's AQI
"""

import math
from dataclasses import dataclass
from typing import Mapping

from utils.constants import DEFAULT_INTERVENTION, INTERVENTION_STRATEGIES
from utils.helpers import round_half_up


@dataclass(frozen=True)
class ReductionResult:
    intervention: str
    reduction_rate: float
    reduction_amount: float
    new_aqi: float
    credits: int
    estimated_cost: int


def lookup_strategy(intervention: str) -> Mapping:
    """Strategy entry for an intervention; unknown names get the Green Wall entry"""
    return INTERVENTION_STRATEGIES.get(intervention, INTERVENTION_STRATEGIES[DEFAULT_INTERVENTION])


def compute_reduction(intervention: str, current_aqi: float) -> ReductionResult:
    """
    Apply an intervention's fixed reduction rate to the current AQI

    Args:
        intervention: Intervention name (e.g. "Direct Air Capture")
        current_aqi: AQI before the intervention

    Returns:
        ReductionResult with the reduction (1 decimal), new AQI (1 decimal, floored
        at 0), credits (10 per AQI point, rounded down) and the base cost
    """
    strategy = lookup_strategy(intervention)
    rate = strategy["reduction_rate"]

    reduction_amount = round_half_up(current_aqi * rate, 1)
    new_aqi = max(0.0, round_half_up(current_aqi - reduction_amount, 1))
    credits = math.floor(round_half_up(reduction_amount * 10, 6))

    return ReductionResult(
        intervention=intervention,
        reduction_rate=rate,
        reduction_amount=reduction_amount,
        new_aqi=new_aqi,
        credits=credits,
        estimated_cost=strategy["base_cost"],
    )
