import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.dependencies import get_pipeline
from api.schemas import SimulationRequest, SimulationResult
from data.database import get_db
from data.repository import SimulationRepository
from models.simulation import SimulationPipeline

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/simulate", response_model=SimulationResult)
def simulate(
    request: SimulationRequest,
    pipeline: SimulationPipeline = Depends(get_pipeline),
    db: Session = Depends(get_db),
):
    """Simulate an intervention on a block, store the run, and return the forecast"""
    try:
        outcome = pipeline.run(request)
        SimulationRepository(db).record(outcome.result, request, outcome.weekly)
    except Exception as e:
        logger.exception("❌ Simulation failed for block %s: %s", request.block_id, e)
        raise HTTPException(status_code=500, detail="Simulation failed internally.")

    logger.info(
        "✅ Simulation stored: %s on block %s (-%s AQI, %s credits, fallback=%s)",
        request.intervention, request.block_id, outcome.result.reduction_amount,
        outcome.result.credits, outcome.result.ai_insight.fallback,
    )
    return outcome.result
