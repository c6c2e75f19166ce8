import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.auth import get_current_user
from api.schemas import SimulationHistoryEntry
from data.database import get_db
from data.repository import SimulationRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/history", response_model=List[SimulationHistoryEntry])
def get_history(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    """The signed-in user's 10 most recent simulations, newest first"""
    # Undecodable stored rows surface as JSONDecodeError or pydantic ValidationError, both ValueError
    try:
        return SimulationRepository(db).history(user_id)
    except (SQLAlchemyError, ValueError) as e:
        logger.exception("History fetch error for %s: %s", user_id, e)
        raise HTTPException(status_code=500, detail="Failed to fetch history")
