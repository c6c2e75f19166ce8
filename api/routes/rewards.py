import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.auth import get_current_user
from api.dependencies import get_credit_minter
from api.schemas import MintRequest, MintResponse
from data.database import get_db
from data.minter import CreditMinter
from data.repository import RewardRepository
from utils.exceptions import MintError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/mint-credit", response_model=MintResponse)
def mint_credit(
    request: MintRequest,
    user_id: str = Depends(get_current_user),
    minter: CreditMinter = Depends(get_credit_minter),
    db: Session = Depends(get_db),
):
    """Mint earned simulation credits to a wallet and record the reward"""
    if not request.credits or request.credits <= 0 or not request.wallet_address:
        raise HTTPException(status_code=400, detail="Invalid request")

    try:
        tx_hash = minter.mint(request.wallet_address, request.credits)
        RewardRepository(db).record(user_id, request.credits, tx_hash)
    except (MintError, SQLAlchemyError) as e:
        logger.error("Mint failed for %s: %s", user_id, e)
        raise HTTPException(status_code=500, detail=f"Mint failed: {e}")

    return MintResponse(success=True, tx_hash=tx_hash)
