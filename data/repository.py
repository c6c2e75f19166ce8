"""
Persistence Adapter
Create-only storage for simulation runs and minted rewards
"""

import json
import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.schemas import SimulationHistoryEntry, SimulationRequest, SimulationResult, WeeklySummaryPair
from config.settings import settings
from data.models_db import SimulationRecord, UserReward
from utils.constants import REWARD_STATUS_MINTED

logger = logging.getLogger(__name__)


def _load_json(raw):
    # Rows written by older clients may hold the insight double-encoded
    value = json.loads(raw) if isinstance(raw, str) else raw
    if isinstance(value, str):
        value = json.loads(value)
    return value


class SimulationRepository:

    def __init__(self, db: Session):
        self.db = db

    def record(self, result: SimulationResult, request: SimulationRequest,
               weekly: WeeklySummaryPair) -> SimulationRecord:
        """
        Insert one row for a finished simulation

        Raises:
            SQLAlchemyError: the insert or commit failed; the session is rolled back
        """
        row = SimulationRecord(
            user_id=request.user_id or settings.GUEST_USER_ID,
            block_id=request.block_id,
            intervention_type=request.intervention,
            co2_reduced=result.reduction_amount,
            credits_earned=result.credits,
            ai_insight=result.ai_insight.model_dump_json(),
            history_data=json.dumps(result.daily_aqi_history),
            traffic_data=json.dumps(result.traffic_history),
            weekly_summary=weekly.model_dump_json(),
        )
        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(row)
        return row

    def history(self, user_id: str, limit: int = None) -> List[SimulationHistoryEntry]:
        """Most recent simulations for a user, newest first"""
        rows = (
            self.db.query(SimulationRecord)
            .filter(SimulationRecord.user_id == user_id)
            .order_by(SimulationRecord.created_at.desc(), SimulationRecord.id.desc())
            .limit(limit or settings.HISTORY_LIMIT)
            .all()
        )
        return [self._to_entry(row) for row in rows]

    @staticmethod
    def _to_entry(row: SimulationRecord) -> SimulationHistoryEntry:
        insight = _load_json(row.ai_insight)
        if not isinstance(insight, dict):
            raise ValueError(f"simulation {row.id} has an unreadable insight")
        insight.setdefault("fallback", False)
        return SimulationHistoryEntry(
            id=row.id,
            user_id=row.user_id,
            block_id=row.block_id,
            intervention_type=row.intervention_type,
            co2_reduced=row.co2_reduced,
            credits_earned=row.credits_earned,
            ai_insight=insight,
            history_data=_load_json(row.history_data),
            traffic_data=_load_json(row.traffic_data),
            weekly_summary=_load_json(row.weekly_summary),
            created_at=row.created_at,
        )


class RewardRepository:

    def __init__(self, db: Session):
        self.db = db

    def record(self, user_id: str, credits: int, tx_hash: str) -> UserReward:
        row = UserReward(user_id=user_id, total_credits=credits, tx_hash=tx_hash, status=REWARD_STATUS_MINTED)
        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(row)
        return row
