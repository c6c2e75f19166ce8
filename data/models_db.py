from sqlalchemy import Column, DateTime, Float, Integer, String, Text, func

from data.database import Base


class SimulationRecord(Base):
    __tablename__ = "simulations"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    block_id = Column(String)
    intervention_type = Column(String, nullable=False)
    co2_reduced = Column(Float, nullable=False)  # AQI points removed
    credits_earned = Column(Integer, nullable=False)
    ai_insight = Column(Text, nullable=False)  # JSON object
    history_data = Column(Text, nullable=False)  # JSON list, 30 daily AQI values
    traffic_data = Column(Text, nullable=False)  # JSON list, 30 daily speeds
    weekly_summary = Column(Text, nullable=False)  # JSON {"aqi": [...], "traffic": [...]}
    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)


class UserReward(Base):
    __tablename__ = "user_rewards"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    total_credits = Column(Integer, nullable=False)
    tx_hash = Column(String)
    status = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
