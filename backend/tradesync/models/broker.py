from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Boolean

from tradesync.core.database import Base


class Broker(Base):
    __tablename__ = "brokers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    code = Column(String(20), unique=True, nullable=False)  # brokerA or brokerB
    api_endpoint = Column(String(255), nullable=False)
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
