from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship

from tradesync.core.database import Base

user_brokers = Table(
    "user_brokers",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
    Column("broker_id", Integer, ForeignKey("brokers.id"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(128), nullable=False)
    first_name = Column(String(100), default="")
    last_name = Column(String(100), default="")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    brokers = relationship("Broker", secondary=user_brokers, lazy="selectin")

    @property
    def broker_codes(self) -> list[str]:
        return sorted(b.code for b in self.brokers)
