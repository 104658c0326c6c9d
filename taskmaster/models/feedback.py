"""Feedback model"""

from sqlalchemy import Column, Integer, String
from taskmaster.core.clock import utc_now
from taskmaster.core.database import Base, UTCDateTime


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=True, index=True)
    rating = Column(Integer, nullable=False)
    message = Column(String, nullable=True)
    created_at = Column(UTCDateTime, default=utc_now)
