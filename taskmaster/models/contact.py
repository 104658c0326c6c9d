"""Contact message model"""

from sqlalchemy import Column, Integer, String
from taskmaster.core.clock import utc_now
from taskmaster.core.database import Base, UTCDateTime


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=True, index=True)
    user_email = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    message = Column(String, nullable=False)
    created_at = Column(UTCDateTime, default=utc_now)
