"""Task model"""

from enum import Enum
from datetime import timedelta

from sqlalchemy import Column, Integer, String, Boolean, Index

from taskmaster.core.clock import utc_now
from taskmaster.core.database import Base, UTCDateTime


class TaskStatus(str, Enum):
    UPCOMING = "upcoming"
    PENDING = "pending"
    COMPLETED = "completed"
    MISSED = "missed"


# Statuts que le sweep peut passer à "missed"
OPEN_STATUSES = (TaskStatus.PENDING.value, TaskStatus.UPCOMING.value)
# Statuts exclus des rappels
CLOSED_STATUSES = (TaskStatus.COMPLETED.value, TaskStatus.MISSED.value)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    scheduled_date = Column(UTCDateTime, nullable=False, index=True)
    reminder_minutes_before = Column(Integer, nullable=False, default=0)
    # scheduled_date - reminder_minutes_before, maintenu par compute_remind_at()
    remind_at = Column(UTCDateTime, nullable=False)

    status = Column(String, nullable=False, default=TaskStatus.UPCOMING.value)
    completed_at = Column(UTCDateTime, nullable=True)
    reminder_sent = Column(Boolean, nullable=False, default=False)

    created_at = Column(UTCDateTime, default=utc_now)
    updated_at = Column(UTCDateTime, default=utc_now, onupdate=utc_now)

    __table_args__ = (
        Index("idx_tasks_reminders", "reminder_sent", "status", "remind_at"),
    )


def compute_remind_at(scheduled_date, reminder_minutes_before: int):
    return scheduled_date - timedelta(minutes=reminder_minutes_before or 0)
