"""Pydantic schemas for task request/response validation."""

from datetime import datetime, timezone
from typing import Optional, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskmaster.models.task import TaskStatus


def _as_aware(value: Optional[datetime]) -> Optional[datetime]:
    # Une date sans fuseau est interprétée en UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TaskCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    scheduled_date: datetime
    reminder_minutes_before: int = Field(0, ge=0)
    status: Optional[TaskStatus] = None

    @field_validator("scheduled_date")
    @classmethod
    def scheduled_date_aware(cls, value):
        return _as_aware(value)


class TaskUpdate(BaseModel):
    """Mise à jour partielle: les champs absents gardent leur valeur.

    Sans `status`, le statut stocké est conservé, même si `scheduled_date`
    change. Une tâche `missed` replanifiée reste donc `missed` et ne reçoit
    plus de rappel: il faut envoyer `status` (`pending` ou `upcoming`) avec
    la nouvelle date pour la réactiver.
    """

    user_id: str = Field(..., min_length=1)
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    reminder_minutes_before: Optional[int] = Field(None, ge=0)
    status: Optional[TaskStatus] = None

    @field_validator("scheduled_date")
    @classmethod
    def scheduled_date_aware(cls, value):
        return _as_aware(value)


class TaskResponse(BaseModel):
    id: int
    user_id: str
    title: str
    description: Optional[str]
    scheduled_date: datetime
    reminder_minutes_before: int
    status: TaskStatus
    completed_at: Optional[datetime]
    reminder_sent: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AnalyticsResponse(BaseModel):
    total_tasks: int = 0
    completed_tasks: int = 0
    pending_tasks: int = 0
    missed_tasks: int = 0
    status_counts: Dict[str, int] = {}
