"""
Règles de statut des tâches - source unique pour la création, la mise à jour
et le sweep des tâches manquées.
"""

from datetime import datetime
from typing import NamedTuple, Optional

from taskmaster.models.task import Task, TaskStatus


class StatusUpdate(NamedTuple):
    status: TaskStatus
    completed_at: Optional[datetime]
    reminder_sent: bool


def derive_initial_status(scheduled_date: datetime, now: datetime) -> TaskStatus:
    """
    Statut initial d'une tâche créée sans statut explicite.

    - date passée (strictement) → missed
    - même jour calendaire que now → pending
    - jour futur → upcoming

    Le jour calendaire est celui du fuseau de scheduled_date.
    """
    if scheduled_date < now:
        return TaskStatus.MISSED

    local_now = now.astimezone(scheduled_date.tzinfo) if scheduled_date.tzinfo else now
    if scheduled_date.date() == local_now.date():
        return TaskStatus.PENDING
    return TaskStatus.UPCOMING


def apply_update(existing: Task, incoming: dict, now: datetime) -> StatusUpdate:
    """
    Calcule (status, completed_at, reminder_sent) après une mise à jour.

    `incoming` contient uniquement les champs envoyés par le client.
    Le statut envoyé est pris tel quel (pas recalculé selon l'heure).
    """
    requested = incoming.get("status")
    status = TaskStatus(requested) if requested is not None else TaskStatus(existing.status)

    new_date = incoming.get("scheduled_date")
    rescheduled = new_date is not None and new_date != existing.scheduled_date

    if status == TaskStatus.COMPLETED:
        if requested is None and existing.completed_at is not None:
            # statut non envoyé: on garde la date de complétion d'origine
            return StatusUpdate(status, existing.completed_at, True)
        return StatusUpdate(status, now, True)

    reminder_sent = False if rescheduled else bool(existing.reminder_sent)
    return StatusUpdate(status, None, reminder_sent)
