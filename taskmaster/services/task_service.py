"""Task service - persistance des tâches (insert, lecture, mise à jour, sweeps)"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskmaster.core.errors import NotFoundError, StoreError, ValidationError
from taskmaster.models.task import (
    Task,
    TaskStatus,
    OPEN_STATUSES,
    CLOSED_STATUSES,
    compute_remind_at,
)
from taskmaster.services.status_service import derive_initial_status, apply_update

logger = logging.getLogger(__name__)


def _require_user_id(user_id: Optional[str]) -> str:
    if not user_id or not str(user_id).strip():
        raise ValidationError("user_id is required")
    return str(user_id)


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"{action} failed: {exc}")
        raise StoreError(f"{action} failed") from exc


def create_task(db: Session, data: dict, now: datetime) -> Task:
    """Insère une tâche. Statut calculé selon l'heure s'il n'est pas fourni."""
    user_id = _require_user_id(data.get("user_id"))
    scheduled_date = data["scheduled_date"]
    minutes = data.get("reminder_minutes_before") or 0

    status = data.get("status")
    if status is None:
        status = derive_initial_status(scheduled_date, now)
    status = TaskStatus(status)

    completed = status == TaskStatus.COMPLETED
    task = Task(
        user_id=user_id,
        title=data["title"],
        description=data.get("description"),
        scheduled_date=scheduled_date,
        reminder_minutes_before=minutes,
        remind_at=compute_remind_at(scheduled_date, minutes),
        status=status.value,
        completed_at=now if completed else None,
        reminder_sent=completed,
        created_at=now,
        updated_at=now,
    )
    db.add(task)
    _commit(db, "create_task")
    db.refresh(task)
    return task


def get_task(db: Session, task_id: int, user_id: str) -> Task:
    user_id = _require_user_id(user_id)
    task = db.query(Task).filter(Task.id == task_id, Task.user_id == user_id).first()
    if not task:
        raise NotFoundError("Task not found")
    return task


def list_tasks(db: Session, user_id: str, now: datetime) -> List[Task]:
    """Tâches du user, triées par scheduled_date. Passe d'abord les tâches en retard à missed."""
    user_id = _require_user_id(user_id)
    try:
        mark_missed_tasks(db, now, user_id=user_id)
    except StoreError:
        # Pas bloquant pour la lecture: le sweep global rattrapera
        logger.warning(f"Serving tasks of user {user_id} without refreshing missed status")

    return db.query(Task).filter(
        Task.user_id == user_id
    ).order_by(Task.scheduled_date.asc(), Task.id.asc()).all()


def update_task(db: Session, task_id: int, user_id: str, fields: dict, now: datetime) -> Task:
    task = get_task(db, task_id, user_id)

    outcome = apply_update(task, fields, now)

    for field in ("title", "description", "scheduled_date", "reminder_minutes_before"):
        if field in fields and (fields[field] is not None or field == "description"):
            setattr(task, field, fields[field])

    task.remind_at = compute_remind_at(task.scheduled_date, task.reminder_minutes_before)
    task.status = outcome.status.value
    task.completed_at = outcome.completed_at
    task.reminder_sent = outcome.reminder_sent
    task.updated_at = now

    _commit(db, "update_task")
    db.refresh(task)
    return task


def delete_task(db: Session, task_id: int, user_id: str):
    task = get_task(db, task_id, user_id)
    db.delete(task)
    _commit(db, "delete_task")


def mark_missed_tasks(db: Session, now: datetime, user_id: Optional[str] = None) -> int:
    """
    pending/upcoming dont scheduled_date < now → missed.

    Avec user_id: uniquement les tâches de ce user (avant une lecture).
    Sans: toutes les tâches (sweep global). Idempotent.
    Ne touche ni reminder_sent ni completed_at.
    """
    try:
        query = db.query(Task).filter(
            Task.status.in_(OPEN_STATUSES),
            Task.scheduled_date < now,
        )
        if user_id is not None:
            query = query.filter(Task.user_id == user_id)

        count = query.update(
            {Task.status: TaskStatus.MISSED.value, Task.updated_at: now},
            synchronize_session=False,
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"mark_missed_tasks failed: {exc}")
        raise StoreError("mark_missed_tasks failed") from exc
    _commit(db, "mark_missed_tasks")

    if count:
        scope = f"user {user_id}" if user_id is not None else "all users"
        logger.info(f"Automatically marked {count} task(s) as missed ({scope})")
    return count


def get_due_reminders(db: Session, now: datetime) -> List[Task]:
    """Due-set: rappel pas envoyé, tâche ouverte, pas encore échue, délai de rappel atteint."""
    try:
        return db.query(Task).filter(
            Task.reminder_sent == False,
            Task.status.notin_(CLOSED_STATUSES),
            Task.scheduled_date > now,
            Task.remind_at <= now,
        ).order_by(Task.remind_at.asc()).all()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError("get_due_reminders failed") from exc


def mark_reminder_sent(db: Session, task_id: int, scheduled_date: datetime, now: datetime) -> bool:
    """
    reminder_sent = true, seulement si la tâche n'a pas bougé depuis la lecture
    (pas déjà marquée, pas replanifiée). Retourne True si une ligne a changé.
    """
    try:
        count = db.query(Task).filter(
            Task.id == task_id,
            Task.reminder_sent == False,
            Task.scheduled_date == scheduled_date,
        ).update(
            {Task.reminder_sent: True, Task.updated_at: now},
            synchronize_session=False,
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError("mark_reminder_sent failed") from exc
    _commit(db, "mark_reminder_sent")
    return count == 1


def get_analytics(db: Session, user_id: str, now: datetime) -> dict:
    user_id = _require_user_id(user_id)
    try:
        mark_missed_tasks(db, now, user_id=user_id)
    except StoreError:
        logger.warning(f"Analytics of user {user_id} computed without refreshing missed status")

    rows = db.query(Task.status, func.count(Task.id)).filter(
        Task.user_id == user_id
    ).group_by(Task.status).all()

    stats = {
        "total_tasks": 0,
        "completed_tasks": 0,
        "pending_tasks": 0,
        "missed_tasks": 0,
        "status_counts": {},
    }
    for status, count in rows:
        stats["status_counts"][status] = count
        stats["total_tasks"] += count
        if status == TaskStatus.COMPLETED.value:
            stats["completed_tasks"] = count
        elif status in OPEN_STATUSES:
            stats["pending_tasks"] += count
        elif status == TaskStatus.MISSED.value:
            stats["missed_tasks"] = count
    return stats
