"""
Service de rappels - un tick du sweep des rappels par email.

Pour chaque tâche du due-set:
1. résoudre l'email du propriétaire (annuaire), sinon on saute la tâche
2. envoyer l'email via le notifier, sinon on saute la tâche
3. marquer reminder_sent = true (update conditionnel)

Une tâche sautée garde reminder_sent = false: elle sera reprise au tick suivant,
jusqu'à ce qu'elle devienne missed.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from taskmaster.core.config import settings
from taskmaster.core.errors import DirectoryLookupError, NotifierError, StoreError
from taskmaster.models.task import Task
from taskmaster.services.email_service import (
    format_duration,
    format_scheduled_date,
    render_reminder_email,
)
from taskmaster.services.task_service import get_due_reminders, mark_reminder_sent
from taskmaster.services.user_service import lookup_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DueReminder:
    """Copie des champs utiles: les instances ORM expirent à chaque commit du tick."""

    task_id: int
    user_id: str
    title: str
    description: Optional[str]
    scheduled_date: datetime

    @classmethod
    def from_task(cls, task: Task) -> "DueReminder":
        return cls(task.id, task.user_id, task.title, task.description, task.scheduled_date)


@dataclass
class ReminderSweepResult:
    due: int = 0
    sent: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)


def build_reminder(task: DueReminder, now: datetime):
    """(subject, html) du rappel d'une tâche"""
    subject = f"⏰ Reminder: {task.title}"
    body = render_reminder_email(
        title=task.title,
        description=task.description,
        scheduled_date=format_scheduled_date(task.scheduled_date),
        time_remaining=format_duration(task.scheduled_date - now),
        app_url=settings.APP_URL,
    )
    return subject, body


def send_due_reminders(db: Session, notifier, now: datetime) -> ReminderSweepResult:
    result = ReminderSweepResult()

    try:
        tasks = [DueReminder.from_task(t) for t in get_due_reminders(db, now)]
    except StoreError as e:
        logger.error(f"Failed to query tasks for reminders: {e}")
        return result

    result.due = len(tasks)
    if not tasks:
        return result

    logger.info(f"Found {len(tasks)} task(s) that need reminders at {now.isoformat()}")

    for task in tasks:
        try:
            email = lookup_email(db, task.user_id)
        except DirectoryLookupError as e:
            logger.warning(f"Skipping task {task.task_id} - no email for user {task.user_id}: {e}")
            result.skipped.append(task.task_id)
            continue

        subject, body = build_reminder(task, now)
        try:
            message_id = notifier.send(settings.FROM_EMAIL, [email], subject, body)
        except NotifierError as e:
            logger.warning(f"Failed to send reminder for task {task.task_id}: {e}")
            result.failed.append(task.task_id)
            continue

        try:
            marked = mark_reminder_sent(db, task.task_id, task.scheduled_date, now)
        except StoreError as e:
            logger.error(f"Failed to update reminder_sent for task {task.task_id}: {e}")
            result.failed.append(task.task_id)
            continue

        if marked:
            logger.info(f"Successfully sent reminder (ID: {message_id}) for task '{task.title}' to {email}")
        else:
            # complétée ou replanifiée pendant l'envoi
            logger.info(f"Reminder sent for task {task.task_id} but task changed meanwhile; flag left as is")
        result.sent.append(task.task_id)

    return result


def run_reminder_sweep(session_factory: Callable[[], Session], notifier, clock) -> ReminderSweepResult:
    """Un tick du job périodique: session dédiée, fermée à la fin."""
    db = session_factory()
    try:
        return send_due_reminders(db, notifier, clock.now())
    finally:
        db.close()
