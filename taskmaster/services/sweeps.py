"""Sweep global des tâches manquées (job périodique)"""

import logging
from typing import Callable

from sqlalchemy.orm import Session

from taskmaster.core.errors import StoreError
from taskmaster.services.task_service import mark_missed_tasks

logger = logging.getLogger(__name__)


def run_missed_sweep(session_factory: Callable[[], Session], clock) -> int:
    db = session_factory()
    try:
        return mark_missed_tasks(db, clock.now())
    except StoreError as e:
        logger.error(f"Failed to update missed tasks: {e}")
        return 0
    finally:
        db.close()
