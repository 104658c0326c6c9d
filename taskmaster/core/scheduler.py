"""
Tâches périodiques en arrière-plan (sweep des rappels, sweep des tâches manquées).

Chaque PeriodicJob possède son propre thread et son propre Event d'arrêt:
start() au démarrage du process, stop() à l'arrêt.
"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicJob:
    def __init__(
        self,
        name: str,
        func: Callable[[], object],
        interval_seconds: float = 60.0,
        run_immediately: bool = True,
    ):
        self.name = name
        self.func = func
        self.interval_seconds = max(0.01, float(interval_seconds))
        self.run_immediately = run_immediately
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def start(self):
        if self.running:
            return
        if self._thread is not None and self._thread.is_alive():
            # stop() a expiré: le tick en cours doit finir avant de relancer
            self._thread.join()
        # un Event par run: l'ancien thread ne peut pas être réveillé par ce start()
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._loop, args=(self._stop_event,), daemon=True, name=self.name)
        self._thread.start()
        logger.info(f"Started background job '{self.name}' (every {self.interval_seconds}s)")

    def stop(self, timeout: float = 10.0):
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(f"Background job '{self.name}' still finishing its current tick")
                return
        self._thread = None
        logger.info(f"Stopped background job '{self.name}'")

    def run_once(self):
        """Un tick. Une erreur est loggée, jamais propagée: le prochain tick aura lieu."""
        try:
            self.func()
        except Exception:
            logger.exception(f"Background job '{self.name}' failed")

    def _loop(self, stop_event: threading.Event):
        if self.run_immediately:
            self.run_once()
        # wait() retourne True dès que stop() est appelé
        while not stop_event.wait(self.interval_seconds):
            self.run_once()
