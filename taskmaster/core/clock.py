"""
Horloge injectable - source unique de "maintenant" pour l'API et les sweeps.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Clock:
    """Horloge murale réelle (UTC, aware)."""

    def now(self) -> datetime:
        return utc_now()


clock = Clock()


def get_clock() -> Clock:
    """Dépendance FastAPI, surchargée dans les tests"""
    return clock
