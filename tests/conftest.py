import os
import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

# Pas de Postgres ni de jobs de fond pendant les tests
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ["SCHEDULER_ENABLED"] = "0"

from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Créer engine SQLite pour tests AVANT d'importer app
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"
test_engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

# PATCH: remplacer le engine et SessionLocal du core.database AVANT d'importer app
import taskmaster.core.database
taskmaster.core.database.engine = test_engine
taskmaster.core.database.SessionLocal = TestingSessionLocal

# Maintenant importer app (qui utilisera notre engine SQLite)
from taskmaster.core.clock import get_clock
from taskmaster.core.database import Base, get_db
from taskmaster.main import app
from taskmaster.models.user import User
from taskmaster.services import task_service
from taskmaster.services.email_service import get_notifier

from fakes import FixedClock, FakeNotifier


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override la dépendance
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_teardown():
    """Crée et nettoie la DB avant/après chaque test"""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def clock():
    fixed = FixedClock()
    app.dependency_overrides[get_clock] = lambda: fixed
    yield fixed
    app.dependency_overrides.pop(get_clock, None)


@pytest.fixture
def notifier():
    fake = FakeNotifier()
    app.dependency_overrides[get_notifier] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_notifier, None)


@pytest.fixture
def client(clock):
    """Client de test FastAPI"""
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def session_factory():
    """Fabrique de sessions passée aux jobs de fond"""
    return TestingSessionLocal


@pytest.fixture
def db():
    """Session DB pour les tests"""
    db = TestingSessionLocal()
    yield db
    db.close()


@pytest.fixture
def make_user(db):
    def _make(user_id="user-1", email="alice@example.com"):
        user = User(id=user_id, email=email)
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def make_task(db, clock):
    """Crée une tâche via le service, relative à l'horloge de test"""
    def _make(user_id="user-1", title="Tâche", in_minutes=90, reminder=15, status=None, description=None):
        data = {
            "user_id": user_id,
            "title": title,
            "description": description,
            "scheduled_date": clock.now() + timedelta(minutes=in_minutes),
            "reminder_minutes_before": reminder,
            "status": status,
        }
        return task_service.create_task(db, data, clock.now())
    return _make
