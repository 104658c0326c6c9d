import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskmaster.core import database
from taskmaster.core.clock import clock
from taskmaster.core.config import settings
from taskmaster.core.scheduler import PeriodicJob
from taskmaster.models import contact, feedback, task, user  # noqa: F401 (tables)
from taskmaster.routers import health, tasks, feedback as feedback_router
from taskmaster.services.email_service import notifier
from taskmaster.services.reminder_service import run_reminder_sweep
from taskmaster.services.sweeps import run_missed_sweep

logger = logging.getLogger(__name__)

# Init DB
database.Base.metadata.create_all(bind=database.engine)


def build_jobs():
    """Les deux jobs de fond: rappels email et passage des tâches en retard à missed"""
    return [
        PeriodicJob(
            "reminder-sweep",
            lambda: run_reminder_sweep(database.SessionLocal, notifier, clock),
            interval_seconds=settings.REMINDER_INTERVAL_SECONDS,
        ),
        PeriodicJob(
            "missed-sweep",
            lambda: run_missed_sweep(database.SessionLocal, clock),
            interval_seconds=settings.MISSED_SWEEP_INTERVAL_SECONDS,
        ),
    ]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    jobs = build_jobs() if settings.SCHEDULER_ENABLED else []
    for job in jobs:
        job.start()
    yield
    # Shutdown
    for job in jobs:
        job.stop()


app = FastAPI(
    title="TaskMaster API",
    version="1.0.0",
    lifespan=lifespan
)

allowed_origins = ["http://localhost:5173", "http://localhost:3000"]
if settings.FRONTEND_URL:
    allowed_origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    max_age=12 * 3600,
)

# Routes
app.include_router(health.router, prefix="/health")
app.include_router(tasks.router, prefix="/api")
app.include_router(tasks.analytics_router, prefix="/api")
app.include_router(feedback_router.router, prefix="/api")
