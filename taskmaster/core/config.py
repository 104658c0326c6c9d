from os import getenv

class Settings:
    DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://taskmaster:taskmaster@db:5432/taskmaster")

    # Email (Resend)
    RESEND_API_KEY = getenv("RESEND_API_KEY", "")
    RESEND_API_URL = getenv("RESEND_API_URL", "https://api.resend.com/emails")
    FROM_EMAIL = getenv("FROM_EMAIL", "TaskMaster <onboarding@resend.dev>")
    ADMIN_EMAIL = getenv("ADMIN_EMAIL", "")
    EMAIL_TIMEOUT_SECONDS = float(getenv("EMAIL_TIMEOUT_SECONDS", "10"))

    APP_URL = getenv("APP_URL", "http://localhost:5173")
    FRONTEND_URL = getenv("FRONTEND_URL", "")

    # Tâches de fond
    SCHEDULER_ENABLED = getenv("SCHEDULER_ENABLED", "1") == "1"
    REMINDER_INTERVAL_SECONDS = float(getenv("REMINDER_INTERVAL_SECONDS", "60"))  # toutes les minutes
    MISSED_SWEEP_INTERVAL_SECONDS = float(getenv("MISSED_SWEEP_INTERVAL_SECONDS", "60"))

settings = Settings()
