import os
from datetime import datetime

from dotenv import load_dotenv

# Base directory
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

load_dotenv(os.path.join(BASE_DIR, ".env"))

# Paths
STATIC_DIR = os.path.join(BASE_DIR, "static")
LOG_FILE = os.path.join(BASE_DIR, "launch.log")

# Server
DEFAULT_HOST = os.getenv("HOST", "0.0.0.0")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))
SESSION_TTL = int(os.getenv("SESSION_TTL", "3600"))  # 1 hour

# Exam window (one start time for every candidate)
EXAM_START_TIME = datetime.fromisoformat(
    os.getenv("EXAM_START_TIME", "2025-08-30T21:30:00+05:30")
)
EXAM_DURATION_MINUTES = int(os.getenv("EXAM_DURATION_MINUTES", "10"))
MAX_TAB_SWITCHES = int(os.getenv("MAX_TAB_SWITCHES", "5"))
DEFAULT_QUESTION_COUNT = int(os.getenv("DEFAULT_QUESTION_COUNT", "20"))

# Backends: "memory" / "firestore", "local" / "firebase"
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory").lower()
AUTH_BACKEND = os.getenv("AUTH_BACKEND", "local").lower()
AUTH_TIMEOUT = float(os.getenv("AUTH_TIMEOUT", "10.0"))

# Firebase
FIREBASE_API_KEY = os.getenv("FIREBASE_API_KEY", "")
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "")

ADMIN_EMAILS = frozenset(
    e.strip().lower() for e in os.getenv("ADMIN_EMAILS", "").split(",") if e.strip()
)


def require_firebase_settings() -> None:
    """Raise if a Firebase backend is selected without its settings."""
    required = {}
    if AUTH_BACKEND == "firebase":
        required["FIREBASE_API_KEY"] = FIREBASE_API_KEY
    if STORE_BACKEND == "firestore":
        required["FIREBASE_PROJECT_ID"] = FIREBASE_PROJECT_ID
    missing = [name for name, value in required.items() if not value]
    if missing:
        raise RuntimeError(
            "Missing Firebase configuration. Set the following environment "
            "variables (or add them to .env): " + ", ".join(missing)
        )
