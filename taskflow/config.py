import os
from dotenv import load_dotenv

load_dotenv()

# --- JWT Configuration ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "168"))  # 7 days

# --- Database ---
def normalize_database_url(url: str) -> str:
    """Pin bare postgres:// and postgresql:// URLs to the psycopg (v3) driver."""
    for scheme in ("postgres://", "postgresql://"):
        if url.startswith(scheme):
            return url.replace(scheme, "postgresql+psycopg://", 1)
    return url


# Default to local SQLite, but prefer environment variable for hosted Postgres
DATABASE_URL = normalize_database_url(os.getenv("DATABASE_URL", "sqlite:///./data/taskflow.db"))

# --- HTTP ---
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Client ---
API_URL = os.getenv("API_URL", "http://localhost:8000")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "10"))
