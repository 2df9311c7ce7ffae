import os
from dotenv import load_dotenv

load_dotenv()

# --- Database ---
# Default to local SQLite, but prefer environment variable (for hosted Postgres)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/habits.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Challenge defaults (used when a challenge is started without overrides) ---
DEFAULT_BOOST_INTERVAL_DAYS = int(os.getenv("DEFAULT_BOOST_INTERVAL_DAYS", "7"))
DEFAULT_BUFFER_PER_HABIT = int(os.getenv("DEFAULT_BUFFER_PER_HABIT", "1"))

# --- Clock ---
# "today" is evaluated in this zone, e.g. "Europe/Berlin"
TIMEZONE = os.getenv("TIMEZONE", "UTC")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
