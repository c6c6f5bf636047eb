"""
Application Configuration

Settings are read from environment variables (optionally loaded from a .env
file). Defaults target a local PostgreSQL development database.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Database connection settings
POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
POSTGRES_SERVER = os.getenv("POSTGRES_SERVER", "localhost")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")
POSTGRES_DB = os.getenv("POSTGRES_DB", "journal_links_db")

# DATABASE_URL wins when set (tests point it at SQLite)
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+psycopg2://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_SERVER}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]

LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Timezone used for audit timestamps
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")

# Hierarchy safety bounds
MAX_DELETION_PASSES = int(os.getenv("MAX_DELETION_PASSES", "20"))
MAX_HIERARCHY_DEPTH = int(os.getenv("MAX_HIERARCHY_DEPTH", "64"))

DEFAULT_PARTNERSHIP_TYPE = os.getenv("DEFAULT_PARTNERSHIP_TYPE", "STANDARD_TRANSACTION")
