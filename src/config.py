"""Configuration module for the Library Management API.

This module provides centralized configuration management, including directory
paths, API server settings, database, authentication, caching and mail
settings. All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory (holds the default SQLite database)
DATA_DIR_NAME = "data"
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / DATA_DIR_NAME)))

# Mail templates directory
TEMPLATE_DIR_NAME = "templates"
TEMPLATE_DIR = Path(__file__).parent / TEMPLATE_DIR_NAME

# --- API Server Configuration ---

APP_NAME: str = os.getenv("APP_NAME", "Library Management API")
APP_VERSION: str = "1.0.0"

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,"
    "http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Database Configuration ---

DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR}/library.db")

# --- Authentication Configuration ---

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

# Lifetime of an access token
JWT_TTL_MINUTES: int = int(os.getenv("JWT_TTL_MINUTES", "60"))

# Window, counted from the first login, during which a token may be refreshed
JWT_REFRESH_TTL_MINUTES: int = int(os.getenv("JWT_REFRESH_TTL_MINUTES", "20160"))  # 2 weeks

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

# --- Listing Configuration ---

DEFAULT_PAGE: int = 1
DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))

# Seconds a cached book listing stays valid
BOOK_LIST_CACHE_TTL: int = int(os.getenv("BOOK_LIST_CACHE_TTL", "600"))

# --- Mail Configuration ---

# "log" writes outgoing mail to the application log, "smtp" delivers it
MAIL_DRIVER: str = os.getenv("MAIL_DRIVER", "log").lower()
MAIL_HOST: str = os.getenv("MAIL_HOST", "localhost")
MAIL_PORT: int = int(os.getenv("MAIL_PORT", "587"))
MAIL_USERNAME: Optional[str] = os.getenv("MAIL_USERNAME")
MAIL_PASSWORD: Optional[str] = os.getenv("MAIL_PASSWORD")
MAIL_USE_TLS: bool = os.getenv("MAIL_USE_TLS", "true").lower() == "true"
MAIL_TIMEOUT: float = float(os.getenv("MAIL_TIMEOUT", "10"))
MAIL_FROM_ADDRESS: str = os.getenv("MAIL_FROM_ADDRESS", "noreply@library.local")
MAIL_FROM_NAME: str = os.getenv("MAIL_FROM_NAME", "Library")
