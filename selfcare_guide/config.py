"""
Configuration module for the Self-Care Guide API
Contains logger setup and environment variables
"""

import os
import logging
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


# -------------------------
# Logger Setup
# -------------------------
def setup_logger(
    name: str = __name__, log_file: str = "selfcare_guide.log"
) -> logging.Logger:
    """
    Set up and return a logger with both file and console handlers

    Args:
        name: Logger name (usually __name__)
        log_file: Path to log file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Avoid adding duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    file_handler = logging.FileHandler(log_file, mode="a")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


LOG_FILE = os.getenv("LOG_FILE", "selfcare_guide.log")

# Create the main application logger
logger = setup_logger("selfcare_guide", LOG_FILE)


# -------------------------
# Environment Variables
# -------------------------
PLACEHOLDER_API_KEY = "PLACEHOLDER_API_KEY"

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-flash-latest")
GEMINI_API_BASE = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_TIMEOUT_SECONDS = float(os.getenv("GEMINI_TIMEOUT_SECONDS", "120"))

APP_ENV = os.getenv("APP_ENV", "production")
IS_PRODUCTION = APP_ENV.lower() == "production"

DEFAULT_ALLOWED_ORIGINS = [
    "https://self-care-guide.vercel.app",
    "https://self-care-guide-git-main-asofia888.vercel.app",
    "http://localhost:5173",
]


def _parse_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_ALLOWED_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


ALLOWED_ORIGINS = _parse_origins(os.getenv("ALLOWED_ORIGINS"))

# Rate limiting: "memory" (per-process) or "supabase" (shared table)
RATE_LIMIT_BACKEND = os.getenv("RATE_LIMIT_BACKEND", "memory").lower()
RATE_LIMIT_WINDOW_MS = 60 * 1000
RATE_LIMIT_REQUESTS_PER_MINUTE = 5

# supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY")


def api_key_configured(api_key: Optional[str]) -> bool:
    """Return True when the key is set and is not the placeholder value."""
    if not api_key or not api_key.strip():
        return False
    return api_key != PLACEHOLDER_API_KEY


# Log configuration status
logger.info("Configuration loaded successfully")
logger.debug(f"GEMINI_API_KEY configured: {api_key_configured(GEMINI_API_KEY)}")
logger.debug(f"GEMINI_MODEL: {GEMINI_MODEL}")
logger.debug(f"APP_ENV: {APP_ENV}")
logger.debug(f"ALLOWED_ORIGINS: {ALLOWED_ORIGINS}")
logger.debug(f"RATE_LIMIT_BACKEND: {RATE_LIMIT_BACKEND}")
logger.debug(f"SUPABASE_URL configured: {bool(SUPABASE_URL)}")
logger.debug(f"SUPABASE_SERVICE_KEY configured: {bool(SUPABASE_SERVICE_KEY)}")
