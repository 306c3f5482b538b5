"""
Configuration module for the Virtual Stylist service
Contains logger setup and environment variables
"""

import os
import logging
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


# -------------------------
# Logger Setup
# -------------------------
def setup_logger(name: str = __name__, log_file: Optional[str] = None) -> logging.Logger:
    """
    Set up and return a logger with a console handler and an optional file handler

    Args:
        name: Logger name (usually __name__)
        log_file: Path to log file, skipped when not provided

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

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def _float_from_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise RuntimeError(f"Invalid float value for {name}: {value}") from exc


# Create the main application logger
logger = setup_logger("stylist", os.getenv("LOG_FILE"))

# -------------------------
# Environment Variables
# -------------------------
GEMINI_API_BASE = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta/models"
)
ANALYSIS_MODEL = os.getenv("GEMINI_ANALYSIS_MODEL", "gemini-3-flash-preview")
IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")
GEMINI_TIMEOUT_SECONDS = _float_from_env("GEMINI_TIMEOUT_SECONDS", 120.0)

DEFAULT_TEMPERATURE = 0.8
PACING_DELAY_SECONDS = _float_from_env("STYLIST_PACING_DELAY", 1.5)
PROGRESS_TICK_SECONDS = 0.8
PROGRESS_RESET_SECONDS = 0.5


def get_api_key() -> Optional[str]:
    """Return the Gemini API key, read fresh from the environment on every call."""
    return os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")


# Log configuration status
logger.info("Configuration loaded successfully")
logger.debug(f"GEMINI_API_KEY configured: {bool(get_api_key())}")
logger.debug(f"ANALYSIS_MODEL: {ANALYSIS_MODEL}")
logger.debug(f"IMAGE_MODEL: {IMAGE_MODEL}")
logger.debug(f"PACING_DELAY_SECONDS: {PACING_DELAY_SECONDS}")
