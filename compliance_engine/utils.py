"""
Submittal Compliance Engine - Utility Functions and Configuration Management
"""

import math
import re
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from loguru import logger


class Settings(BaseSettings):
    """
    Application settings - automatically loaded from .env file
    """
    # Engine defaults
    strict_mode: bool = True
    confidence_threshold: float = 0.7
    max_critical_issues: int = 5
    compliance_pass_score: int = 80
    conditional_pass_score: int = 60
    match_threshold: float = 0.30

    # Paths
    data_dir: str = "./data"
    output_dir: str = "./reports"
    log_dir: str = "logs"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "COMPLIANCE_"
        case_sensitive = False


def setup_logger(log_level: str = "INFO", log_dir: Optional[str] = None):
    """
    Configure Loguru logger
    """
    logger.remove()  # Remove default handler

    # Colored console logging
    logger.add(
        sys.stdout,
        colorize=True,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=log_level
    )

    # File logging
    if log_dir:
        logger.add(
            f"{log_dir}/compliance_engine_{{time:YYYY-MM-DD}}.log",
            rotation="1 day",
            retention="7 days",
            level=log_level
        )

    return logger


def get_settings() -> Settings:
    """
    Load and return application settings
    """
    try:
        settings = Settings()
        return settings
    except Exception as e:
        logger.error(f"❌ Failed to load settings: {e}")
        logger.info("💡 Please check your .env file and COMPLIANCE_* environment variables.")
        raise


def ensure_directories(settings: Optional[Settings] = None):
    """
    Ensure all required directories exist
    """
    settings = settings or get_settings()

    dirs = [
        settings.output_dir,
        settings.log_dir,
    ]

    for dir_path in dirs:
        Path(dir_path).mkdir(parents=True, exist_ok=True)
        logger.debug(f"Directory checked: {dir_path}")


def slugify(text: str, max_length: int = 50) -> str:
    """Convert a section title to a lowercase hyphenated id."""
    text = (text or "").lower()
    text = re.sub(r'[^a-z0-9\s]', '', text)
    text = re.sub(r'\s+', '-', text.strip())
    return text[:max_length].strip('-') or "section"


def tokenize(text: str) -> set:
    """Lowercase whitespace tokenization into a word set."""
    return set((text or "").lower().split())


def add_days(reference: datetime, days: int) -> str:
    """Return the ISO date `days` after `reference`."""
    return (reference + timedelta(days=days)).date().isoformat()


def load_text_file(path: Path) -> str:
    """Read an already-extracted plain text document."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return path.read_text(encoding="utf-8", errors="replace")


def round_score(value: float) -> int:
    """Round half up (62.5 -> 63)."""
    return int(math.floor(value + 0.5))
