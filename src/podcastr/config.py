"""
Configuration management for Podcastr API.

Loads configuration from environment variables or .env file.
"""
import os
import re
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .errors import ConfigError

# Load environment variables from .env file if it exists
load_dotenv()

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_expiry(value: str) -> int:
    """
    Parse a token lifetime such as ``3600``, ``15m``, ``12h`` or ``7d``.

    Args:
        value: Lifetime string

    Returns:
        Lifetime in seconds

    Raises:
        ConfigError: If the value cannot be parsed or is not positive
    """
    match = _DURATION_RE.match(value or "")
    if not match:
        raise ConfigError(f"Invalid JWT_EXPIRE value: {value!r}")
    seconds = int(match.group(1)) * _DURATION_UNITS[match.group(2).lower()]
    if seconds <= 0:
        raise ConfigError(f"JWT_EXPIRE must be positive: {value!r}")
    return seconds


class Config:
    """Application configuration.

    Values are read from the environment when the instance is created; keyword
    arguments override them (tests build isolated configs this way).
    """

    def __init__(self, **overrides):
        self.STORAGE_DIR: Path = Path(os.getenv("STORAGE_DIR", "data"))

        # Token signing
        self.JWT_SECRET: Optional[str] = os.getenv("JWT_SECRET", None)
        self.JWT_EXPIRE: str = os.getenv("JWT_EXPIRE", "7d")
        self.BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

        # Uploads (50MB default)
        self.MAX_FILE_SIZE: int = int(os.getenv("MAX_FILE_SIZE", "52428800"))

        # Server
        self.PORT: int = int(os.getenv("PORT", "5000"))
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
        self.CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

        # Base URL the client layer prefixes to relative media URLs
        self.PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:5000")

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise ConfigError(f"Unknown configuration key: {key}")
            setattr(self, key, value)

        self.STORAGE_DIR = Path(self.STORAGE_DIR)
        # Convert relative paths to absolute paths relative to project root
        if not self.STORAGE_DIR.is_absolute():
            self.STORAGE_DIR = PROJECT_ROOT / self.STORAGE_DIR

    @property
    def episodes_file(self) -> Path:
        return self.STORAGE_DIR / "episodes.json"

    @property
    def users_file(self) -> Path:
        return self.STORAGE_DIR / "users.json"

    @property
    def blobs_dir(self) -> Path:
        return self.STORAGE_DIR / "uploads"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "development"

    @property
    def token_lifetime_seconds(self) -> int:
        return parse_expiry(self.JWT_EXPIRE)

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    def validate(self) -> None:
        """
        Check settings the process cannot start without.

        Raises:
            ConfigError: If JWT_SECRET is missing or JWT_EXPIRE is invalid
        """
        if not self.JWT_SECRET:
            raise ConfigError("JWT_SECRET is not defined")
        parse_expiry(self.JWT_EXPIRE)
        if self.MAX_FILE_SIZE <= 0:
            raise ConfigError("MAX_FILE_SIZE must be positive")
