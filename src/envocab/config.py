"""Configuration settings for the vocabulary reviewer."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
CATALOG_DIR = Path(os.getenv("CATALOG_DIR", str(DATA_DIR / "words")))

# Learning settings
MAX_STAGE = 6
REVIEW_INTERVALS: Dict[int, int] = {
    0: 1,
    1: 1,
    2: 2,
    3: 4,
    4: 7,
    5: 15,
    6: 30,
}  # stage -> days until next review

# Snapshot settings
SNAPSHOT_VERSION = 1
DEFAULT_STORAGE_KEY = "ebbinghaus-progress"
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        CATALOG_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    catalog_dir: Path = CATALOG_DIR


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///envocab.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class LearningSettings:
    """Review scheduling settings."""
    timezone: str = os.getenv("LEARNING_TIMEZONE", "UTC")
    review_intervals: Dict[int, int] = field(default_factory=lambda: dict(REVIEW_INTERVALS))
    max_stage: int = MAX_STAGE


@dataclass
class StorageSettings:
    """Snapshot storage settings."""
    key: str = os.getenv("STORAGE_KEY", DEFAULT_STORAGE_KEY)
    quota_bytes: int = int(os.getenv("STORAGE_QUOTA_BYTES", str(DEFAULT_QUOTA_BYTES)))
    snapshot_version: int = SNAPSHOT_VERSION
    transfer_file: str = os.getenv("TRANSFER_FILE", str(DATA_DIR / "transfer.json"))


@dataclass
class MonitoringSettings:
    """Prometheus exporter settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_learning_settings() -> LearningSettings:
    """Get learning settings."""
    return LearningSettings()


def get_storage_settings() -> StorageSettings:
    """Get storage settings."""
    return StorageSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    learning: LearningSettings = field(default_factory=get_learning_settings)
    storage: StorageSettings = field(default_factory=get_storage_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        intervals = self.learning.review_intervals
        if sorted(intervals) != list(range(self.learning.max_stage + 1)):
            raise ValueError("Review intervals must cover every stage from 0 to MAX_STAGE")

        if any(days < 1 for days in intervals.values()):
            raise ValueError("Review intervals must be positive")

        try:
            ZoneInfo(self.learning.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown LEARNING_TIMEZONE: {self.learning.timezone}") from e

        if self.storage.quota_bytes < 1:
            raise ValueError("STORAGE_QUOTA_BYTES must be positive")

        if not self.storage.key:
            raise ValueError("STORAGE_KEY is required")

        if self.monitoring.port < 1 or self.monitoring.port > 65535:
            raise ValueError("METRICS_PORT must be between 1 and 65535")


# Create global settings instance
settings = Settings()
settings.validate()
