"""
Configuration management.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else None


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # Order engine
    simulated_latency_ms: int = field(
        default_factory=lambda: int(os.getenv("SIMULATED_LATENCY_MS", "0"))
    )
    evaluator_seed: Optional[int] = field(default_factory=lambda: _optional_int("EVALUATOR_SEED"))
    max_notifications: int = field(
        default_factory=lambda: int(os.getenv("MAX_NOTIFICATIONS", "50"))
    )

    # Data
    data_dir: str = field(default_factory=lambda: os.getenv("DATA_DIR", "./data"))
    orders_persist_path: Optional[str] = field(
        default_factory=lambda: os.getenv("ORDERS_PERSIST_PATH") or None
    )
    reports_dir: str = field(default_factory=lambda: os.getenv("REPORTS_DIR", "./data/reports"))

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    @property
    def logging_level(self) -> int:
        """Numeric logging level (falls back to INFO for unknown names)."""
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.INFO

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "simulated_latency_ms": self.simulated_latency_ms,
            "evaluator_seed": self.evaluator_seed,
            "max_notifications": self.max_notifications,
            "data_dir": self.data_dir,
            "orders_persist_path": self.orders_persist_path,
            "reports_dir": self.reports_dir,
        }
