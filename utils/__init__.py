"""
Utility modules for the evaluation engine.
"""

from .formatting import format_currency, format_percent, format_timestamp
from .config import Config

__all__ = ["format_currency", "format_percent", "format_timestamp", "Config"]
