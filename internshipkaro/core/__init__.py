"""Core app configuration, database, security and errors."""

from internshipkaro.core.config import Settings, get_settings
from internshipkaro.core.database import get_db

__all__ = ["Settings", "get_settings", "get_db"]
