"""
Database infrastructure: declarative base, column types and engine/session service.
"""

from voidcore.core.database.base import Base, DecimalString, IsoDateTime, TimestampMixin
from voidcore.core.database.service import DatabaseInitializationError, DatabaseService

__all__ = [
    "Base",
    "DecimalString",
    "IsoDateTime",
    "TimestampMixin",
    "DatabaseService",
    "DatabaseInitializationError",
]
