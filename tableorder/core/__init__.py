"""
Core module initialization.
Exports configuration, logging utilities and the error taxonomy.
"""

from tableorder.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from tableorder.core.exceptions import (
    OrderingError,
    ValidationError,
    NoPersistenceTargetError,
    PersistenceError,
    LedgerError,
    GenerationError,
    ServiceOverloadedError,
    ServiceUnavailableError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "OrderingError",
    "ValidationError",
    "NoPersistenceTargetError",
    "PersistenceError",
    "LedgerError",
    "GenerationError",
    "ServiceOverloadedError",
    "ServiceUnavailableError",
]
