"""
Contract Validation Module

Модуль для валидации JSON контрактов снапшотов рынка.
"""

from .validators import (
    ContractValidator,
    MarketSnapshotValidator,
    SchemaLoader,
    validate_market_snapshot,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "MarketSnapshotValidator",
    # Functions
    "validate_market_snapshot",
]
