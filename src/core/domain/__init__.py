"""
Domain models and value objects.

Contains the hypersphere AMM entities: SpherePool, LiquidityBand,
MarketAggregator, snapshot records and the error taxonomy.
"""

from src.core.domain.errors import (
    BandIndexOutOfRange,
    ComplexSolution,
    DivisionByZero,
    DuplicateToken,
    EmptyTokenList,
    InsufficientLiquidity,
    InvalidAmount,
    InvalidLPId,
    InvalidPercentage,
    InvalidPlaneConstant,
    InvalidReserves,
    InvariantViolation,
    LengthMismatch,
    LPNotFound,
    MarketError,
    NoLiquidityForPrice,
    SameToken,
    SnapshotCorrupted,
    SnapshotVersionMismatch,
    TokenNotFound,
    ZeroShares,
)
from src.core.domain.liquidity_band import BandRegime, LiquidityBand
from src.core.domain.market import (
    BandClassification,
    MarketAggregator,
    MarketDefaults,
    RouteFill,
    RouteResult,
    RoutingConfig,
    new_aggregator,
)
from src.core.domain.snapshot import (
    SNAPSHOT_SCHEMA_VERSION,
    BandRecord,
    BandView,
    MarketSnapshot,
    MarketStateView,
    PoolRecord,
    PriceQuote,
)
from src.core.domain.sphere_pool import SpherePool, new_pool

__all__ = [
    # Errors
    "MarketError",
    "TokenNotFound",
    "InvalidAmount",
    "SameToken",
    "ComplexSolution",
    "InsufficientLiquidity",
    "DivisionByZero",
    "LengthMismatch",
    "InvalidPercentage",
    "LPNotFound",
    "ZeroShares",
    "InvalidLPId",
    "NoLiquidityForPrice",
    "InvalidReserves",
    "InvalidPlaneConstant",
    "BandIndexOutOfRange",
    "EmptyTokenList",
    "DuplicateToken",
    "SnapshotVersionMismatch",
    "SnapshotCorrupted",
    "InvariantViolation",
    # Pool
    "SpherePool",
    "new_pool",
    # Band
    "LiquidityBand",
    "BandRegime",
    # Market
    "MarketAggregator",
    "MarketDefaults",
    "RoutingConfig",
    "BandClassification",
    "RouteFill",
    "RouteResult",
    "new_aggregator",
    # Snapshot
    "SNAPSHOT_SCHEMA_VERSION",
    "PoolRecord",
    "BandRecord",
    "MarketSnapshot",
    "BandView",
    "MarketStateView",
    "PriceQuote",
]
