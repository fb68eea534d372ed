"""
Snapshot — сериализуемая модель состояния рынка

Immutable Pydantic модели:
- MarketSnapshot: персистентный снапшот (полосы, global reserves, токены)
- MarketStateView / BandView: read-only представление для дашбордов и API
- PriceQuote: агрегированная цена пары токенов

Снапшот версионирован (schema_version) и совместим с JSON Schema
contracts/schema/market_snapshot.json. Опциональные поля (lp_shares)
имеют явные значения по умолчанию, чтобы старые записи загружались без
изменения формы.

Round-trip model_dump_json → model_validate_json воспроизводит все float
поля бит-в-бит.
"""

from typing import Any, Final

from pydantic import BaseModel, Field

from src.core.domain.errors import SnapshotVersionMismatch
from src.core.domain.liquidity_band import BandRegime

SNAPSHOT_SCHEMA_VERSION: Final[str] = "1"


# =============================================================================
# PERSISTED RECORDS
# =============================================================================


class PoolRecord(BaseModel):
    """Состояние одного SpherePool."""

    radius: float = Field(..., description="Радиус гиперсферы r")
    reserves: list[float] = Field(..., description="Резервы по токенам")
    token_names: list[str] = Field(..., min_length=1, description="Имена токенов")

    model_config = {"frozen": True}


class BandRecord(BaseModel):
    """Состояние одной полосы ликвидности."""

    pool: PoolRecord = Field(..., description="Пул полосы")
    plane_constant: float = Field(..., description="Plane constant полосы")
    lp_shares: dict[str, float] = Field(
        default_factory=dict, description="LP id → shares (optional, default {})"
    )

    model_config = {"frozen": True}


class MarketSnapshot(BaseModel):
    """
    Снапшот рынка для персистентности.

    Содержит ровно: список полос, global reserves, имена токенов
    (плюс schema_version для эволюции формата).
    """

    schema_version: str = Field(
        default=SNAPSHOT_SCHEMA_VERSION,
        pattern="^1$",
        description="Версия схемы снапшота",
    )
    bands: list[BandRecord] = Field(default_factory=list, description="Полосы")
    global_reserves: list[float] = Field(..., description="Σ резервов по полосам")
    token_names: list[str] = Field(..., min_length=1, description="Имена токенов")

    model_config = {"frozen": True}

    @classmethod
    def parse(cls, data: dict[str, Any]) -> "MarketSnapshot":
        """
        Валидация dict с явной проверкой версии.

        Raises:
            SnapshotVersionMismatch: schema_version отличается от поддерживаемой
            pydantic.ValidationError: нарушение формы записи
        """
        version = data.get("schema_version", SNAPSHOT_SCHEMA_VERSION)
        if version != SNAPSHOT_SCHEMA_VERSION:
            raise SnapshotVersionMismatch(
                f"Unsupported snapshot schema_version {version!r}, "
                f"expected {SNAPSHOT_SCHEMA_VERSION!r}"
            )
        return cls.model_validate(data)


# =============================================================================
# READ-ONLY VIEWS
# =============================================================================


class BandView(BaseModel):
    """Строка таблицы полос для отображения."""

    index: int = Field(..., ge=0)
    plane_constant: float
    parallel_magnitude: float
    reserves: list[float]
    radius: float
    is_interior: bool
    is_boundary: bool
    regime: BandRegime
    liquidity: float

    model_config = {"frozen": True}


class MarketStateView(BaseModel):
    """Полное read-only состояние рынка."""

    ticks: list[BandView] = Field(default_factory=list)
    token_names: list[str]
    global_reserves: list[float]
    tick_count: int = Field(..., ge=0)

    model_config = {"frozen": True}


class PriceQuote(BaseModel):
    """Агрегированная цена to_token в единицах from_token."""

    from_token: str
    to_token: str
    price: float

    model_config = {"frozen": True}
