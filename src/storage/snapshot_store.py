"""SnapshotStore — JSON-файл со снапшотом MarketAggregator

- save: MarketSnapshot → JSON, атомарная запись (temp file + os.replace)
- load: JSON → валидация контракта (jsonschema) → MarketSnapshot (pydantic)
  → MarketAggregator. Отсутствующий файл → пустой рынок с заданными токенами.

Float поля round-trip воспроизводятся бит-в-бит (радиусы не пересчитываются).
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from jsonschema import ValidationError as SchemaValidationError
from pydantic import ValidationError

from src.core.contracts import validate_market_snapshot
from src.core.domain.errors import SnapshotCorrupted
from src.core.domain.market import MarketAggregator
from src.core.domain.snapshot import SNAPSHOT_SCHEMA_VERSION, MarketSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageConfig:
    """Конфигурация файлового хранилища."""

    path: str = "multi_tick.json"
    indent: int | None = 2


class SnapshotStore:
    """Файловое хранилище снапшотов рынка."""

    def __init__(self, config: StorageConfig | None = None):
        self.config = config or StorageConfig()

    @property
    def path(self) -> Path:
        return Path(self.config.path)

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, market: MarketAggregator) -> None:
        """Атомарная запись снапшота."""
        payload = market.to_snapshot().model_dump_json(indent=self.config.indent)

        target = self.path
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, target)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.debug("Saved market snapshot (%d bands) to %s", len(market.bands), target)

    def load_snapshot(self) -> MarketSnapshot:
        """
        Чтение и валидация снапшота.

        Raises:
            FileNotFoundError: файла нет
            SnapshotCorrupted: JSON невалиден или не соответствует контракту
            SnapshotVersionMismatch: неподдерживаемая schema_version
        """
        with open(self.path, "r", encoding="utf-8") as f:
            raw = f.read()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SnapshotCorrupted(f"Snapshot {self.path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise SnapshotCorrupted(f"Snapshot {self.path} must be a JSON object")

        if data.get("schema_version", SNAPSHOT_SCHEMA_VERSION) != SNAPSHOT_SCHEMA_VERSION:
            # Неизвестная версия → SnapshotVersionMismatch, а не SnapshotCorrupted
            return MarketSnapshot.parse(data)

        try:
            validate_market_snapshot(data)
            return MarketSnapshot.parse(data)
        except (SchemaValidationError, ValidationError) as e:
            raise SnapshotCorrupted(f"Snapshot {self.path} failed validation: {e}") from e

    def load(self, token_names: Sequence[str]) -> MarketAggregator:
        """
        Загрузка рынка; при отсутствии файла — пустой рынок с token_names.
        """
        if not self.exists():
            logger.info("No snapshot at %s, starting empty market", self.path)
            return MarketAggregator(token_names)

        snapshot = self.load_snapshot()
        market = MarketAggregator.from_snapshot(snapshot)
        logger.info("Loaded market snapshot from %s (%d bands)", self.path, len(market.bands))
        return market
