"""GuardedMarket — явный handle эксклюзивного доступа к рынку

Один логический рынок, одна область взаимного исключения на всю длительность
операции (включая многополосный цикл route_trade). Глобального синглтона нет:
handle передаётся во все точки вызова.
"""

import threading
from contextlib import contextmanager
from typing import Iterator

from src.core.domain.market import MarketAggregator


class GuardedMarket:
    """Контейнер MarketAggregator под одним RLock."""

    def __init__(self, market: MarketAggregator):
        self._market = market
        self._lock = threading.RLock()

    @contextmanager
    def mutate(self) -> Iterator[MarketAggregator]:
        """Эксклюзивный доступ для мутирующей операции."""
        with self._lock:
            yield self._market

    @contextmanager
    def read(self) -> Iterator[MarketAggregator]:
        """
        Доступ для чтения; не пересекается с мутациями.

        Берёт тот же эксклюзивный RLock, что и mutate(): чтения сериализуются
        и между собой, параллельных читателей нет.
        """
        with self._lock:
            yield self._market

    def replace(self, market: MarketAggregator) -> None:
        """Атомарная замена рынка целиком (reconfigure/restore)."""
        with self._lock:
            self._market = market
