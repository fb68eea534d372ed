"""Gatekeeper — граница рынка: валидация запросов и эксклюзивный доступ.

- Validate-then-apply для всех мутирующих операций
- GuardedMarket: один lock на одну операцию
- Сохранение снапшота после успешной мутации
"""

from .guard import GuardedMarket
from .market_gatekeeper import GateResult, MarketGatekeeper

__all__ = [
    "GuardedMarket",
    "GateResult",
    "MarketGatekeeper",
]
