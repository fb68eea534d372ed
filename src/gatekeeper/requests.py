"""
Requests — модели запросов на границе рынка

Immutable Pydantic модели описывают только форму запроса (типы полей).
Семантическая проверка (длины, знаки, диапазоны, индексы) выполняется
RequestValidationGate, чтобы каждая ошибка получила стабильный код.
"""

from pydantic import BaseModel, Field


class TradeRequest(BaseModel):
    """Маршрутизированная сделка from_token → to_token."""

    from_token: str = Field(..., description="Токен, который вносится")
    to_token: str = Field(..., description="Токен, который выводится")
    amount: float = Field(..., description="Сумма входа")

    model_config = {"frozen": True}


class AddBandRequest(BaseModel):
    """Новая полоса ликвидности."""

    plane_constant: float = Field(..., description="Plane constant полосы")
    reserves: list[float] = Field(..., description="Начальные резервы")

    model_config = {"frozen": True}


class SetReservesRequest(BaseModel):
    """Административная перезапись резервов полосы."""

    band_index: int = Field(..., description="Индекс полосы")
    reserves: list[float] = Field(..., description="Новые резервы")

    model_config = {"frozen": True}


class AddLiquidityRequest(BaseModel):
    """Депозит LP в полосу."""

    band_index: int = Field(..., description="Индекс полосы")
    lp_id: str = Field(..., description="Идентификатор LP")
    amounts: list[float] = Field(..., description="Суммы по токенам")

    model_config = {"frozen": True}


class WithdrawLiquidityRequest(BaseModel):
    """Вывод доли позиции LP."""

    band_index: int = Field(..., description="Индекс полосы")
    lp_id: str = Field(..., description="Идентификатор LP")
    percentage: float = Field(..., description="Доля позиции в [0, 1]")

    model_config = {"frozen": True}


class ReconfigureRequest(BaseModel):
    """Полная замена токенов и начальной полосы."""

    token_names: list[str] = Field(..., description="Новый список токенов")
    initial_reserves: list[float] = Field(..., description="Резервы начальной полосы")
    initial_plane: float = Field(..., description="Plane constant начальной полосы")

    model_config = {"frozen": True}
