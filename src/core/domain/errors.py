"""
Errors — типизированная таксономия ошибок рынка

Все ошибки, видимые вызывающей стороне, наследуют MarketError и являются
recoverable: операция, обнаружившая ошибку валидации, не изменяет состояние.

Исключение из правила "no partial mutation": route_trade может оставить
часть полос изменёнными (см. MarketAggregator.route_trade).

InvariantViolation — отдельная ветка (AssertionError): нарушение инварианта
после успешного свопа является ошибкой программирования, а не ошибкой
пользовательского ввода.
"""


class MarketError(Exception):
    """
    Базовая recoverable ошибка.

    Attributes:
        code: Стабильный машиночитаемый код (имя вида ошибки)
    """

    code: str = "MarketError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


# =============================================================================
# POOL-LEVEL ERRORS
# =============================================================================


class TokenNotFound(MarketError):
    """Токен отсутствует в списке токенов пула."""

    code = "TokenNotFound"

    def __init__(self, token: str):
        super().__init__(f"Token '{token}' not found in pool")
        self.token = token


class InvalidAmount(MarketError):
    """Неположительная сумма сделки."""

    code = "InvalidAmount"


class SameToken(MarketError):
    """Своп токена в самого себя."""

    code = "SameToken"


class ComplexSolution(MarketError):
    """Квадратное уравнение свопа не имеет вещественного корня."""

    code = "ComplexSolution"


class InsufficientLiquidity(MarketError):
    """
    Выход превышает доступный резерв, либо маршрут не исполнен полностью.

    Для маршрутизированной сделки remaining и total_output описывают
    частичное исполнение (полосы до точки отказа остаются изменёнными).
    """

    code = "InsufficientLiquidity"

    def __init__(
        self,
        message: str = "",
        remaining: float | None = None,
        total_output: float | None = None,
    ):
        super().__init__(message)
        self.remaining = remaining
        self.total_output = total_output


class DivisionByZero(MarketError):
    """Знаменатель spot price (r − x_from) близок к нулю."""

    code = "DivisionByZero"


class LengthMismatch(MarketError):
    """Длина вектора резервов/сумм не совпадает с числом токенов."""

    code = "LengthMismatch"


# =============================================================================
# LP ERRORS
# =============================================================================


class InvalidPercentage(MarketError):
    """Процент вывода вне [0, 1]."""

    code = "InvalidPercentage"


class LPNotFound(MarketError):
    """LP идентификатор отсутствует в полосе."""

    code = "LPNotFound"

    def __init__(self, lp_id: str):
        super().__init__(f"LP id '{lp_id}' not found")
        self.lp_id = lp_id


class ZeroShares(MarketError):
    """LP позиция исчерпана (shares == 0)."""

    code = "ZeroShares"

    def __init__(self, lp_id: str):
        super().__init__(f"LP '{lp_id}' has no shares")
        self.lp_id = lp_id


# =============================================================================
# AGGREGATOR / BOUNDARY ERRORS
# =============================================================================


class InvalidLPId(MarketError):
    """Пустой идентификатор LP."""

    code = "InvalidLPId"


class NoLiquidityForPrice(MarketError):
    """Суммарный вес агрегированной цены равен нулю."""

    code = "NoLiquidityForPrice"


class InvalidReserves(MarketError):
    """Отрицательный или нечисловой (NaN/Inf) резерв."""

    code = "InvalidReserves"


class InvalidPlaneConstant(MarketError):
    """Plane constant должен быть положительным."""

    code = "InvalidPlaneConstant"


class BandIndexOutOfRange(MarketError):
    """Индекс полосы вне диапазона."""

    code = "BandIndexOutOfRange"

    def __init__(self, index: int, band_count: int):
        super().__init__(f"Invalid tick index {index} (tick_count={band_count})")
        self.index = index
        self.band_count = band_count


class EmptyTokenList(MarketError):
    """Рынок требует хотя бы один токен."""

    code = "EmptyTokenList"


class DuplicateToken(MarketError):
    """Имена токенов должны быть уникальны."""

    code = "DuplicateToken"


class SnapshotVersionMismatch(MarketError):
    """Неизвестная версия схемы снапшота."""

    code = "SnapshotVersionMismatch"


class SnapshotCorrupted(MarketError):
    """Сохранённый снапшот не проходит валидацию контракта."""

    code = "SnapshotCorrupted"


# =============================================================================
# UNRECOVERABLE FAULTS
# =============================================================================


class InvariantViolation(AssertionError):
    """
    Нарушение hypersphere-инварианта после операции, которая обязана его
    сохранять. Ошибка программирования, не входит в MarketError.
    """
