"""Ошибки маркетплейса.

Все ошибки — синхронные отказы по предусловиям. Операция, завершившаяся
ошибкой, не оставляет изменений: состояние ledger, custody в реестре и балансы
откатываются к состоянию до вызова.
"""

from enum import Enum


class MarketErrorKind(str, Enum):
    """Вид отказа операции маркетплейса."""

    INVALID_PRICE = "InvalidPrice"
    INSUFFICIENT_FEE = "InsufficientFee"
    INVALID_FEE = "InvalidFee"
    WRONG_FEE = "WrongFee"
    WRONG_PAYMENT = "WrongPayment"
    NOT_LISTED = "NotListed"
    NOT_OWNER = "NotOwner"
    UNAUTHORIZED = "Unauthorized"
    UNKNOWN_ITEM = "UnknownItem"
    SETTLEMENT_FAILED = "SettlementFailed"
    REENTRANT_CALL = "ReentrantCall"


class MarketError(Exception):
    """
    Базовый отказ операции маркетплейса.

    Attributes:
        kind: вид отказа (MarketErrorKind)
        reason: человекочитаемое описание
    """

    kind: MarketErrorKind

    def __init__(self, reason: str):
        super().__init__(f"{self.kind.value}: {reason}")
        self.reason = reason


class InvalidPrice(MarketError):
    kind = MarketErrorKind.INVALID_PRICE


class InsufficientFee(MarketError):
    kind = MarketErrorKind.INSUFFICIENT_FEE


class InvalidFee(MarketError):
    """Комиссия за выставление не является целым неотрицательным числом."""

    kind = MarketErrorKind.INVALID_FEE


class WrongFee(MarketError):
    kind = MarketErrorKind.WRONG_FEE


class WrongPayment(MarketError):
    kind = MarketErrorKind.WRONG_PAYMENT


class NotListed(MarketError):
    kind = MarketErrorKind.NOT_LISTED


class NotOwner(MarketError):
    kind = MarketErrorKind.NOT_OWNER


class Unauthorized(MarketError):
    kind = MarketErrorKind.UNAUTHORIZED


class UnknownItem(MarketError):
    kind = MarketErrorKind.UNKNOWN_ITEM


class SettlementFailed(MarketError):
    """Перевод средств не выполнен (получатель отказал или нет средств)."""

    kind = MarketErrorKind.SETTLEMENT_FAILED


class ReentrantCall(MarketError):
    """Изменяющая операция вызвана во время выполнения другой."""

    kind = MarketErrorKind.REENTRANT_CALL


class LedgerInvariantViolation(Exception):
    """
    Нарушение инварианта ledger (рассинхронизация счётчиков или custody).

    Не является отказом по предусловию: означает дефект, требует аудита.
    """

    pass
