"""
Amounts — Проверки сумм в нативной валюте

Все суммы (цены, комиссии, переводы) — целые числа в минимальных единицах
нативной валюты. Float и bool запрещены: округление денег недопустимо.
"""

from typing import Final


# Нулевая сумма (допустима для переводов и комиссии, но не для цены)
ZERO_AMOUNT: Final[int] = 0


def is_amount(value: object) -> bool:
    """
    Проверка, что значение является целой суммой.

    bool формально наследует int, поэтому исключается явно.
    """
    return isinstance(value, int) and not isinstance(value, bool)


def is_valid_price(price: object) -> bool:
    """
    Цена допустима, если это целое строго больше нуля.

    Args:
        price: Проверяемая цена

    Returns:
        True если цена может быть у выставленного лота
    """
    return is_amount(price) and price > ZERO_AMOUNT


def validate_amount(amount: object, name: str = "amount") -> int:
    """
    Проверка суммы перевода или комиссии.

    Args:
        amount: Сумма в минимальных единицах
        name: Имя параметра для сообщения об ошибке

    Returns:
        amount без изменений

    Raises:
        ValueError: Если сумма не целая или отрицательная
    """
    if not is_amount(amount):
        raise ValueError(f"{name} must be an integer amount, got {amount!r}")
    if amount < ZERO_AMOUNT:
        raise ValueError(f"{name} cannot be negative: {amount}")
    return amount
