"""Payment rail — атомарные переводы нативной валюты.

Внешний примитив: перевод либо выполняется целиком, либо не выполняется.
Получатель может отказаться принимать средства (refuse), тогда перевод
завершается PaymentError и операция маркетплейса откатывается.

Среда исполнения делает весь вызов маркетплейса транзакцией: begin() открывает
её, commit() фиксирует, rollback() возвращает прежние балансы только тех
аккаунтов, которые были затронуты.
"""

from typing import Dict, FrozenSet, Optional, Protocol

from src.core.domain.amounts import validate_amount


class PaymentError(Exception):
    """Перевод не выполнен: нет средств или получатель отказал."""

    pass


class PaymentRail(Protocol):
    """Интерфейс переводов, которым пользуется MarketLedger."""

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> None: ...

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class InMemoryPaymentRail:
    """Балансы аккаунтов в памяти процесса."""

    def __init__(self, balances: Dict[str, int] | None = None):
        self._balances: Dict[str, int] = {}
        self._refusing: set[str] = set()
        # account → баланс до первого изменения в транзакции (None: аккаунта не было)
        self._undo: Optional[Dict[str, Optional[int]]] = None
        for account, amount in (balances or {}).items():
            self.deposit(account, amount)

    @property
    def refusing_accounts(self) -> FrozenSet[str]:
        return frozenset(self._refusing)

    def deposit(self, account: str, amount: int) -> None:
        """Зачисление средств извне (пополнение кошелька)."""
        validate_amount(amount, "amount")
        self._touch(account)
        self._balances[account] = self._balances.get(account, 0) + amount

    def refuse(self, account: str, refusing: bool = True) -> None:
        """Пометить аккаунт как отказывающийся принимать средства."""
        if refusing:
            self._refusing.add(account)
        else:
            self._refusing.discard(account)

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """
        Атомарный перевод.

        Args:
            sender: Отправитель
            recipient: Получатель
            amount: Сумма (>= 0); нулевой перевод ничего не меняет

        Raises:
            PaymentError: Недостаточно средств или получатель отказал
            ValueError: Некорректная сумма
        """
        validate_amount(amount, "amount")
        if amount == 0:
            return
        if recipient in self._refusing:
            raise PaymentError(f"{recipient!r} refused {amount}")

        available = self.balance_of(sender)
        if available < amount:
            raise PaymentError(
                f"{sender!r} has {available}, cannot transfer {amount} to {recipient!r}"
            )

        self._touch(sender)
        self._touch(recipient)
        self._balances[sender] = available - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def begin(self) -> None:
        if self._undo is not None:
            raise PaymentError("payment transaction already open")
        self._undo = {}

    def commit(self) -> None:
        self._undo = None

    def rollback(self) -> None:
        if self._undo is None:
            raise PaymentError("no payment transaction to roll back")
        for account, previous in self._undo.items():
            if previous is None:
                self._balances.pop(account, None)
            else:
                self._balances[account] = previous
        self._undo = None

    def _touch(self, account: str) -> None:
        if self._undo is not None and account not in self._undo:
            self._undo[account] = self._balances.get(account)
