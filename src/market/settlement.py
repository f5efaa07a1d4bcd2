"""Settlement — движение средств при операциях маркетплейса.

Порядок внутри операции:
1. collect_payment: после проверок предусловий приложенная к вызову сумма
   переходит от caller в treasury маркетплейса
2. изменение состояния ledger и custody
3. settle_purchase: выплаты оператору и продавцу из treasury

Выплаты при покупке:
- оператор получает listing_fee (из treasury, накопленной при выставлении)
- продавец получает ВСЮ приложенную сумму (payment), без вычета комиссии

Любой PaymentError превращается в SettlementFailed; откат выполняет ledger.
"""

from dataclasses import dataclass

from src.market.errors import SettlementFailed
from src.market.payments import PaymentError, PaymentRail


@dataclass(frozen=True)
class Payout:
    """Одна выплата из treasury."""

    recipient: str
    amount: int
    purpose: str


@dataclass(frozen=True)
class SettlementReceipt:
    """Результат расчёта по покупке."""

    item_id: int
    payment: int
    payouts: tuple[Payout, ...]

    @property
    def total_paid_out(self) -> int:
        return sum(p.amount for p in self.payouts)


def collect_payment(rail: PaymentRail, caller: str, treasury: str, value: int) -> None:
    """
    Зачисление приложенной к вызову суммы в treasury маркетплейса.

    Raises:
        SettlementFailed: caller не может оплатить value
    """
    try:
        rail.transfer(caller, treasury, value)
    except PaymentError as e:
        raise SettlementFailed(f"cannot collect {value} from {caller!r}: {e}") from e


def settle_purchase(
    rail: PaymentRail,
    item_id: int,
    treasury: str,
    operator: str,
    seller: str,
    listing_fee: int,
    payment: int,
) -> SettlementReceipt:
    """
    Выплаты по завершённой покупке.

    Вызывается только после фиксации нового состояния лота.

    Args:
        rail: payment rail
        item_id: идентификатор проданного лота
        treasury: кастодиальный аккаунт маркетплейса
        operator: оператор маркетплейса
        seller: продавец (получатель выручки)
        listing_fee: текущая комиссия за выставление
        payment: сумма, приложенная покупателем (== цене)

    Returns:
        SettlementReceipt с выплатами в порядке исполнения

    Raises:
        SettlementFailed: любой перевод не выполнен
    """
    payouts = (
        Payout(recipient=operator, amount=listing_fee, purpose="listing_fee"),
        Payout(recipient=seller, amount=payment, purpose="sale_proceeds"),
    )

    for payout in payouts:
        try:
            rail.transfer(treasury, payout.recipient, payout.amount)
        except PaymentError as e:
            raise SettlementFailed(
                f"item {item_id}: {payout.purpose} payout to {payout.recipient!r} failed: {e}"
            ) from e

    return SettlementReceipt(item_id=item_id, payment=payment, payouts=payouts)
