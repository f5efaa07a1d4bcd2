"""MarketLedger — state machine жизненного цикла лотов маркетплейса.

Состояния лота:
- LISTED: актив в escrow у маркетплейса, ожидает покупателя (sold=False)
- SOLD: актив у покупателя (sold=True)

Переходы:
- create_listing: (новый) → LISTED, custody caller → маркетплейс
- purchase: LISTED → SOLD, custody маркетплейс → покупатель, выплаты
- resell: SOLD → LISTED, custody держатель → маркетплейс
Терминального состояния нет: лот циклически переходит LISTED ↔ SOLD.

Атомарность:
- каждая изменяющая операция выполняется внутри _atomic: store и payment
  rail ведут undo-журнал затронутых лотов и аккаунтов, custody в реестре
  возвращается обратными transfer_custody; при любой ошибке всё откатывается
- выпущенный mint идентификатор не отзывается: при откате он остаётся у
  caller в реестре и больше не выдаётся, store его не содержит
- состояние фиксируется ДО исходящих переводов (закрытие reentrancy-окна)
- вложенный изменяющий вызов во время операции → ReentrantCall
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from src.core.domain.amounts import is_amount, is_valid_price
from src.core.domain.market_event import ItemListed, ItemSold, ListingFeeChanged
from src.core.domain.market_item import (
    ItemState,
    ListedState,
    MarketItem,
    MarketRecord,
)
from src.market import queries
from src.market.access import CallContext, Role, require_role
from src.market.config import MarketConfig
from src.market.errors import (
    InsufficientFee,
    InvalidFee,
    InvalidPrice,
    LedgerInvariantViolation,
    MarketError,
    NotListed,
    ReentrantCall,
    Unauthorized,
    UnknownItem,
    WrongFee,
    WrongPayment,
)
from src.market.events import EventLog
from src.market.payments import InMemoryPaymentRail, PaymentRail
from src.market.settlement import SettlementReceipt, collect_payment, settle_purchase
from src.market.store import MarketStore
from src.registry import AssetRegistry, InMemoryAssetRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketTransition:
    """Результат перехода состояния лота."""

    item_id: int
    new_state: ItemState
    previous_state: ItemState
    record: MarketRecord

    # Диагностика
    transition_reason: str
    settlement: Optional[SettlementReceipt]
    details: str


class MarketLedger:
    """Ledger маркетплейса: хранилище лотов, переходы, расчёты и запросы.

    Зависимости передаются явно:
    - registry: выпуск идентификаторов и custody (AssetRegistry)
    - payments: переводы нативной валюты (PaymentRail)
    - events: журнал событий для наблюдателей (EventLog)
    """

    def __init__(
        self,
        config: MarketConfig,
        registry: Optional[AssetRegistry] = None,
        payments: Optional[PaymentRail] = None,
        events: Optional[EventLog] = None,
    ):
        self.config = config
        self.store = MarketStore(listing_fee=config.listing_fee)
        self.registry = registry if registry is not None else InMemoryAssetRegistry()
        self.payments = payments if payments is not None else InMemoryPaymentRail()
        self.events = events if events is not None else EventLog()

        self._in_flight: Optional[str] = None
        self._custody_undo: List[Callable[[], None]] = []

    @property
    def marketplace(self) -> str:
        return self.config.marketplace_custody

    @property
    def operator(self) -> str:
        return self.config.operator

    @property
    def sold_count(self) -> int:
        return self.store.sold_count

    @property
    def item_count(self) -> int:
        return self.store.item_count

    # =========================================================================
    # LISTING FEE
    # =========================================================================

    def get_listing_fee(self) -> int:
        return self.store.listing_fee

    def set_listing_fee(self, ctx: CallContext, fee: int) -> None:
        """
        Изменение комиссии за выставление (только оператор).

        Значение не проверяется сверх типа: целое неотрицательное.

        Raises:
            Unauthorized: caller не оператор
            InvalidFee: fee не целое неотрицательное
        """
        with self._atomic("set_listing_fee", ctx):
            require_role(ctx, Role.OPERATOR, self.operator)
            if not (is_amount(fee) and fee >= 0):
                raise InvalidFee(f"fee must be a non-negative integer, got {fee!r}")

            old_fee = self.store.listing_fee
            self.store.listing_fee = fee
            self.events.emit(ListingFeeChanged(old_fee=old_fee, new_fee=fee))

        logger.info("listing fee changed %d -> %d by %s", old_fee, fee, ctx.caller)

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def create_listing(self, ctx: CallContext, metadata_ref: str, price: int) -> int:
        """
        Создание и выставление нового лота.

        Args:
            ctx: caller — продавец, value — оплата комиссии (>= listing_fee)
            metadata_ref: opaque ссылка на метаданные предмета
            price: цена лота (> 0)

        Returns:
            Идентификатор нового лота

        Raises:
            InvalidPrice: price <= 0 (проверяется первым, независимо от оплаты)
            InsufficientFee: value < listing_fee
        """
        with self._atomic("create_listing", ctx):
            if not is_valid_price(price):
                raise InvalidPrice(f"price must be a positive integer, got {price!r}")
            if ctx.value < self.store.listing_fee:
                raise InsufficientFee(
                    f"listing requires at least {self.store.listing_fee}, got {ctx.value}"
                )

            collect_payment(self.payments, ctx.caller, self.marketplace, ctx.value)

            item_id = self.registry.mint(ctx.caller)
            if self.store.get(item_id) is not None:
                raise LedgerInvariantViolation(f"registry reissued identifier {item_id}")
            self.registry.set_metadata(item_id, metadata_ref)

            item = MarketItem(id=item_id, state=ListedState(seller=ctx.caller, price=price))
            self.store.put(item)
            self._move_custody(item_id, ctx.caller, self.marketplace)

            self._emit_listed(item)

        logger.info("item %d listed by %s at %d", item_id, ctx.caller, price)
        return item_id

    def purchase(self, ctx: CallContext, item_id: int) -> MarketTransition:
        """
        Покупка выставленного лота.

        Выплаты: оператору listing_fee, продавцу вся приложенная сумма.

        Args:
            ctx: caller — покупатель, value — оплата (== price)
            item_id: идентификатор лота

        Returns:
            MarketTransition LISTED → SOLD с квитанцией расчёта

        Raises:
            UnknownItem: лот не существует
            NotListed: лот не в escrow у маркетплейса
            WrongPayment: value != price
            SettlementFailed: выплата не выполнена (операция откатывается)
        """
        with self._atomic("purchase", ctx):
            item = self._require_item(item_id)
            if not item.is_listed:
                raise NotListed(f"item {item_id} is not listed for sale")
            if ctx.value != item.price:
                raise WrongPayment(
                    f"item {item_id} costs {item.price}, got {ctx.value}"
                )

            collect_payment(self.payments, ctx.caller, self.marketplace, ctx.value)

            # Фиксация состояния до исходящих переводов
            sold = item.sell_to(ctx.caller)
            self.store.put(sold)
            self.store.sold_count += 1
            self._move_custody(item_id, self.marketplace, ctx.caller)

            receipt = settle_purchase(
                self.payments,
                item_id=item_id,
                treasury=self.marketplace,
                operator=self.operator,
                seller=item.seller,
                listing_fee=self.store.listing_fee,
                payment=ctx.value,
            )

            self.events.emit(
                ItemSold(id=item_id, seller=item.seller, buyer=ctx.caller, price=item.price)
            )

        logger.info(
            "item %d sold by %s to %s for %d", item_id, item.seller, ctx.caller, ctx.value
        )
        return MarketTransition(
            item_id=item_id,
            new_state=ItemState.SOLD,
            previous_state=ItemState.LISTED,
            record=sold.to_record(self.marketplace),
            transition_reason="purchase",
            settlement=receipt,
            details=f"LISTED → SOLD, buyer={ctx.caller}, sold_count={self.store.sold_count}",
        )

    def resell(self, ctx: CallContext, item_id: int, new_price: int) -> MarketTransition:
        """
        Перевыставление лота текущим держателем.

        Args:
            ctx: caller — текущий custodian, value — оплата комиссии (== listing_fee)
            item_id: идентификатор лота
            new_price: новая цена (> 0)

        Returns:
            MarketTransition SOLD → LISTED

        Raises:
            UnknownItem: лот не существует
            NotOwner: caller не текущий custodian
            WrongFee: value != listing_fee
            InvalidPrice: new_price <= 0
        """
        with self._atomic("resell", ctx):
            item = self._require_item(item_id)
            require_role(ctx, Role.CUSTODIAN, item.custodian(self.marketplace))
            if ctx.value != self.store.listing_fee:
                raise WrongFee(
                    f"relisting requires exactly {self.store.listing_fee}, got {ctx.value}"
                )
            if not is_valid_price(new_price):
                raise InvalidPrice(f"price must be a positive integer, got {new_price!r}")

            collect_payment(self.payments, ctx.caller, self.marketplace, ctx.value)

            relisted = item.list_for(ctx.caller, new_price)
            self.store.put(relisted)
            self.store.sold_count -= 1
            self._move_custody(item_id, ctx.caller, self.marketplace)

            self._emit_listed(relisted)

        logger.info("item %d relisted by %s at %d", item_id, ctx.caller, new_price)
        return MarketTransition(
            item_id=item_id,
            new_state=ItemState.LISTED,
            previous_state=ItemState.SOLD,
            record=relisted.to_record(self.marketplace),
            transition_reason="resell",
            settlement=None,
            details=f"SOLD → LISTED, seller={ctx.caller}, sold_count={self.store.sold_count}",
        )

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_item(self, item_id: int) -> MarketRecord:
        return queries.record_of(self._require_item(item_id), self.marketplace)

    def metadata_of(self, item_id: int) -> Optional[str]:
        self._require_item(item_id)
        return self.registry.metadata_of(item_id)

    def unsold_items(self) -> List[MarketRecord]:
        return queries.unsold_items(self.store, self.marketplace)

    def my_items(self, ctx: CallContext) -> List[MarketRecord]:
        return queries.my_items(self.store, ctx.caller, self.marketplace)

    def my_listings(self, ctx: CallContext) -> List[MarketRecord]:
        return queries.my_listings(self.store, ctx.caller, self.marketplace)

    def iter_unsold_items(self) -> Iterator[MarketRecord]:
        return queries.iter_unsold_items(self.store, self.marketplace)

    def iter_my_items(self, ctx: CallContext) -> Iterator[MarketRecord]:
        return queries.iter_my_items(self.store, ctx.caller, self.marketplace)

    def iter_my_listings(self, ctx: CallContext) -> Iterator[MarketRecord]:
        return queries.iter_my_listings(self.store, ctx.caller, self.marketplace)

    # =========================================================================
    # INVARIANTS
    # =========================================================================

    def check_invariants(self) -> None:
        """
        Полная проверка инвариантов обходом всех лотов.

        - sold_count равен числу лотов в SOLD
        - custody в реестре совпадает с custodian лота
        - идентификаторы лотов меньше next_id

        Raises:
            LedgerInvariantViolation: при любом расхождении
        """
        sold = 0
        for item in self.store.scan():
            if not item.is_listed:
                sold += 1
            expected = item.custodian(self.marketplace)
            actual = self.registry.custodian_of(item.id)
            if actual != expected:
                raise LedgerInvariantViolation(
                    f"item {item.id}: ledger custodian {expected!r}, registry {actual!r}"
                )

        if sold != self.store.sold_count:
            raise LedgerInvariantViolation(
                f"sold_count={self.store.sold_count}, actual sold items={sold}"
            )
        if any(item_id >= self.store.next_id for item_id in self.store.items):
            raise LedgerInvariantViolation("item identifier beyond next_id")

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _require_item(self, item_id: int) -> MarketItem:
        item = self.store.get(item_id)
        if item is None:
            raise UnknownItem(f"no item with id {item_id!r}")
        return item

    def _emit_listed(self, item: MarketItem) -> None:
        record = item.to_record(self.marketplace)
        self.events.emit(ItemListed(**record.model_dump()))

    def _move_custody(self, item_id: int, from_owner: str, to_owner: str) -> None:
        """transfer_custody с записью обратного перевода в журнал операции."""
        self.registry.transfer_custody(item_id, from_owner, to_owner)
        self._custody_undo.append(
            lambda: self.registry.transfer_custody(item_id, to_owner, from_owner)
        )

    @contextmanager
    def _atomic(self, operation: str, ctx: CallContext) -> Iterator[None]:
        """Всё-или-ничего: undo-журналы store/балансов/custody, откат при ошибке."""
        if self._in_flight is not None:
            raise ReentrantCall(
                f"{operation} called while {self._in_flight} is in progress"
            )
        if ctx.caller == self.marketplace:
            raise Unauthorized("marketplace custody identity cannot initiate operations")

        self.store.begin()
        try:
            self.payments.begin()
        except Exception:
            self.store.rollback()
            raise
        self._in_flight = operation
        try:
            yield
        except Exception as e:
            for undo in reversed(self._custody_undo):
                undo()
            self.payments.rollback()
            self.store.rollback()
            self.events.discard()
            kind = e.kind.value if isinstance(e, MarketError) else type(e).__name__
            logger.warning("%s by %s rejected (%s): %s", operation, ctx.caller, kind, e)
            raise
        else:
            self.store.commit()
            self.payments.commit()
        finally:
            self._in_flight = None
            self._custody_undo = []

        self.events.commit()
