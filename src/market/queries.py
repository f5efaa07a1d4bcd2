"""Запросы к ledger: перечисление лотов по ролям.

Три чистые операции чтения, каждая — полный обход 1..next_id:
- unsold_items: лоты в escrow у маркетплейса (выставлены и доступны)
- my_items: лоты, которые держит caller
- my_listings: лоты, где caller — продавец

Материализующие функции работают по схеме «посчитать, выделить, заполнить»:
точный размер результата, порядок по возрастанию id. Ленивые iter_* версии
возвращают перезапускаемые генераторы без двойного обхода.
"""

from typing import Callable, Iterator, List, Optional

from src.core.contracts import check_market_record
from src.core.domain.market_item import MarketItem, MarketRecord
from src.market.errors import LedgerInvariantViolation
from src.market.store import MarketStore

ItemPredicate = Callable[[MarketItem], bool]


def record_of(item: MarketItem, marketplace: str) -> MarketRecord:
    """MarketRecord лота, проверенный по контракту market_record."""
    record = item.to_record(marketplace)
    check_market_record(record)
    return record


def _fill(
    store: MarketStore, predicate: ItemPredicate, count: int, marketplace: str
) -> List[MarketRecord]:
    """Второй проход: заполнение заранее выделенного списка размера count."""
    result: List[Optional[MarketRecord]] = [None] * count
    index = 0
    for item in store.scan():
        if not predicate(item):
            continue
        if index >= count:
            raise LedgerInvariantViolation(
                f"query matched more than the precomputed {count} item(s)"
            )
        result[index] = record_of(item, marketplace)
        index += 1

    if index != count:
        raise LedgerInvariantViolation(
            f"query matched {index} item(s), precomputed {count}"
        )
    return result  # type: ignore[return-value]


def _count(store: MarketStore, predicate: ItemPredicate) -> int:
    return sum(1 for item in store.scan() if predicate(item))


def _is_listed(item: MarketItem) -> bool:
    return item.is_listed


def _held_by(caller: str, marketplace: str) -> ItemPredicate:
    return lambda item: item.custodian(marketplace) == caller


def _sold_by(caller: str) -> ItemPredicate:
    return lambda item: item.seller == caller


# =============================================================================
# MATERIALIZED QUERIES
# =============================================================================


def unsold_items(store: MarketStore, marketplace: str) -> List[MarketRecord]:
    """
    Лоты, находящиеся в escrow у маркетплейса.

    Размер результата равен item_count - sold_count (без первого обхода).
    """
    count = store.item_count - store.sold_count
    return _fill(store, _is_listed, count, marketplace)


def my_items(store: MarketStore, caller: str, marketplace: str) -> List[MarketRecord]:
    """Лоты, custodian которых — caller."""
    predicate = _held_by(caller, marketplace)
    return _fill(store, predicate, _count(store, predicate), marketplace)


def my_listings(store: MarketStore, caller: str, marketplace: str) -> List[MarketRecord]:
    """Лоты, продавец которых — caller (включая уже проданные)."""
    predicate = _sold_by(caller)
    return _fill(store, predicate, _count(store, predicate), marketplace)


# =============================================================================
# LAZY QUERIES
# =============================================================================


def _iter(store: MarketStore, predicate: ItemPredicate, marketplace: str) -> Iterator[MarketRecord]:
    for item in store.scan():
        if predicate(item):
            yield record_of(item, marketplace)


def iter_unsold_items(store: MarketStore, marketplace: str) -> Iterator[MarketRecord]:
    return _iter(store, _is_listed, marketplace)


def iter_my_items(store: MarketStore, caller: str, marketplace: str) -> Iterator[MarketRecord]:
    return _iter(store, _held_by(caller, marketplace), marketplace)


def iter_my_listings(store: MarketStore, caller: str, marketplace: str) -> Iterator[MarketRecord]:
    return _iter(store, _sold_by(caller), marketplace)
