"""Тесты запросов ledger (unsold_items / my_items / my_listings).

Coverage:
- Точный размер и порядок по возрастанию id
- Фильтрация по custodian и по seller
- Ленивые iter_* версии совпадают с материализованными
- Детекция рассинхронизации sold_count при заполнении
- Проверка записей по контракту market_record, undo-журнал store
"""

import pytest

from src.core.contracts import ContractViolation
from src.core.domain import ListedState, MarketItem, MarketRecord, SoldState
from src.market import (
    CallContext,
    InMemoryPaymentRail,
    LedgerInvariantViolation,
    MarketConfig,
    MarketLedger,
    MarketStore,
)
from src.market import queries

OPERATOR = "operator"
MARKETPLACE = "marketplace"
ALICE = "alice"
BOB = "bob"
CAROL = "carol"
FEE = 10


@pytest.fixture
def ledger():
    """
    Лоты:
    #1 ALICE, продан BOB
    #2 ALICE, выставлен
    #3 BOB, выставлен
    #4 CAROL, продан ALICE
    """
    rail = InMemoryPaymentRail({ALICE: 10_000, BOB: 10_000, CAROL: 10_000})
    ledger = MarketLedger(MarketConfig(operator=OPERATOR, listing_fee=FEE), payments=rail)
    ledger.create_listing(CallContext(ALICE, FEE), "ipfs://1", 100)
    ledger.create_listing(CallContext(ALICE, FEE), "ipfs://2", 200)
    ledger.create_listing(CallContext(BOB, FEE), "ipfs://3", 300)
    ledger.create_listing(CallContext(CAROL, FEE), "ipfs://4", 400)
    ledger.purchase(CallContext(BOB, 100), 1)
    ledger.purchase(CallContext(ALICE, 400), 4)
    return ledger


class TestUnsoldItems:
    """Тесты unsold_items."""

    def test_returns_escrowed_items_in_order(self, ledger):
        unsold = ledger.unsold_items()

        assert [r.id for r in unsold] == [2, 3]
        assert all(r.custodian == MARKETPLACE and not r.sold for r in unsold)

    def test_size_is_item_count_minus_sold_count(self, ledger):
        assert len(ledger.unsold_items()) == ledger.item_count - ledger.sold_count

    def test_empty_ledger(self):
        ledger = MarketLedger(MarketConfig(operator=OPERATOR))
        assert ledger.unsold_items() == []

    def test_relisted_item_reappears(self, ledger):
        ledger.resell(CallContext(BOB, FEE), 1, 150)

        assert [r.id for r in ledger.unsold_items()] == [1, 2, 3]


class TestMyItems:
    """Тесты my_items."""

    def test_items_held_by_caller(self, ledger):
        assert [r.id for r in ledger.my_items(CallContext(BOB))] == [1]
        assert [r.id for r in ledger.my_items(CallContext(ALICE))] == [4]

    def test_seller_does_not_hold_escrowed_items(self, ledger):
        assert ledger.my_items(CallContext(CAROL)) == []

    def test_records_report_holder(self, ledger):
        record = ledger.my_items(CallContext(ALICE))[0]
        assert record.custodian == ALICE
        assert record.seller == CAROL
        assert record.sold is True


class TestMyListings:
    """Тесты my_listings: фильтр по продавцу."""

    def test_only_callers_listings(self, ledger):
        assert [r.id for r in ledger.my_listings(CallContext(ALICE))] == [1, 2]
        assert [r.id for r in ledger.my_listings(CallContext(BOB))] == [3]
        assert [r.id for r in ledger.my_listings(CallContext(CAROL))] == [4]

    def test_unknown_caller_has_no_listings(self, ledger):
        assert ledger.my_listings(CallContext("dave")) == []

    def test_resell_transfers_listing_to_new_seller(self, ledger):
        ledger.resell(CallContext(BOB, FEE), 1, 150)

        assert [r.id for r in ledger.my_listings(CallContext(ALICE))] == [2]
        assert [r.id for r in ledger.my_listings(CallContext(BOB))] == [1, 3]


class TestLazyQueries:
    """Ленивые iter_* версии."""

    def test_match_materialized(self, ledger):
        assert list(ledger.iter_unsold_items()) == ledger.unsold_items()
        assert list(ledger.iter_my_items(CallContext(BOB))) == ledger.my_items(CallContext(BOB))
        assert list(ledger.iter_my_listings(CallContext(ALICE))) == ledger.my_listings(
            CallContext(ALICE)
        )

    def test_restartable(self, ledger):
        first = [r.id for r in ledger.iter_unsold_items()]
        second = [r.id for r in ledger.iter_unsold_items()]
        assert first == second == [2, 3]


class TestStoreLevelQueries:
    """Запросы напрямую над MarketStore."""

    def test_fill_detects_sold_count_drift(self):
        store = MarketStore()
        store.put(MarketItem(id=1, state=ListedState(seller=ALICE, price=5)))
        store.put(MarketItem(id=2, state=SoldState(seller=ALICE, price=5, holder=BOB)))
        # sold_count не обновлён: ожидается 2 unsold, найден 1
        with pytest.raises(LedgerInvariantViolation, match="precomputed 2"):
            queries.unsold_items(store, MARKETPLACE)

    def test_fill_detects_overflow(self):
        store = MarketStore(sold_count=1)
        store.put(MarketItem(id=1, state=ListedState(seller=ALICE, price=5)))
        with pytest.raises(LedgerInvariantViolation, match="more than"):
            queries.unsold_items(store, MARKETPLACE)

    def test_scan_skips_gaps(self):
        store = MarketStore()
        store.put(MarketItem(id=3, state=ListedState(seller=ALICE, price=5)))

        assert store.next_id == 4
        assert [r.id for r in queries.unsold_items(store, MARKETPLACE)] == [3]


class TestRecordContract:
    """Записи, отдаваемые запросами, проверяются по контракту market_record."""

    @pytest.fixture
    def malformed_records(self, monkeypatch):
        def to_record(item, marketplace):
            # model_construct обходит pydantic валидацию
            return MarketRecord.model_construct(
                id=item.id, seller="", custodian=marketplace, price=0, sold=False
            )

        monkeypatch.setattr(MarketItem, "to_record", to_record)

    def test_materialized_query_rejects_malformed_record(self, ledger, malformed_records):
        with pytest.raises(ContractViolation, match="market_record contract violated"):
            ledger.unsold_items()

    def test_lazy_query_rejects_malformed_record(self, ledger, malformed_records):
        with pytest.raises(ContractViolation) as exc_info:
            list(ledger.iter_my_listings(CallContext(ALICE)))

        assert [e.json_path for e in exc_info.value.errors] == ["$.price", "$.seller"]

    def test_get_item_rejects_malformed_record(self, ledger, malformed_records):
        with pytest.raises(ContractViolation):
            ledger.get_item(2)


class TestStoreJournal:
    """Undo-журнал MarketStore."""

    def test_rollback_restores_only_touched_items(self):
        store = MarketStore()
        first = MarketItem(id=1, state=ListedState(seller=ALICE, price=5))
        store.put(first)

        store.begin()
        store.put(first.sell_to(BOB))
        store.sold_count += 1
        store.put(MarketItem(id=2, state=ListedState(seller=BOB, price=7)))
        store.rollback()

        assert store.get(1) is first
        assert store.get(2) is None
        assert (store.next_id, store.sold_count) == (2, 0)
        assert store.in_transaction is False

    def test_commit_keeps_changes(self):
        store = MarketStore()
        store.begin()
        store.put(MarketItem(id=1, state=ListedState(seller=ALICE, price=5)))
        store.listing_fee = 3
        store.commit()

        assert store.item_count == 1
        assert store.listing_fee == 3
        with pytest.raises(RuntimeError, match="no store transaction"):
            store.rollback()

    def test_nested_begin_rejected(self):
        store = MarketStore()
        store.begin()
        with pytest.raises(RuntimeError, match="already open"):
            store.begin()
