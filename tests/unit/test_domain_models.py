"""
Tests for Market Domain Models

Комплексное тестирование Pydantic V2 моделей маркетплейса:
- ListedState / SoldState (tagged state)
- MarketItem (переходы sell_to / list_for, to_record)
- MarketRecord
- События (ItemListed, ItemSold, ListingFeeChanged)
- Проверки сумм (amounts)

Покрывает:
- Создание и валидация моделей
- Immutability (frozen=True)
- Discriminated union по полю kind
- JSON сериализация/десериализация
"""

import pytest
from pydantic import ValidationError

from src.core.domain import (
    MARKETPLACE_CUSTODY,
    ItemListed,
    ItemSold,
    ItemState,
    ListedState,
    ListingFeeChanged,
    MarketEventType,
    MarketItem,
    MarketRecord,
    SoldState,
    is_valid_price,
    validate_amount,
)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def listed_item():
    return MarketItem(id=1, state=ListedState(seller="alice", price=1000))


@pytest.fixture
def sold_item(listed_item):
    return listed_item.sell_to("bob")


# =============================================================================
# TAGGED STATES
# =============================================================================


def test_listed_state_requires_positive_price():
    with pytest.raises(ValidationError, match="greater than 0"):
        ListedState(seller="alice", price=0)


def test_listed_state_requires_seller():
    with pytest.raises(ValidationError):
        ListedState(seller="", price=10)


def test_sold_state_requires_holder():
    with pytest.raises(ValidationError):
        SoldState(seller="alice", price=10, holder="")


def test_state_immutability():
    state = ListedState(seller="alice", price=10)
    with pytest.raises(ValidationError, match="frozen"):
        state.price = 20


# =============================================================================
# MARKET ITEM
# =============================================================================


def test_listed_item_properties(listed_item):
    assert listed_item.item_state == ItemState.LISTED
    assert listed_item.is_listed
    assert listed_item.seller == "alice"
    assert listed_item.price == 1000
    assert listed_item.custodian() == MARKETPLACE_CUSTODY
    assert listed_item.custodian("escrow") == "escrow"


def test_sell_to_returns_new_instance(listed_item, sold_item):
    assert listed_item.is_listed
    assert sold_item.item_state == ItemState.SOLD
    assert sold_item.custodian() == "bob"
    assert sold_item.seller == "alice"
    assert sold_item.price == 1000
    assert sold_item.id == listed_item.id


def test_sell_to_requires_listed(sold_item):
    with pytest.raises(ValueError, match="not listed"):
        sold_item.sell_to("carol")


def test_list_for(sold_item):
    relisted = sold_item.list_for("bob", 2000)

    assert relisted.is_listed
    assert relisted.seller == "bob"
    assert relisted.price == 2000
    assert relisted.custodian() == MARKETPLACE_CUSTODY


def test_list_for_rejects_zero_price(sold_item):
    with pytest.raises(ValidationError):
        sold_item.list_for("bob", 0)


def test_item_immutability(listed_item):
    with pytest.raises(ValidationError, match="frozen"):
        listed_item.id = 2


def test_item_requires_positive_id():
    with pytest.raises(ValidationError):
        MarketItem(id=0, state=ListedState(seller="alice", price=1))


def test_discriminated_union_from_dict():
    item = MarketItem.model_validate(
        {"id": 3, "state": {"kind": "sold", "seller": "alice", "price": 5, "holder": "bob"}}
    )

    assert isinstance(item.state, SoldState)
    assert item.custodian() == "bob"


def test_discriminated_union_rejects_unknown_kind():
    with pytest.raises(ValidationError):
        MarketItem.model_validate({"id": 3, "state": {"kind": "burned", "seller": "a"}})


def test_item_json_roundtrip(sold_item):
    restored = MarketItem.model_validate_json(sold_item.model_dump_json())
    assert restored == sold_item


# =============================================================================
# MARKET RECORD
# =============================================================================


def test_to_record_listed(listed_item):
    assert listed_item.to_record() == MarketRecord(
        id=1, seller="alice", custodian=MARKETPLACE_CUSTODY, price=1000, sold=False
    )


def test_to_record_sold(sold_item):
    record = sold_item.to_record()

    assert record.custodian == "bob"
    assert record.sold is True


def test_record_immutability(listed_item):
    record = listed_item.to_record()
    with pytest.raises(ValidationError, match="frozen"):
        record.sold = True


# =============================================================================
# EVENTS
# =============================================================================


def test_item_listed_event_from_record(listed_item):
    event = ItemListed(**listed_item.to_record().model_dump())

    assert event.event_type == MarketEventType.ITEM_LISTED
    assert event.sold is False


def test_item_sold_event_dump():
    data = ItemSold(id=1, seller="alice", buyer="bob", price=10).model_dump(mode="json")
    assert data["event_type"] == "item_sold"


@pytest.mark.parametrize("old_fee, new_fee", [(-1, 0), (0, -1)])
def test_fee_change_event_rejects_negative_fee(old_fee, new_fee):
    with pytest.raises(ValidationError):
        ListingFeeChanged(old_fee=old_fee, new_fee=new_fee)


def test_fee_change_event_allows_zero():
    event = ListingFeeChanged(old_fee=0, new_fee=0)
    assert event.model_dump(mode="json")["event_type"] == "listing_fee_changed"


# =============================================================================
# AMOUNTS
# =============================================================================


@pytest.mark.parametrize(
    "price, expected",
    [(1, True), (10**30, True), (0, False), (-1, False), (1.0, False), (True, False), ("5", False)],
)
def test_is_valid_price(price, expected):
    assert is_valid_price(price) is expected


def test_validate_amount_accepts_zero():
    assert validate_amount(0) == 0


def test_validate_amount_rejects_negative():
    with pytest.raises(ValueError, match="fee cannot be negative"):
        validate_amount(-3, "fee")


def test_validate_amount_rejects_float():
    with pytest.raises(ValueError, match="integer amount"):
        validate_amount(2.5)
