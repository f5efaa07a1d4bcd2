"""
Domain models and value objects.

Contains fundamental marketplace entities: MarketItem, MarketRecord, events, amounts.
"""

from src.core.domain.amounts import (
    ZERO_AMOUNT,
    is_amount,
    is_valid_price,
    validate_amount,
)
from src.core.domain.market_event import (
    ItemListed,
    ItemSold,
    ListingFeeChanged,
    MarketEvent,
    MarketEventType,
)
from src.core.domain.market_item import (
    FIRST_ITEM_ID,
    MARKETPLACE_CUSTODY,
    ItemState,
    ListedState,
    MarketItem,
    MarketRecord,
    SoldState,
)

__all__ = [
    # Amounts
    "ZERO_AMOUNT",
    "is_amount",
    "is_valid_price",
    "validate_amount",
    # Market item
    "FIRST_ITEM_ID",
    "MARKETPLACE_CUSTODY",
    "ItemState",
    "ListedState",
    "SoldState",
    "MarketItem",
    "MarketRecord",
    # Events
    "MarketEventType",
    "MarketEvent",
    "ItemListed",
    "ItemSold",
    "ListingFeeChanged",
]
