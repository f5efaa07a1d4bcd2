"""
MarketEvent — События маркетплейса для внешних наблюдателей

Immutable Pydantic модели. Совместимы с JSON Schema
(src/core/contracts/schema/market_event.json).

События:
- ItemListed: при создании лота и при перевыставлении (resell)
- ItemSold: при завершении покупки
- ListingFeeChanged: при изменении комиссии оператором
"""

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field


class MarketEventType(str, Enum):
    """Тип события маркетплейса"""

    ITEM_LISTED = "item_listed"
    ITEM_SOLD = "item_sold"
    LISTING_FEE_CHANGED = "listing_fee_changed"


class ItemListed(BaseModel):
    """Лот выставлен (create_listing или resell)."""

    event_type: Literal["item_listed"] = "item_listed"
    id: int = Field(..., ge=1, description="Идентификатор предмета")
    seller: str = Field(..., min_length=1, description="Продавец")
    custodian: str = Field(..., min_length=1, description="Держатель актива (маркетплейс)")
    price: int = Field(..., gt=0, description="Цена лота")
    sold: bool = Field(False, description="Всегда False для выставленного лота")

    model_config = {"frozen": True}


class ItemSold(BaseModel):
    """Лот продан покупателю."""

    event_type: Literal["item_sold"] = "item_sold"
    id: int = Field(..., ge=1, description="Идентификатор предмета")
    seller: str = Field(..., min_length=1, description="Продавец")
    buyer: str = Field(..., min_length=1, description="Покупатель")
    price: int = Field(..., gt=0, description="Цена продажи")

    model_config = {"frozen": True}


class ListingFeeChanged(BaseModel):
    """Оператор изменил комиссию за выставление."""

    event_type: Literal["listing_fee_changed"] = "listing_fee_changed"
    old_fee: int = Field(..., ge=0, description="Предыдущая комиссия")
    new_fee: int = Field(..., ge=0, description="Новая комиссия")

    model_config = {"frozen": True}


MarketEvent = Union[ItemListed, ItemSold, ListingFeeChanged]
