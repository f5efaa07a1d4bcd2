"""
MarketItem — Модель торгового лота маркетплейса

Immutable Pydantic модели, описывающие состояние уникального предмета в реестре
маркетплейса:
- ListedState: предмет в escrow у маркетплейса, ожидает покупателя
- SoldState: предмет продан и находится у покупателя
- MarketItem: идентификатор + tagged state
- MarketRecord: плоское внешнее представление (id, seller, custodian, price, sold)

Все изменения лота создают новый экземпляр (model_copy / new state).
Custodian НЕ хранится в состоянии Listed: он выводится из идентичности
маркетплейса при построении MarketRecord.
"""

from enum import Enum
from typing import Final, Literal, Union

from pydantic import BaseModel, Field


# =============================================================================
# IDENTITIES
# =============================================================================

# Идентичность кастодиального аккаунта маркетплейса по умолчанию
MARKETPLACE_CUSTODY: Final[str] = "marketplace"

# Первый выдаваемый идентификатор предмета
FIRST_ITEM_ID: Final[int] = 1


# =============================================================================
# ENUMS
# =============================================================================


class ItemState(str, Enum):
    """Состояние лота в жизненном цикле маркетплейса"""

    LISTED = "listed"  # В escrow, ожидает покупателя
    SOLD = "sold"  # У покупателя, не выставлен


# =============================================================================
# TAGGED STATES
# =============================================================================


class ListedState(BaseModel):
    """
    Лот выставлен на продажу: актив в escrow у маркетплейса.

    price строго положителен в этом состоянии.
    """

    kind: Literal["listed"] = "listed"
    seller: str = Field(..., min_length=1, description="Получатель выручки от продажи")
    price: int = Field(..., gt=0, description="Цена лота в минимальных единицах")

    model_config = {"frozen": True}


class SoldState(BaseModel):
    """
    Лот продан: актив у покупателя (holder).

    seller и price последней продажи сохраняются для запросов и аудита.
    """

    kind: Literal["sold"] = "sold"
    seller: str = Field(..., min_length=1, description="Продавец последней продажи")
    price: int = Field(..., gt=0, description="Цена последней продажи")
    holder: str = Field(..., min_length=1, description="Текущий держатель актива")

    model_config = {"frozen": True}


# =============================================================================
# MARKET RECORD (внешнее представление)
# =============================================================================


class MarketRecord(BaseModel):
    """
    Плоская запись о лоте, возвращаемая запросами.

    custodian == идентичность маркетплейса тогда и только тогда, когда sold=False.
    """

    id: int = Field(..., ge=FIRST_ITEM_ID, description="Идентификатор предмета")
    seller: str = Field(..., min_length=1, description="Получатель выручки")
    custodian: str = Field(..., min_length=1, description="Текущий держатель актива")
    price: int = Field(..., gt=0, description="Цена лота")
    sold: bool = Field(..., description="True если лот продан и не перевыставлен")

    model_config = {"frozen": True}


# =============================================================================
# MARKET ITEM
# =============================================================================


class MarketItem(BaseModel):
    """
    Лот маркетплейса: неизменяемый идентификатор + tagged state.

    Переходы состояний выполняются методами list_for/sell_to, которые
    возвращают новый экземпляр и не изменяют текущий.
    """

    id: int = Field(..., ge=FIRST_ITEM_ID, description="Идентификатор предмета")
    state: Union[ListedState, SoldState] = Field(..., discriminator="kind")

    model_config = {"frozen": True}

    @property
    def item_state(self) -> ItemState:
        if isinstance(self.state, ListedState):
            return ItemState.LISTED
        return ItemState.SOLD

    @property
    def is_listed(self) -> bool:
        return isinstance(self.state, ListedState)

    @property
    def seller(self) -> str:
        return self.state.seller

    @property
    def price(self) -> int:
        return self.state.price

    def custodian(self, marketplace: str = MARKETPLACE_CUSTODY) -> str:
        """
        Текущий держатель актива.

        Args:
            marketplace: Идентичность кастодиального аккаунта маркетплейса

        Returns:
            marketplace для Listed, holder для Sold
        """
        if isinstance(self.state, ListedState):
            return marketplace
        return self.state.holder

    def sell_to(self, buyer: str) -> "MarketItem":
        """Listed → Sold. Вызывающий код обязан проверить текущее состояние."""
        if not isinstance(self.state, ListedState):
            raise ValueError(f"item {self.id} is not listed")
        return self.model_copy(
            update={
                "state": SoldState(
                    seller=self.state.seller, price=self.state.price, holder=buyer
                )
            }
        )

    def list_for(self, seller: str, price: int) -> "MarketItem":
        """Sold → Listed (перевыставление). Цена валидируется ListedState."""
        return self.model_copy(
            update={"state": ListedState(seller=seller, price=price)}
        )

    def to_record(self, marketplace: str = MARKETPLACE_CUSTODY) -> MarketRecord:
        """
        Построение плоского MarketRecord.

        Args:
            marketplace: Идентичность кастодиального аккаунта маркетплейса

        Returns:
            MarketRecord (id, seller, custodian, price, sold)
        """
        return MarketRecord(
            id=self.id,
            seller=self.seller,
            custodian=self.custodian(marketplace),
            price=self.price,
            sold=not self.is_listed,
        )
