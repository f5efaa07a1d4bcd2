"""Конфигурация маркетплейса."""

from dataclasses import dataclass

from src.core.domain.amounts import validate_amount
from src.core.domain.market_item import MARKETPLACE_CUSTODY


@dataclass(frozen=True)
class MarketConfig:
    """Конфигурация маркетплейса.

    - operator: идентичность оператора (получает комиссию, меняет listing_fee)
    - marketplace_custody: кастодиальная идентичность маркетплейса (escrow и treasury)
    - listing_fee: начальная комиссия за выставление/перевыставление
    """

    operator: str
    marketplace_custody: str = MARKETPLACE_CUSTODY
    listing_fee: int = 0

    def __post_init__(self):
        if not self.operator:
            raise ValueError("operator must be a non-empty identity")
        if not self.marketplace_custody:
            raise ValueError("marketplace_custody must be a non-empty identity")
        if self.operator == self.marketplace_custody:
            raise ValueError("operator and marketplace_custody must differ")
        validate_amount(self.listing_fee, "listing_fee")
