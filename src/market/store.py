"""MarketStore — явно владеемое хранилище ledger.

Содержит отображение id → MarketItem и счётчики. Передаётся в операции и
запросы явно; глобального состояния нет.

Откат операции — через undo-журнал: begin() запоминает счётчики, put()
запоминает прежнюю версию только затронутых лотов. Стоимость отката
пропорциональна числу изменённых лотов, а не размеру хранилища.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from src.core.domain.market_item import FIRST_ITEM_ID, MarketItem


@dataclass
class MarketStore:
    """Хранилище лотов и счётчиков маркетплейса.

    sold_count поддерживается инкрементально и равен числу лотов в состоянии Sold.
    """

    listing_fee: int = 0
    next_id: int = FIRST_ITEM_ID
    sold_count: int = 0
    items: Dict[int, MarketItem] = field(default_factory=dict)

    # id → версия лота до первого изменения в текущей операции (None: лота не было)
    _undo_items: Optional[Dict[int, Optional[MarketItem]]] = field(
        default=None, init=False, repr=False
    )
    _undo_counters: Optional[tuple[int, int, int]] = field(
        default=None, init=False, repr=False
    )

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def in_transaction(self) -> bool:
        return self._undo_items is not None

    def get(self, item_id: int) -> Optional[MarketItem]:
        return self.items.get(item_id)

    def put(self, item: MarketItem) -> None:
        if self._undo_items is not None and item.id not in self._undo_items:
            self._undo_items[item.id] = self.items.get(item.id)
        self.items[item.id] = item
        if item.id >= self.next_id:
            self.next_id = item.id + 1

    def scan(self) -> Iterator[MarketItem]:
        """Обход лотов по возрастанию идентификатора (1..next_id)."""
        for item_id in range(FIRST_ITEM_ID, self.next_id):
            item = self.items.get(item_id)
            if item is not None:
                yield item

    # =========================================================================
    # UNDO JOURNAL
    # =========================================================================

    def begin(self) -> None:
        if self._undo_items is not None:
            raise RuntimeError("store transaction already open")
        self._undo_items = {}
        self._undo_counters = (self.next_id, self.sold_count, self.listing_fee)

    def commit(self) -> None:
        self._undo_items = None
        self._undo_counters = None

    def rollback(self) -> None:
        if self._undo_items is None or self._undo_counters is None:
            raise RuntimeError("no store transaction to roll back")

        for item_id, previous in self._undo_items.items():
            if previous is None:
                self.items.pop(item_id, None)
            else:
                self.items[item_id] = previous
        self.next_id, self.sold_count, self.listing_fee = self._undo_counters
        self.commit()
