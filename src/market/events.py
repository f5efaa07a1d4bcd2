"""EventLog — журнал событий маркетплейса для внешних наблюдателей.

События, созданные внутри операции, проверяются по контракту market_event,
буферизуются и публикуются только после успешного завершения операции.
При откате буфер отбрасывается.

Наблюдатели не влияют на исход операции: к моменту уведомления она уже
зафиксирована, поэтому ошибка подписчика логируется и не передаётся caller.
"""

import logging
from typing import Callable, List

from src.core.contracts import check_market_event
from src.core.domain.market_event import MarketEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[MarketEvent], None]


class EventLog:
    """Журнал опубликованных событий и подписчики."""

    def __init__(self):
        self._history: List[MarketEvent] = []
        self._pending: List[MarketEvent] = []
        self._subscribers: List[Subscriber] = []

    @property
    def history(self) -> tuple[MarketEvent, ...]:
        return tuple(self._history)

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def emit(self, event: MarketEvent) -> None:
        """
        Буферизация события текущей операции.

        Raises:
            ContractViolation: событие не соответствует market_event
        """
        check_market_event(event)
        self._pending.append(event)

    def discard(self) -> None:
        if self._pending:
            logger.debug("discarding %d pending event(s)", len(self._pending))
        self._pending.clear()

    def commit(self) -> None:
        """Публикация буфера: запись в history, затем уведомление подписчиков."""
        published, self._pending = self._pending, []
        self._history.extend(published)
        for event in published:
            for subscriber in self._subscribers:
                try:
                    subscriber(event)
                except Exception:
                    logger.exception(
                        "subscriber %r failed on %s event", subscriber, event.event_type
                    )
