"""Market — ledger маркетплейса уникальных предметов.

- MarketLedger: state machine LISTED ↔ SOLD, расчёты, запросы
- CallContext / require_role: идентичность вызывающего и проверка ролей
- EventLog: события для внешних наблюдателей
- Иерархия ошибок MarketError
"""

from .access import AccessGrant, CallContext, Role, require_role
from .config import MarketConfig
from .errors import (
    InsufficientFee,
    InvalidFee,
    InvalidPrice,
    LedgerInvariantViolation,
    MarketError,
    MarketErrorKind,
    NotListed,
    NotOwner,
    ReentrantCall,
    SettlementFailed,
    Unauthorized,
    UnknownItem,
    WrongFee,
    WrongPayment,
)
from .events import EventLog
from .ledger import MarketLedger, MarketTransition
from .payments import InMemoryPaymentRail, PaymentError, PaymentRail
from .settlement import Payout, SettlementReceipt
from .store import MarketStore

__all__ = [
    "MarketLedger",
    "MarketTransition",
    "MarketConfig",
    "MarketStore",
    "CallContext",
    "AccessGrant",
    "Role",
    "require_role",
    "EventLog",
    "PaymentRail",
    "InMemoryPaymentRail",
    "PaymentError",
    "Payout",
    "SettlementReceipt",
    "MarketError",
    "MarketErrorKind",
    "InvalidPrice",
    "InsufficientFee",
    "InvalidFee",
    "WrongFee",
    "WrongPayment",
    "NotListed",
    "NotOwner",
    "Unauthorized",
    "UnknownItem",
    "SettlementFailed",
    "ReentrantCall",
    "LedgerInvariantViolation",
]
