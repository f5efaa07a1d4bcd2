"""
Contract Validation Module

JSON Schema контракты для payload, которые ledger отдаёт наружу
(записи о лотах и события).
"""

from .validators import (
    MARKET_EVENT,
    MARKET_RECORD,
    SCHEMA_DIR,
    Contract,
    ContractViolation,
    bundled_contract,
    check_market_event,
    check_market_record,
    read_schema,
)

__all__ = [
    "SCHEMA_DIR",
    "MARKET_RECORD",
    "MARKET_EVENT",
    "Contract",
    "ContractViolation",
    "bundled_contract",
    "read_schema",
    "check_market_record",
    "check_market_event",
]
