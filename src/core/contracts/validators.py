"""
Contract — проверка payload маркетплейса по JSON Schema

Контракты (Draft 2020-12, поставляются в src/core/contracts/schema/):
- market_record: плоская запись о лоте, которую отдают запросы ledger
- market_event: событие, которое ledger публикует наблюдателям

Pydantic модели уже проверяют поля при создании, контракт проверяет то, что
реально уходит наружу: model_dump(mode="json"). Это ловит экземпляры,
собранные в обход валидации (model_construct), и расхождение модели со схемой.

Нарушение контракта → ContractViolation со всеми найденными ошибками.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Final, List, Union

from jsonschema import Draft202012Validator, SchemaError, ValidationError
from pydantic import BaseModel

# Каталог схем внутри пакета
SCHEMA_DIR: Final[Path] = Path(__file__).parent / "schema"

MARKET_RECORD: Final[str] = "market_record"
MARKET_EVENT: Final[str] = "market_event"

Payload = Union[BaseModel, Dict[str, Any]]


class ContractViolation(ValueError):
    """
    Payload не соответствует контракту.

    Attributes:
        contract: имя контракта
        errors: все ошибки jsonschema в порядке json_path
    """

    def __init__(self, contract: str, errors: List[ValidationError]):
        self.contract = contract
        self.errors = tuple(errors)
        details = "; ".join(f"{e.json_path}: {e.message}" for e in self.errors)
        super().__init__(f"{contract} contract violated: {details}")


def read_schema(path: Path) -> Dict[str, Any]:
    """
    Чтение и meta-валидация схемы.

    Raises:
        FileNotFoundError: файла нет
        ValueError: файл не является корректной JSON Schema
    """
    with open(path, "r", encoding="utf-8") as f:
        schema = json.load(f)

    try:
        Draft202012Validator.check_schema(schema)
    except SchemaError as e:
        raise ValueError(f"Invalid JSON Schema in {path.name}: {e.message}") from e
    return schema


class Contract:
    """Именованная JSON Schema с проверкой payload."""

    def __init__(self, name: str, schema: Dict[str, Any]):
        self.name = name
        self._validator = Draft202012Validator(schema)

    @classmethod
    def from_file(cls, path: Path) -> "Contract":
        return cls(path.stem, read_schema(path))

    def errors(self, payload: Payload) -> List[ValidationError]:
        data = _as_json(payload)
        return sorted(self._validator.iter_errors(data), key=lambda e: e.json_path)

    def accepts(self, payload: Payload) -> bool:
        return not self.errors(payload)

    def check(self, payload: Payload) -> None:
        """
        Raises:
            ContractViolation: payload не соответствует схеме
        """
        errors = self.errors(payload)
        if errors:
            raise ContractViolation(self.name, errors)


def _as_json(payload: Payload) -> Dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json")
    return payload


@lru_cache(maxsize=None)
def bundled_contract(name: str) -> Contract:
    """Контракт из каталога схем пакета (загружается один раз)."""
    return Contract.from_file(SCHEMA_DIR / f"{name}.json")


def check_market_record(record: Payload) -> None:
    bundled_contract(MARKET_RECORD).check(record)


def check_market_event(event: Payload) -> None:
    bundled_contract(MARKET_EVENT).check(event)
