"""AssetRegistry — выпуск идентификаторов и учёт custody уникальных активов.

Маркетплейс не реализует реестр сам, а зависит от интерфейса AssetRegistry.
InMemoryAssetRegistry — эталонная реализация в памяти процесса:
- идентификаторы выдаются монотонно с 1 и не переиспользуются
- transfer_custody проверяет, что from действительно держит актив
- реестр не знает о транзакциях маркетплейса: при откате ledger
  возвращает custody обратным transfer_custody
"""

from typing import Dict, Optional, Protocol

from src.core.domain.market_item import FIRST_ITEM_ID


class RegistryError(Exception):
    """Ошибка реестра: неизвестный идентификатор или несогласованный transfer."""

    pass


class AssetRegistry(Protocol):
    """Интерфейс реестра активов, которым пользуется MarketLedger."""

    def mint(self, owner: str) -> int: ...

    def transfer_custody(self, item_id: int, from_owner: str, to_owner: str) -> None: ...

    def custodian_of(self, item_id: int) -> str: ...

    def set_metadata(self, item_id: int, metadata_ref: str) -> None: ...

    def metadata_of(self, item_id: int) -> Optional[str]: ...


class InMemoryAssetRegistry:
    """Реестр активов в памяти процесса."""

    def __init__(self):
        self._next_id = FIRST_ITEM_ID
        self._custody: Dict[int, str] = {}
        self._metadata: Dict[int, str] = {}

    def mint(self, owner: str) -> int:
        """
        Выпуск нового актива.

        Args:
            owner: Первоначальный держатель

        Returns:
            Новый идентификатор (монотонно возрастающий)
        """
        if not owner:
            raise RegistryError("owner must be a non-empty identity")

        item_id = self._next_id
        self._next_id += 1
        self._custody[item_id] = owner
        return item_id

    def transfer_custody(self, item_id: int, from_owner: str, to_owner: str) -> None:
        """
        Передача custody актива.

        Raises:
            RegistryError: Если актив не существует или from_owner его не держит
        """
        current = self.custodian_of(item_id)
        if current != from_owner:
            raise RegistryError(
                f"item {item_id} is held by {current!r}, not {from_owner!r}"
            )
        if not to_owner:
            raise RegistryError("to_owner must be a non-empty identity")
        self._custody[item_id] = to_owner

    def custodian_of(self, item_id: int) -> str:
        try:
            return self._custody[item_id]
        except KeyError:
            raise RegistryError(f"unknown item {item_id}") from None

    def set_metadata(self, item_id: int, metadata_ref: str) -> None:
        self.custodian_of(item_id)
        self._metadata[item_id] = metadata_ref

    def metadata_of(self, item_id: int) -> Optional[str]:
        self.custodian_of(item_id)
        return self._metadata.get(item_id)
