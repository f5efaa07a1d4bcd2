"""Registry — реестр уникальных активов (выпуск идентификаторов и custody).

Внешний коллаборатор маркетплейса:
- mint(owner) -> id
- transfer_custody(id, from, to)
- custodian_of(id) -> owner
- метаданные предмета (opaque reference)
"""

from .asset_registry import (
    AssetRegistry,
    InMemoryAssetRegistry,
    RegistryError,
)

__all__ = [
    "AssetRegistry",
    "InMemoryAssetRegistry",
    "RegistryError",
]
