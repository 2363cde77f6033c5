"""Key set loading and lookup."""

from .lazy import LazyKeyStore, StoreState
from .source import KeyMaterialSource, KeySetDocument
from .store import KeyStore

__all__ = ["KeyMaterialSource", "KeySetDocument", "KeyStore", "LazyKeyStore", "StoreState"]
