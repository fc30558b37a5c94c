from .base import CaptureStore, InventoryStore, OwnerT, ProjectStore, SpreadsheetStore
from .memory import (
    InMemoryCaptureStore,
    InMemoryInventoryStore,
    InMemoryProjectStore,
    InMemorySpreadsheetStore,
)

__all__ = [
    "OwnerT",
    "CaptureStore",
    "InventoryStore",
    "SpreadsheetStore",
    "ProjectStore",
    "InMemoryCaptureStore",
    "InMemoryInventoryStore",
    "InMemorySpreadsheetStore",
    "InMemoryProjectStore",
]
