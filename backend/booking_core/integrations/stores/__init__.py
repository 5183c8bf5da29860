from booking_core.integrations.stores.memory import InMemorySlotStore
from booking_core.integrations.stores.registry import resolve_store

__all__ = [
    "InMemorySlotStore",
    "resolve_store",
]
