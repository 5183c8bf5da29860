from __future__ import annotations

from booking_core.core.config import Settings
from booking_core.integrations.stores.memory import InMemorySlotStore
from booking_core.scheduling.gateway import SlotStoreGateway


def _sql_store(settings: Settings) -> SlotStoreGateway:
    # Imported lazily so the memory store never opens a database engine.
    from booking_core.core.database import AsyncSessionLocal
    from booking_core.integrations.stores.sqlalchemy_store import SqlAlchemySlotStore

    return SqlAlchemySlotStore(AsyncSessionLocal, settings.hours_for)


def _memory_store(settings: Settings) -> SlotStoreGateway:
    return InMemorySlotStore(settings.hours_for)


_STORES = {
    "sql": _sql_store,
    "memory": _memory_store,
}


def resolve_store(settings: Settings) -> SlotStoreGateway:
    factory = _STORES.get(settings.slot_store)
    if factory is None:
        raise ValueError(f"Unknown SLOT_STORE {settings.slot_store!r}; expected one of {sorted(_STORES)}")
    return factory(settings)
