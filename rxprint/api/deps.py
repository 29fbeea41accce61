# FILE: rxprint/api/deps.py
from __future__ import annotations

from fastapi import Header

from rxprint.core.config import settings
from rxprint.db.base import Base
from rxprint.db.session import SessionLocal, engine
from rxprint.services.client_storage import (
    DurableStore,
    KeyValueStore,
    MemoryStore,
    SessionStores,
)

DEFAULT_SESSION_ID = "default"

_session_stores = SessionStores(settings.SESSION_STORE_MAX)
_durable_store = DurableStore(SessionLocal)


def init_storage() -> None:
    Base.metadata.create_all(bind=engine)


def get_durable_store() -> KeyValueStore:
    return _durable_store


def get_session_store(
        x_session_id: str = Header(default=DEFAULT_SESSION_ID),
) -> MemoryStore:
    return _session_stores.for_session(x_session_id or DEFAULT_SESSION_ID)
