# FILE: rxprint/services/client_storage.py
from __future__ import annotations

import json
import logging
import threading
from collections import OrderedDict
from typing import Callable, Dict, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from rxprint.models.client_storage import ClientStorageItem
from rxprint.schemas.prescription import PrescriptionData
from rxprint.schemas.print_settings import (
    PrintSettings,
    get_default_settings,
    merge_settings,
)

logger = logging.getLogger(__name__)

SETTINGS_KEY = "tabibn-print-settings"
DATA_KEY = "tabibn-prescription-data"


# -------------------------------
# Stores
# -------------------------------
class KeyValueStore:
    """String key -> string value, the shape of browser storage."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Page-session scoped storage: lives as long as its owner keeps it."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class SessionStores:
    """
    One MemoryStore per session id, least recently used sessions evicted
    once more than `max_sessions` are live.
    """

    def __init__(self, max_sessions: int = 1024) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.max_sessions = max_sessions
        self._stores: OrderedDict[str, MemoryStore] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._stores)

    def for_session(self, session_id: str) -> MemoryStore:
        with self._lock:
            store = self._stores.get(session_id)
            if store is None:
                store = MemoryStore()
                self._stores[session_id] = store
                while len(self._stores) > self.max_sessions:
                    evicted, _ = self._stores.popitem(last=False)
                    logger.debug("Evicted session store %r", evicted)
            else:
                self._stores.move_to_end(session_id)
            return store

    def drop(self, session_id: str) -> None:
        with self._lock:
            self._stores.pop(session_id, None)


class DurableStore(KeyValueStore):
    """Durable storage backed by the client_storage table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            row = db.get(ClientStorageItem, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            row = db.get(ClientStorageItem, key)
            if row is None:
                row = ClientStorageItem(key=key, value=value)
            else:
                row.value = value
            try:
                db.add(row)
                db.commit()
            except Exception:
                db.rollback()
                raise

    def remove(self, key: str) -> None:
        with self._session_factory() as db:
            row = db.get(ClientStorageItem, key)
            if row is not None:
                db.delete(row)
                db.commit()


# -------------------------------
# Settings blob
# -------------------------------
def load_settings(store: KeyValueStore) -> PrintSettings:
    """
    Best effort: stored fields are merged over the defaults; missing/extra
    fields are tolerated, malformed JSON keeps the defaults.
    """
    defaults = get_default_settings()
    raw = store.get(SETTINGS_KEY)
    if not raw:
        return defaults

    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed stored print settings")
        return defaults
    if not isinstance(parsed, dict):
        logger.warning("Ignoring stored print settings of type %s",
                       type(parsed).__name__)
        return defaults

    try:
        return merge_settings(defaults, parsed, by_alias=True)
    except ValidationError:
        logger.warning("Ignoring invalid stored print settings", exc_info=True)
        return defaults


def save_settings(store: KeyValueStore, settings: PrintSettings) -> None:
    store.set(SETTINGS_KEY, json.dumps(settings.to_storage(), ensure_ascii=False))


# -------------------------------
# Prescription handoff
# -------------------------------
def coded_key(access_code: str) -> str:
    return f"{DATA_KEY}:{access_code}"


def stash_document(data: PrescriptionData,
                   session_store: KeyValueStore,
                   durable_store: Optional[KeyValueStore] = None) -> None:
    """
    Session copy for the print/export page, durable copy so a page opened
    in a new window still finds it.
    """
    raw = json.dumps(data.to_storage(), ensure_ascii=False)
    session_store.set(DATA_KEY, raw)
    if durable_store is not None:
        durable_store.set(DATA_KEY, raw)
        if data.access_code:
            durable_store.set(coded_key(data.access_code), raw)


def load_document(session_store: KeyValueStore,
                  durable_store: Optional[KeyValueStore] = None
                  ) -> Optional[PrescriptionData]:
    """None means: nothing usable, send the user back to the editor."""
    raw = session_store.get(DATA_KEY)
    if not raw and durable_store is not None:
        raw = durable_store.get(DATA_KEY)
    if not raw:
        return None

    try:
        return PrescriptionData.model_validate_json(raw)
    except ValidationError:
        logger.warning("Stored prescription is malformed; ignoring")
        return None


def load_document_by_code(durable_store: KeyValueStore,
                          access_code: str) -> Optional[PrescriptionData]:
    """Durable copy stored when the document was finalized with this code."""
    raw = durable_store.get(coded_key(access_code))
    if not raw:
        return None
    try:
        data = PrescriptionData.model_validate_json(raw)
    except ValidationError:
        logger.warning("Stored prescription %s is malformed; ignoring", access_code)
        return None
    return data if data.access_code == access_code else None
