# rxprint/models/__init__.py
from .client_storage import ClientStorageItem

__all__ = [
    "ClientStorageItem",
]
