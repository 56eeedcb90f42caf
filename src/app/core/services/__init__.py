"""Core services exports."""

from .database.db_manage import DbManageService
from .database.db_session import DbSessionService
from .storage.image_store import ImageStore

__all__ = [
    "DbManageService",
    "DbSessionService",
    "ImageStore",
]
