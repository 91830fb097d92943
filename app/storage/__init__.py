from sqlalchemy.ext.asyncio import create_async_engine

from app.config import Settings
from app.storage.base import Storage, StorageError, UnknownSellerError, UsernameTakenError
from app.storage.database import DatabaseStorage
from app.storage.memory import MemoryStorage


def create_storage(settings: Settings) -> Storage:
    """Build the backend named by ``settings.STORAGE_BACKEND``."""
    if settings.STORAGE_BACKEND == "database":
        engine = create_async_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO, pool_pre_ping=True)
        return DatabaseStorage(engine, auto_create=settings.DATABASE_AUTO_CREATE)
    return MemoryStorage()
