from .init import create_db_engine, get_session_factory, init_db
from .models import Base, ScanResultRecord, ScanTaskRecord
from .repository import ScanRepository

__all__ = [
    "Base",
    "ScanRepository",
    "ScanResultRecord",
    "ScanTaskRecord",
    "create_db_engine",
    "get_session_factory",
    "init_db",
]
