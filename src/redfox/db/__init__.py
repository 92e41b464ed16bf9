"""Session history database."""

from .init import init_db
from .models import Base, ScanSessionRecord

__all__ = ["Base", "ScanSessionRecord", "init_db"]
