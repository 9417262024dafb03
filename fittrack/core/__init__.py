from fittrack.core.config import settings
from fittrack.core.base import Base
from fittrack.core.db import engine, get_db

__all__ = ["settings", "engine", "Base", "get_db"]
