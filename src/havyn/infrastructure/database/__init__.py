"""
Database infrastructure components.
"""

from havyn.infrastructure.database.connection import (
    Base,
    DatabaseManager,
    get_db_manager,
)
from havyn.infrastructure.database.user_store import (
    SqlUserAccountStore,
    UserAccountStore,
)

__all__ = [
    "Base",
    "DatabaseManager",
    "get_db_manager",
    "SqlUserAccountStore",
    "UserAccountStore",
]
