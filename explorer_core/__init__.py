# Explorer - Core Module
"""
Core infrastructure for the Explorer shell.
This module provides the session state, permission store, configuration and
audit log that the shell commands depend on.
"""

from .config import ExplorerConfig, load_config
from .logger import AuditLogger, AuditEntry, ActionType, ActionStatus
from .permission_store import (
    PermissionStore,
    FALLBACK_PERMISSION,
    DIRECTORY_PERMISSION,
    permission_from_code,
)
from .session import Session

__all__ = [
    "ExplorerConfig",
    "load_config",
    "AuditLogger",
    "AuditEntry",
    "ActionType",
    "ActionStatus",
    "PermissionStore",
    "FALLBACK_PERMISSION",
    "DIRECTORY_PERMISSION",
    "permission_from_code",
    "Session",
]

__version__ = "0.1.0"
