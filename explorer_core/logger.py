"""
Audit Logger for Explorer.

Provides append-only logging of every shell operation with timestamps, the
acting user, whether sudo mode was active, and the outcome.
"""

import json
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Dict, Any
from enum import Enum


class ActionType(Enum):
    """Types of actions that can be logged."""
    LIST = "list"
    CREATE = "create"
    DELETE = "delete"
    CHMOD = "chmod"
    READ = "read"
    COPY = "copy"
    MOVE = "move"
    SESSION = "session"


class ActionStatus(Enum):
    """Status of an action execution."""
    EXECUTED = "executed"
    INFO = "info"
    DENIED = "denied"
    FAILED = "failed"


@dataclass
class AuditEntry:
    """Represents a single audit log entry."""
    timestamp: str
    action_type: str
    action_description: str
    user: str
    sudo: bool
    status: str
    result: Optional[str]
    metadata: Dict[str, Any]

    @classmethod
    def create(
        cls,
        action_type: ActionType,
        action_description: str,
        user: str,
        sudo: bool = False,
        status: ActionStatus = ActionStatus.EXECUTED,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "AuditEntry":
        """Factory method to create an audit entry with current timestamp."""
        return cls(
            timestamp=datetime.now().isoformat(),
            action_type=action_type.value,
            action_description=action_description,
            user=user,
            sudo=sudo,
            status=status.value,
            result=result,
            metadata=metadata or {}
        )

    def to_json(self) -> str:
        """Convert entry to JSON string."""
        return json.dumps(asdict(self), ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "AuditEntry":
        """Create entry from JSON string."""
        data = json.loads(json_str)
        return cls(**data)


class AuditLogger:
    """
    Append-only audit logger for Explorer.

    All operations are logged to a JSONL file. The log is append-only and
    lives outside the explored directory by default.
    """

    def __init__(self, log_path: str = "~/.explorer/audit_log.jsonl"):
        """
        Initialize the audit logger.

        Args:
            log_path: Path to the JSONL log file ("~" is expanded)
        """
        self.log_path = Path(log_path).expanduser()
        self._ensure_log_directory()

    def _ensure_log_directory(self) -> None:
        """Create the log directory if it doesn't exist."""
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        # Create log file if it doesn't exist
        if not self.log_path.exists():
            self.log_path.touch()

    def log(self, entry: AuditEntry) -> None:
        """
        Append an audit entry to the log.

        Args:
            entry: The AuditEntry to log
        """
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(entry.to_json() + "\n")

    def log_action(
        self,
        action_type: ActionType,
        description: str,
        user: str,
        sudo: bool = False,
        status: ActionStatus = ActionStatus.EXECUTED,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> AuditEntry:
        """
        Convenience method to create and log an entry in one call.

        Returns the created AuditEntry.
        """
        entry = AuditEntry.create(
            action_type=action_type,
            action_description=description,
            user=user,
            sudo=sudo,
            status=status,
            result=result,
            metadata=metadata
        )
        self.log(entry)
        return entry

    def _read_entries(self) -> List[AuditEntry]:
        entries = []

        if not self.log_path.exists():
            return entries

        with open(self.log_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(AuditEntry.from_json(line))
                except (json.JSONDecodeError, TypeError):
                    continue

        return entries

    def get_recent(self, limit: int = 100) -> List[AuditEntry]:
        """
        Get the most recent audit entries.

        Args:
            limit: Maximum number of entries to return

        Returns:
            List of AuditEntry objects, most recent first
        """
        entries = self._read_entries()
        return list(reversed(entries[-limit:])) if limit > 0 else []

    def get_by_action_type(self, action_type: ActionType, limit: int = 100) -> List[AuditEntry]:
        """
        Get audit entries filtered by action type.

        Args:
            action_type: The ActionType to filter by
            limit: Maximum number of entries to return

        Returns:
            List of matching AuditEntry objects, oldest first
        """
        matching = [e for e in self._read_entries() if e.action_type == action_type.value]
        return matching[:limit]

    def get_denied_actions(self, limit: int = 50) -> List[AuditEntry]:
        """
        Get operations that were refused by a permission check.

        Useful for reviewing what sudo would have been needed for.
        """
        denied = [e for e in self._read_entries() if e.status == ActionStatus.DENIED.value]
        return denied[:limit]

    def export(self, format: str = "json", limit: int = 10000) -> str:
        """
        Export the audit log.

        Args:
            format: Export format ("json" or "csv")
            limit: Maximum number of entries to include

        Returns:
            String containing the exported data
        """
        entries = self.get_recent(limit=limit)
        header = "timestamp,action_type,action_description,user,sudo,status,result"

        if format == "json":
            return json.dumps([asdict(e) for e in entries], indent=2)
        elif format == "csv":
            lines = [header]
            for e in entries:
                lines.append(f'"{e.timestamp}","{e.action_type}","{e.action_description}","{e.user}",{e.sudo},"{e.status}","{e.result or ""}"')
            return "\n".join(lines) + ("\n" if not entries else "")
        else:
            raise ValueError(f"Unsupported export format: {format}")
