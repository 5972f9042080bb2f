"""
Session state for an Explorer shell.

Holds everything a command handler needs: who is acting, whether the one-shot
sudo override is armed, which directory is being explored, and the stores
that commands read and write.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .config import ExplorerConfig
from .logger import ActionStatus, ActionType, AuditLogger
from .permission_store import PermissionStore


@dataclass
class Session:
    """One interactive shell session."""
    root: Path
    store: PermissionStore
    current_user: str = "user"
    sudo_mode: bool = False
    sudo_armed: bool = False
    logger: Optional[AuditLogger] = None
    audit_warning: Optional[str] = None

    @classmethod
    def open(
        cls,
        config: Optional[ExplorerConfig] = None,
        root: Optional[Path] = None
    ) -> "Session":
        """
        Create a session and load its permission store.

        Args:
            config: Settings to use (defaults if None)
            root: Directory to explore (the process cwd if None)
        """
        config = config or ExplorerConfig()
        root = Path(root) if root is not None else Path.cwd()

        store = PermissionStore(root / config.permissions_file)
        store.load()

        session = cls(root=root, store=store, current_user=config.user)

        if config.audit_log:
            try:
                session.logger = AuditLogger(log_path=config.audit_log)
            except OSError as e:
                session.audit_warning = f"Audit logging disabled: {e}"

        return session

    def audit(
        self,
        action_type: ActionType,
        description: str,
        status: ActionStatus = ActionStatus.EXECUTED,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Record an action in the audit log, if one is open.

        A failed write turns auditing off for the rest of the session and
        leaves a warning in audit_warning for the shell to show.
        """
        if self.logger is None:
            return

        try:
            self.logger.log_action(
                action_type=action_type,
                description=description,
                user=self.current_user,
                sudo=self.sudo_mode,
                status=status,
                result=result,
                metadata=metadata
            )
        except OSError as e:
            self.logger = None
            self.audit_warning = f"Audit logging disabled: {e}"

    def resolve(self, name: str) -> Path:
        """Map a name typed at the prompt to a path under the root."""
        return self.root / name

    def arm_sudo(self) -> None:
        """Grant sudo to the next dispatched command."""
        self.sudo_armed = True

    def begin_command(self) -> None:
        self.sudo_mode = self.sudo_armed
        self.sudo_armed = False

    def end_command(self) -> None:
        """Drop sudo; it only ever covers a single command."""
        self.sudo_mode = False
