"""
File operations module for the Explorer shell.

Thin wrappers around directory listing, creation, removal, copy and rename.
Every operation consults or updates the session's permission store, records
itself in the audit log, and reports back with an OpResult instead of raising.
"""

import shutil
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from explorer_core.logger import ActionType, ActionStatus
from explorer_core.permission_store import (
    DIRECTORY_PERMISSION,
    can_read,
    can_write,
    permission_from_code,
)
from explorer_core.session import Session


class Outcome(Enum):
    """How a shell operation ended."""
    OK = "ok"
    INFO = "info"
    NOT_FOUND = "not_found"
    WRONG_TYPE = "wrong_type"
    NOT_EMPTY = "not_empty"
    PERMISSION_DENIED = "permission_denied"
    MALFORMED_ARGUMENT = "malformed_argument"
    OPERATION_FAILED = "operation_failed"
    UNKNOWN_COMMAND = "unknown_command"


@dataclass
class OpResult:
    """Result of a shell operation."""
    outcome: Outcome
    message: str = ""
    entries: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.outcome in (Outcome.OK, Outcome.INFO)


_AUDIT_STATUS = {
    Outcome.OK: ActionStatus.EXECUTED,
    Outcome.INFO: ActionStatus.INFO,
    Outcome.PERMISSION_DENIED: ActionStatus.DENIED,
}


class FileOperator:
    """Shell operations on the files of one session's root directory."""

    def __init__(self, session: Session):
        """
        Initialize FileOperator.

        Args:
            session: The session whose root, store and sudo flag are used
        """
        self.session = session

    @property
    def store(self):
        return self.session.store

    def _exists(self, name: str) -> bool:
        # An empty name would resolve to the root itself.
        return bool(name) and self.session.resolve(name).exists()

    def _record(
        self,
        action_type: ActionType,
        description: str,
        result: OpResult,
        error: Optional[Exception] = None,
        **metadata
    ) -> OpResult:
        """Append the outcome of an operation to the audit log, if any."""
        metadata["outcome"] = result.outcome.value
        self.session.audit(
            action_type=action_type,
            description=description,
            status=_AUDIT_STATUS.get(result.outcome, ActionStatus.FAILED),
            result=f"Error: {error}" if error else result.message,
            metadata=metadata
        )
        return result

    def list_entries(self) -> OpResult:
        """
        List the root directory with each entry's effective permission.

        Returns:
            OpResult whose entries are (permission, name) pairs sorted by name
        """
        description = f"List directory: {self.session.root}"
        try:
            items = sorted(self.session.root.iterdir(), key=lambda p: p.name)
        except OSError as e:
            return self._record(
                ActionType.LIST,
                description,
                OpResult(Outcome.OPERATION_FAILED, "Failed to list directory."),
                error=e
            )

        entries = [(self.store.get(item.name), item.name) for item in items]
        return self._record(
            ActionType.LIST,
            description,
            OpResult(Outcome.INFO, entries=entries),
            count=len(entries)
        )

    def make_directory(self, name: str) -> OpResult:
        """Create a directory and store the directory permission for it."""
        description = f"Create directory: {name}"
        try:
            self.session.resolve(name).mkdir()
            self.store.set(name, DIRECTORY_PERMISSION)
            self.store.save()
        except OSError as e:
            return self._record(
                ActionType.CREATE,
                description,
                OpResult(Outcome.OPERATION_FAILED, "Failed to create directory."),
                error=e
            )

        return self._record(
            ActionType.CREATE,
            description,
            OpResult(Outcome.OK, f"Directory created: {name}")
        )

    def remove_directory(self, name: str) -> OpResult:
        """Remove an empty directory and forget its permission."""
        description = f"Remove directory: {name}"
        path = self.session.resolve(name)

        if not self._exists(name):
            result = OpResult(Outcome.NOT_FOUND, "Not found.")
        elif not path.is_dir():
            result = OpResult(Outcome.WRONG_TYPE, "Not a directory.")
        else:
            try:
                if any(path.iterdir()):
                    result = OpResult(Outcome.NOT_EMPTY, "Directory not empty.")
                else:
                    path.rmdir()
                    self.store.erase(name)
                    self.store.save()
                    result = OpResult(Outcome.OK, "Directory removed.")
            except OSError as e:
                return self._record(
                    ActionType.DELETE,
                    description,
                    OpResult(Outcome.OPERATION_FAILED, "Failed to remove directory."),
                    error=e
                )

        return self._record(ActionType.DELETE, description, result)

    def delete_file(self, name: str) -> OpResult:
        """
        Delete a file.

        Requires the write flag on the stored permission unless sudo mode is
        armed. An empty directory is removed as well.
        """
        description = f"Delete file: {name}"
        path = self.session.resolve(name)

        if not self._exists(name):
            return self._record(
                ActionType.DELETE, description, OpResult(Outcome.NOT_FOUND, "File not found.")
            )

        permission = self.store.get(name)
        if not self.session.sudo_mode and not can_write(permission):
            return self._record(
                ActionType.DELETE,
                description,
                OpResult(Outcome.PERMISSION_DENIED, "Permission denied."),
                permission=permission
            )

        try:
            if path.is_dir() and not path.is_symlink():
                path.rmdir()
            else:
                path.unlink()
            self.store.erase(name)
            self.store.save()
        except OSError as e:
            return self._record(
                ActionType.DELETE,
                description,
                OpResult(Outcome.OPERATION_FAILED, "Delete failed."),
                error=e
            )

        return self._record(
            ActionType.DELETE, description, OpResult(Outcome.OK, f"Deleted: {name}")
        )

    def change_mode(self, name: str, code: str) -> OpResult:
        """
        Store a new permission string decoded from a three character code.

        Args:
            name: Existing file or directory
            code: Code such as "755"
        """
        description = f"Change permission: {name} {code}"

        if not self._exists(name):
            return self._record(
                ActionType.CHMOD, description, OpResult(Outcome.NOT_FOUND, "Not found.")
            )

        try:
            permission = permission_from_code(code, self.session.resolve(name).is_dir())
        except ValueError:
            return self._record(
                ActionType.CHMOD,
                description,
                OpResult(Outcome.MALFORMED_ARGUMENT, "Use format like 755.")
            )

        try:
            self.store.set(name, permission)
            self.store.save()
        except OSError as e:
            return self._record(
                ActionType.CHMOD,
                description,
                OpResult(Outcome.OPERATION_FAILED, "Failed to change permission."),
                error=e
            )

        return self._record(
            ActionType.CHMOD,
            description,
            OpResult(Outcome.OK, f"Changed permission of {name} to {permission}"),
            permission=permission
        )

    def show_permission(self, name: str) -> OpResult:
        """Report the effective permission of an existing name."""
        if not self._exists(name):
            result = OpResult(Outcome.NOT_FOUND, "Not found.")
        else:
            result = OpResult(Outcome.INFO, f"{name}: {self.store.get(name)}")
        return self._record(ActionType.READ, f"Show permission: {name}", result)

    def copy_file(self, src: str, dest: str) -> OpResult:
        """
        Copy a file's contents, overwriting the destination.

        Requires the read flag on the source unless sudo mode is armed. The
        destination inherits the source's effective permission.
        """
        description = f"Copy {src} to {dest}"

        if not self._exists(src):
            return self._record(
                ActionType.COPY, description, OpResult(Outcome.NOT_FOUND, "Source not found.")
            )

        permission = self.store.get(src)
        if not self.session.sudo_mode and not can_read(permission):
            return self._record(
                ActionType.COPY,
                description,
                OpResult(Outcome.PERMISSION_DENIED, "Permission denied (no read)."),
                permission=permission
            )

        try:
            shutil.copyfile(self.session.resolve(src), self.session.resolve(dest))
            self.store.set(dest, permission)
            self.store.save()
        except OSError as e:
            return self._record(
                ActionType.COPY,
                description,
                OpResult(Outcome.OPERATION_FAILED, "Copy failed."),
                error=e
            )

        return self._record(
            ActionType.COPY,
            description,
            OpResult(Outcome.OK, f"Copied {src} → {dest}"),
            source=src,
            destination=dest
        )

    def move_file(self, src: str, dest: str) -> OpResult:
        """
        Rename a file or directory, replacing an existing destination file.

        Requires the write flag on the source unless sudo mode is armed. The
        permission entry follows the file to its new name.
        """
        description = f"Move {src} to {dest}"

        if not self._exists(src):
            return self._record(
                ActionType.MOVE, description, OpResult(Outcome.NOT_FOUND, "Source not found.")
            )

        permission = self.store.get(src)
        if not self.session.sudo_mode and not can_write(permission):
            return self._record(
                ActionType.MOVE,
                description,
                OpResult(Outcome.PERMISSION_DENIED, "Permission denied (no write)."),
                permission=permission
            )

        try:
            if not dest:
                raise FileNotFoundError("No destination given")
            self.session.resolve(src).replace(self.session.resolve(dest))
            self.store.rename(src, dest)
            self.store.save()
        except OSError as e:
            return self._record(
                ActionType.MOVE,
                description,
                OpResult(Outcome.OPERATION_FAILED, "Move failed."),
                error=e
            )

        return self._record(
            ActionType.MOVE,
            description,
            OpResult(Outcome.OK, f"Moved {src} → {dest}"),
            source=src,
            destination=dest
        )
