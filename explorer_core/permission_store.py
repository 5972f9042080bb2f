"""
Permission Store for Explorer.

Keeps the advisory permission string of every name the shell has created or
chmod'ed. Nothing here touches real OS permission bits: the strings are only
consulted by the shell's own commands.

The store is a flat text file of ``name permission`` pairs, rewritten in full
on every save.
"""

from pathlib import Path
from typing import Dict, ItemsView


FALLBACK_PERMISSION = "-rw-r--r--"
DIRECTORY_PERMISSION = "drwxr-xr-x"

READ_INDEX = 1
WRITE_INDEX = 2


def has_flag(permission: str, index: int, flag: str) -> bool:
    """Check a single positional flag, treating short strings as unset."""
    return permission[index:index + 1] == flag


def can_read(permission: str) -> bool:
    return has_flag(permission, READ_INDEX, "r")


def can_write(permission: str) -> bool:
    return has_flag(permission, WRITE_INDEX, "w")


def _decode_digit(char: str, is_dir: bool = False) -> str:
    n = ord(char) - ord("0")
    return "".join([
        "d" if is_dir else "-",
        "r" if n & 4 else "-",
        "w" if n & 2 else "-",
        "x" if n & 1 else "-",
    ])


def permission_from_code(code: str, is_dir: bool = False) -> str:
    """
    Build a permission string from a three character chmod code.

    Each character decodes to its own four character group (a type flag
    followed by r/w/x), so "755" on a file gives "-rwx-r-x-r-x". Only the
    first group can carry the "d" flag. Characters are not validated: a
    non-digit decodes by the same arithmetic.

    Args:
        code: Exactly three characters, normally octal digits
        is_dir: Whether the target is a directory

    Returns:
        The twelve character permission string

    Raises:
        ValueError: If code is not exactly three characters long
    """
    if len(code) != 3:
        raise ValueError(f"Permission code must be 3 characters: {code!r}")

    return (
        _decode_digit(code[0], is_dir)
        + _decode_digit(code[1])
        + _decode_digit(code[2])
    )


class PermissionStore:
    """Name to permission string mapping backed by a dotfile."""

    def __init__(self, path: Path):
        """
        Args:
            path: Location of the persistence file
        """
        self.path = Path(path)
        self._entries: Dict[str, str] = {}

    def load(self) -> bool:
        """
        Read the persistence file into memory.

        A missing or unreadable file is not an error; the store starts empty.
        Tokens are consumed in pairs; a dangling final token is ignored and
        the last pair for a name wins.

        Returns:
            True if the file was read, False otherwise
        """
        if not self.path.exists():
            return False

        try:
            tokens = self.path.read_text(encoding="utf-8").split()
        except (OSError, UnicodeDecodeError):
            return False

        for name, permission in zip(tokens[0::2], tokens[1::2]):
            self._entries[name] = permission
        return True

    def save(self) -> None:
        """Overwrite the persistence file with every entry, sorted by name."""
        with open(self.path, "w", encoding="utf-8") as f:
            for name in sorted(self._entries):
                f.write(f"{name} {self._entries[name]}\n")

    def get(self, name: str) -> str:
        return self._entries.get(name, FALLBACK_PERMISSION)

    def set(self, name: str, permission: str) -> None:
        self._entries[name] = permission

    def erase(self, name: str) -> None:
        self._entries.pop(name, None)

    def rename(self, src: str, dest: str) -> None:
        """Carry the effective permission of src over to dest."""
        permission = self.get(src)
        self.erase(src)
        self.set(dest, permission)

    def items(self) -> ItemsView[str, str]:
        return self._entries.items()

    def __contains__(self, name: object) -> bool:
        return name in self._entries
