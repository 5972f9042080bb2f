"""
Configuration loading for Explorer.

Settings come from an optional YAML file. Anything missing, unreadable or
malformed falls back to the built-in defaults.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG_PATH = "config.yaml"


@dataclass
class ExplorerConfig:
    """Runtime settings for a shell session."""
    user: str = "user"
    permissions_file: str = ".permissions.txt"
    audit_log: Optional[str] = "~/.explorer/audit_log.jsonl"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExplorerConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        defaults = cls()
        audit_log = data.get("audit_log", defaults.audit_log)
        return cls(
            user=str(data.get("user") or defaults.user),
            permissions_file=str(data.get("permissions_file") or defaults.permissions_file),
            audit_log=str(audit_log) if audit_log else None,
        )


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Load the raw mapping from a YAML file, or an empty dict."""
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}

    if not isinstance(data, dict):
        return {}

    section = data.get("explorer")
    return section if isinstance(section, dict) else {}


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> ExplorerConfig:
    """
    Load Explorer settings.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        ExplorerConfig with file values layered over the defaults
    """
    return ExplorerConfig.from_dict(_read_yaml(Path(config_path)))
