"""
Configuration for gitindex.

Loads gitindex.yaml from the working directory. If no config file exists,
returns defaults.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from . import validate

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "gitindex.yaml"

# File extensions assumed binary when the `binary` attribute is unspecified
DEFAULT_BINARY_EXTENSIONS = [
    ".pdf", ".jpg", ".jpeg", ".png", ".bmp", ".gif", ".o",
    ".class", ".zip", ".gz", ".tar", ".ico", ".so", ".jar",
]


@dataclass
class IndexConfig:
    """Engine configuration from gitindex.yaml"""
    git_executable: str = "git"
    command_timeout: int = 30  # Seconds per git command
    hook_timeout: int = 120  # Seconds per hook script
    refresh_timeout: int = 120  # Seconds to wait for all three status scans
    context_lines: int = 3
    binary_extensions: list[str] = field(default_factory=lambda: DEFAULT_BINARY_EXTENSIONS.copy())
    hooks_path: str | None = None  # Relative to the working directory; None asks git

    @classmethod
    def from_dict(cls, data: dict) -> "IndexConfig":
        """Build a config from parsed YAML, checking it against the config schema.

        Raises:
            ValidationError: Listing every problem in data.
        """
        validate.validate(data, "config")
        return cls(**data)


def load_index_config(repo_dir: Optional[Path]) -> IndexConfig:
    """Load gitindex.yaml and return IndexConfig.

    If repo_dir is None or the file doesn't exist, returns defaults. A file
    that isn't valid YAML is logged and ignored.

    Raises:
        ValidationError: If the file parses but doesn't match the config schema.
    """
    if repo_dir is None:
        return IndexConfig()

    config_path = Path(repo_dir) / CONFIG_FILENAME
    if not config_path.exists():
        return IndexConfig()

    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return IndexConfig()

    if not data:
        return IndexConfig()

    return IndexConfig.from_dict(data)
