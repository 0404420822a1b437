"""
File utilities - filesystem access for WHOIS files and sync results.

The sync core never touches the disk directly; it goes through a FileSystem
so tests can swap in an in-memory implementation.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_RESULT_FILE = "dns-sync-result.json"


class FileSystem(ABC):
    """Abstract base class for filesystem access."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Return True when a regular file exists at path."""
        pass

    @abstractmethod
    def read_text(self, path: Path) -> str:
        """Read a file as UTF-8 text."""
        pass

    @abstractmethod
    def write_text(self, path: Path, content: str) -> None:
        """Write UTF-8 text to a file, replacing it."""
        pass


class LocalFileSystem(FileSystem):
    """FileSystem backed by the local disk."""

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def read_text(self, path: Path) -> str:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def write_text(self, path: Path, content: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


def write_result_file(
    result: Dict,
    output_path: str = DEFAULT_RESULT_FILE,
    filesystem: Optional[FileSystem] = None,
) -> Dict:
    """
    Persist a sync result as pretty-printed JSON.

    A timestamp is always present in the written record; a timestamp already
    carried by the result takes precedence.

    Returns:
        The record as written
    """
    filesystem = filesystem or LocalFileSystem()
    result_data = {"timestamp": utc_timestamp(), **result}

    try:
        filesystem.write_text(
            Path(output_path), json.dumps(result_data, indent=2, default=str)
        )
        logger.info(f"Result written to: {output_path}")
    except OSError as e:
        logger.error(f"Failed to write result file: {e}")
        raise

    return result_data
