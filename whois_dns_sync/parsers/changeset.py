"""
Change set parsing - picks the single WHOIS file touched by a merged PR.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..exceptions import AmbiguousDescriptor, ChangeSetReadFailed, NoDescriptorFound
from ..utils.file_utils import FileSystem, LocalFileSystem
from .domain import WHOIS_DIR, WHOIS_SUFFIX

logger = logging.getLogger(__name__)

STATUS_REMOVED = "removed"


def is_whois_file(changed_file: Dict) -> bool:
    """Check if a changed file lives in the WHOIS directory."""
    filename = changed_file.get("filename")
    if not isinstance(filename, str):
        return False
    return filename.startswith(f"{WHOIS_DIR}/") and filename.endswith(WHOIS_SUFFIX)


def _single(candidates: List[Dict], label: str) -> Dict:
    if not candidates:
        raise NoDescriptorFound(f"No {label}whois files found in PR changes")
    if len(candidates) > 1:
        raise AmbiguousDescriptor(
            f"Multiple {label}whois files found in PR changes",
            [f["filename"] for f in candidates],
        )
    return candidates[0]


def extract_whois_file(files: List[Dict]) -> Dict:
    """Return the only WHOIS file in the change set, whatever its status."""
    return _single([f for f in files if is_whois_file(f)], "")


def extract_non_removed_whois_file(files: List[Dict]) -> Dict:
    """Return the only WHOIS file in the change set that was not removed."""
    return _single(
        [f for f in files if is_whois_file(f) and f.get("status") != STATUS_REMOVED],
        "non-removed ",
    )


def load_changed_files(
    path: str, filesystem: Optional[FileSystem] = None
) -> List[Dict]:
    """
    Load the list of files changed by a PR.

    A missing file yields an empty list so the extractor reports the
    absence of WHOIS files.

    Raises:
        ChangeSetReadFailed: the file cannot be read or is not a JSON list
    """
    filesystem = filesystem or LocalFileSystem()
    logger.info(f"Reading PR files from: {path}")

    if not filesystem.exists(Path(path)):
        logger.warning("PR files JSON file not found, using empty list")
        return []

    try:
        files = json.loads(filesystem.read_text(Path(path)))
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read PR files from JSON file: {e}")
        raise ChangeSetReadFailed(f"Failed to read PR files: {e}") from e

    if not isinstance(files, list):
        raise ChangeSetReadFailed(
            f"Failed to read PR files: expected a JSON list, got {type(files).__name__}"
        )

    logger.info(f"Successfully read {len(files)} PR files")
    return [f for f in files if isinstance(f, dict)]
