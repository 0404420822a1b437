"""
WHOIS file loader.

WHOIS files are looked up in several places because the sync may run from the
repository root, from a CI step directory, or against a separately checked
out WHOIS repository.
"""

import json
import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..exceptions import DescriptorMalformed, DescriptorNotFound, DescriptorReadFailed
from ..utils.file_utils import FileSystem, LocalFileSystem
from .domain import WHOIS_DIR

logger = logging.getLogger(__name__)

PathResolver = Callable[[str], Path]


def build_whois_path(filename: str, base_dir: Optional[str] = None) -> str:
    """
    Map a WHOIS filename onto the directory it should be read from.

    Args:
        filename: Name such as ``example.no.kg.json`` or ``whois/example.no.kg.json``
        base_dir: Override directory used instead of ``whois/``

    Returns:
        Logical path to hand to WhoisFileLoader
    """
    prefix = f"{WHOIS_DIR}/"
    if base_dir:
        name = filename[len(prefix):] if filename.startswith(prefix) else filename
        return f"{base_dir.rstrip('/')}/{name}"
    return filename if filename.startswith(prefix) else f"{prefix}{filename}"


class WhoisFileLoader:
    """Reads WHOIS files, trying each resolver strategy in order."""

    def __init__(
        self,
        filesystem: Optional[FileSystem] = None,
        workspace_root: Optional[str] = None,
        cwd: Optional[str] = None,
    ):
        self.filesystem = filesystem or LocalFileSystem()
        self.cwd = Path(cwd or os.getcwd())
        self.workspace_root = Path(workspace_root) if workspace_root else self.cwd
        self.resolvers: List[PathResolver] = [
            lambda p: self.workspace_root / p,
            lambda p: self.cwd / ".." / ".." / p,
            lambda p: self.cwd / p,
        ]

    def candidate_paths(self, logical_path: str) -> List[Path]:
        """Candidate locations for a logical path, in lookup order, without duplicates."""
        candidates = []
        for resolver in self.resolvers:
            candidate = Path(os.path.normpath(resolver(logical_path)))
            if candidate not in candidates:
                candidates.append(candidate)
        return candidates

    def read_whois_file(self, logical_path: str) -> Dict:
        """
        Read and parse a WHOIS file.

        Raises:
            DescriptorNotFound: no candidate path exists
            DescriptorMalformed: the file is not a JSON object
            DescriptorReadFailed: the file exists but could not be read
        """
        attempted = []
        for candidate in self.candidate_paths(logical_path):
            attempted.append(str(candidate))
            if self.filesystem.exists(candidate):
                logger.info(f"Reading whois file: {candidate}")
                return self._parse(candidate)
            logger.debug(f"Whois file not present at: {candidate}")

        logger.error(f"Whois file {logical_path} not found, tried: {attempted}")
        raise DescriptorNotFound(logical_path, attempted)

    def _parse(self, path: Path) -> Dict:
        try:
            content = self.filesystem.read_text(path)
        except UnicodeDecodeError as e:
            raise DescriptorMalformed(f"Whois file {path} is not UTF-8 text") from e
        except OSError as e:
            raise DescriptorReadFailed(f"Failed to read whois file {path}: {e}") from e

        try:
            whois_data = json.loads(content)
        except ValueError as e:
            raise DescriptorMalformed(f"Invalid JSON format in whois file: {path}") from e

        if not isinstance(whois_data, dict):
            raise DescriptorMalformed(
                f"Whois file {path} must contain a JSON object, "
                f"got {type(whois_data).__name__}"
            )

        logger.info(f"Successfully parsed whois file: {path}")
        return whois_data
