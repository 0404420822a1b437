"""
Utility functions and helpers.

This package contains record validation and filesystem helpers.
"""

from .file_utils import FileSystem, LocalFileSystem, write_result_file
from .validators import validate_fqdn, validate_ipv4, validate_record_value

__all__ = [
    "FileSystem",
    "LocalFileSystem",
    "validate_fqdn",
    "validate_ipv4",
    "validate_record_value",
    "write_result_file",
]
