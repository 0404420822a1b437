"""
Input parsers.

Domain names, PR change sets and WHOIS files.
"""

from .changeset import extract_non_removed_whois_file, extract_whois_file, load_changed_files
from .domain import parse_domain
from .whois import WhoisFileLoader, build_whois_path

__all__ = [
    "WhoisFileLoader",
    "build_whois_path",
    "extract_non_removed_whois_file",
    "extract_whois_file",
    "load_changed_files",
    "parse_domain",
]
