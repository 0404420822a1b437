"""
WHOIS DNS Sync - keeps DNS records in line with WHOIS descriptor files

Reconciles workflow inputs (manual requests or merged PRs touching a file
under ``whois/``) into a single sync request and applies it to a DNS
provider such as BIND.
"""

__version__ = "1.0.0"
__author__ = "WHOIS DNS Sync Team"
__description__ = "Sync DNS records from WHOIS descriptor files"

from .core.config import SyncConfig
from .core.dns_manager import DNSRecordManager
from .core.sync_handler import DNSSyncHandler

__all__ = [
    "DNSRecordManager",
    "DNSSyncHandler",
    "SyncConfig",
]
