"""
Core sync functionality.

This package contains the sync handler, the operation vocabulary and the
DNS record manager it dispatches to.
"""

from .dns_manager import DNSRecordManager
from .operations import map_operation
from .record_manager import RecordManager
from .sync_handler import DNSSyncHandler

__all__ = ["DNSRecordManager", "DNSSyncHandler", "RecordManager", "map_operation"]
