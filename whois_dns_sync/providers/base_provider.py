"""
Base DNS provider interface.

Records are resource record sets: dictionaries with ``fqdn``, ``type``,
``ttl`` and ``values`` keys, one per name and type.
"""

from abc import ABC, abstractmethod
from typing import Dict, List

MANAGED_RECORD_TYPES = ("A", "AAAA", "CNAME", "MX", "TXT", "NS")


class DNSProvider(ABC):
    """Abstract base class for DNS providers."""

    @abstractmethod
    def get_records(self, zone: str, fqdn: str) -> List[Dict]:
        """Get the record sets of fqdn and of every name below it."""
        pass

    @abstractmethod
    def create_record(self, zone: str, record: Dict) -> bool:
        """Create a new record set."""
        pass

    @abstractmethod
    def update_record(self, zone: str, record: Dict) -> bool:
        """Replace the record set of the same name and type."""
        pass

    @abstractmethod
    def delete_record(self, zone: str, record: Dict) -> bool:
        """Delete the record set of the same name and type."""
        pass
