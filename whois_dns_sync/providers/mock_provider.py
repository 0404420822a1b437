"""
Mock DNS provider for testing and dry runs.

Records live in memory and are lost when the process exits.
"""

import copy
import logging
from typing import Dict, List, Optional

from .base_provider import DNSProvider
from ..utils.validators import is_within, sanitize_fqdn

logger = logging.getLogger(__name__)


def _same_rrset(a: Dict, b: Dict) -> bool:
    return sanitize_fqdn(a["fqdn"]) == sanitize_fqdn(b["fqdn"]) and a["type"] == b["type"]


class MockDNSProvider(DNSProvider):
    """In-memory DNS provider holding record sets."""

    def __init__(self, config: Optional[Dict] = None):
        config = config or {}
        self.records = copy.deepcopy(config.get("records", []))
        logger.info("Mock DNS provider initialized")

    def get_records(self, zone: str, fqdn: str) -> List[Dict]:
        found = [copy.deepcopy(r) for r in self.records if is_within(r["fqdn"], fqdn)]
        logger.info(f"Mock: Retrieved {len(found)} records for {fqdn}")
        return found

    def create_record(self, zone: str, record: Dict) -> bool:
        self.records.append(copy.deepcopy(record))
        logger.info(f"Mock: Created {record['type']} record {record['fqdn']} -> {', '.join(record['values'])}")
        return True

    def update_record(self, zone: str, record: Dict) -> bool:
        remaining = [r for r in self.records if not _same_rrset(r, record)]
        if len(remaining) == len(self.records):
            raise ValueError(f"Record {record['fqdn']} ({record['type']}) not found for update")

        self.records = remaining + [copy.deepcopy(record)]
        logger.info(f"Mock: Updated {record['type']} record {record['fqdn']} -> {', '.join(record['values'])}")
        return True

    def delete_record(self, zone: str, record: Dict) -> bool:
        remaining = [r for r in self.records if not _same_rrset(r, record)]
        if len(remaining) == len(self.records):
            raise ValueError(f"Record {record['fqdn']} ({record['type']}) not found for deletion")

        self.records = remaining
        logger.info(f"Mock: Deleted {record['type']} record {record['fqdn']}")
        return True
