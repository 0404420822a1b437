"""
Record Manager - Core logic for DNS record management

Turns the ``records`` declared in a WHOIS file into record sets and compares
them with what the DNS provider currently serves, so every sync applies only
the difference.
"""

import ipaddress
import logging
from typing import Dict, List, Tuple

from ..providers.base_provider import MANAGED_RECORD_TYPES
from ..utils.validators import is_within, sanitize_fqdn, validate_record_value

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300


def normalize_value(record_type: str, value: str) -> str:
    """Presentation form of a record value, as the DNS server reports it back."""
    value = value.strip()
    if record_type in ("A", "AAAA"):
        return str(ipaddress.ip_address(value))
    if record_type in ("CNAME", "NS"):
        return f"{sanitize_fqdn(value)}."
    if record_type == "MX":
        priority, host = value.split()
        return f"{int(priority)} {sanitize_fqdn(host)}."
    if record_type == "TXT" and not (value.startswith('"') and value.endswith('"')):
        return '"{}"'.format(value.replace('"', '\\"'))
    return value


def record_key(record: Dict) -> Tuple[str, str]:
    return sanitize_fqdn(record["fqdn"]), record["type"]


class RecordManager:
    """Manages DNS record operations and change analysis."""

    def __init__(self, dns_client):
        """Initialize record manager with DNS client."""
        self.dns_client = dns_client

    def build_desired_records(self, whois_data: Dict, fqdn: str) -> List[Dict]:
        """
        Build record sets from the ``records`` list of a WHOIS file.

        Entries look like ``{"name": "www", "type": "A", "value": "192.0.2.1"}``;
        ``name`` defaults to the domain apex (``@``), ``type`` to ``A`` and
        ``ttl`` to 300. Invalid entries are skipped with a warning.

        Args:
            whois_data: Parsed WHOIS file
            fqdn: Registered domain the records belong to

        Returns:
            List of record sets, one per name and type
        """
        record_sets: Dict[Tuple[str, str], Dict] = {}

        for index, entry in enumerate(whois_data.get("records") or []):
            if not isinstance(entry, dict):
                logger.warning(f"Record #{index} of {fqdn} is not an object, skipping")
                continue

            name = str(entry.get("name", "@")).strip()
            record_type = str(entry.get("type", "A")).strip().upper()
            value = entry.get("value")
            record_fqdn = fqdn if name in ("", "@") else f"{sanitize_fqdn(name)}.{fqdn}"

            if record_type not in MANAGED_RECORD_TYPES:
                logger.warning(
                    f"Unsupported record type '{record_type}' for {record_fqdn}, skipping"
                )
                continue

            if not validate_record_value(record_type, value):
                logger.warning(
                    f"Invalid {record_type} value '{value}' for {record_fqdn}, skipping"
                )
                continue

            try:
                ttl = int(entry.get("ttl", DEFAULT_TTL))
            except (TypeError, ValueError):
                logger.warning(f"Invalid TTL for {record_fqdn}, using {DEFAULT_TTL}")
                ttl = DEFAULT_TTL

            key = (sanitize_fqdn(record_fqdn), record_type)
            record_set = record_sets.setdefault(
                key, {"fqdn": key[0], "type": record_type, "ttl": ttl, "values": []}
            )
            record_set["ttl"] = min(record_set["ttl"], ttl)
            normalized = normalize_value(record_type, value)
            if normalized not in record_set["values"]:
                record_set["values"].append(normalized)

        for record_set in record_sets.values():
            record_set["values"].sort()

        logger.info(f"Built {len(record_sets)} record sets for {fqdn}")
        return list(record_sets.values())

    def analyze_changes(
        self, current_records: List[Dict], desired_records: List[Dict], fqdn: str
    ) -> Dict:
        """
        Analyze changes between current and desired record sets.

        Args:
            current_records: Record sets served by the provider
            desired_records: Record sets built from the WHOIS file
            fqdn: Registered domain; nothing outside it is touched

        Returns:
            Dictionary containing categorized changes
        """
        logger.info(f"Analyzing DNS record changes for {fqdn}...")
        self._validate_domain_safety(desired_records, fqdn)

        current = {
            record_key(r): r for r in current_records if is_within(r["fqdn"], fqdn)
        }
        desired = {record_key(r): r for r in desired_records}

        creates = []
        updates = []
        no_changes = []

        for key, record in desired.items():
            existing = current.get(key)
            if existing is None:
                creates.append(record)
                logger.info(f"Create needed: {key[0]} {key[1]} -> {record['values']}")
            elif sorted(existing["values"]) != record["values"] or existing.get("ttl") != record["ttl"]:
                updates.append(record)
                logger.info(
                    f"Update needed: {key[0]} {key[1]} {existing['values']} -> {record['values']}"
                )
            else:
                no_changes.append(record)
                logger.info(f"No change needed: {key[0]} {key[1]}")

        deletes = [r for key, r in current.items() if key not in desired]
        for record in deletes:
            logger.info(f"Delete needed: {record['fqdn']} {record['type']}")

        changes = {
            "creates": creates,
            "updates": updates,
            "deletes": deletes,
            "no_changes": no_changes,
            "total_changes": len(creates) + len(updates) + len(deletes),
        }

        logger.info(
            f"Change analysis complete: {len(creates)} creates, {len(updates)} updates, "
            f"{len(deletes)} deletes, {len(no_changes)} no changes"
        )
        return changes

    def removal_changes(self, current_records: List[Dict], fqdn: str) -> Dict:
        """Changes that delete every record set of fqdn and the names below it."""
        deletes = [r for r in current_records if is_within(r["fqdn"], fqdn)]
        logger.info(f"Removal of {fqdn} deletes {len(deletes)} record sets")
        return {
            "creates": [],
            "updates": [],
            "deletes": deletes,
            "no_changes": [],
            "total_changes": len(deletes),
        }

    def _validate_domain_safety(self, desired_records: List[Dict], fqdn: str):
        """Refuse record sets that fall outside the registered domain."""
        for record in desired_records:
            if not is_within(record["fqdn"], fqdn):
                raise ValueError(f"FQDN '{record['fqdn']}' is not within domain '{fqdn}'")
