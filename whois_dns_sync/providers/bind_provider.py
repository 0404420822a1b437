"""
BIND DNS provider implementation.

Reads record sets with zone transfers (falling back to plain queries) and
writes them with RFC 2136 dynamic updates, signed with TSIG when a key is
configured.
"""

import logging
import re
from typing import Dict, List, Optional

import dns.exception
import dns.message
import dns.name
import dns.query
import dns.rcode
import dns.rdatatype
import dns.resolver
import dns.tsigkeyring
import dns.update
import dns.zone

from .base_provider import MANAGED_RECORD_TYPES, DNSProvider
from ..utils.validators import is_within, sanitize_fqdn

logger = logging.getLogger(__name__)


class BINDProvider(DNSProvider):
    """BIND DNS provider implementation using dnspython library."""

    def __init__(self, config: Dict):
        """Initialize BIND provider."""
        self.config = config
        self.nameserver = config.get("nameserver", "127.0.0.1")
        self.port = config.get("port", 53)
        self.timeout = config.get("timeout", 30)
        self.key_file = config.get("key_file", "")
        self.key_name = config.get("key_name", "")

        self.resolver = dns.resolver.Resolver(configure=False)
        self.resolver.nameservers = [self.nameserver]
        self.resolver.port = self.port
        self.resolver.lifetime = self.timeout

        self.keyring = self._load_keyring()

        logger.info(
            f"BIND provider initialized for nameserver {self.nameserver}:{self.port}"
        )

    def _load_keyring(self):
        if not (self.key_file and self.key_name):
            return None

        try:
            with open(self.key_file, "r") as f:
                secret = parse_bind_key(f.read(), self.key_name)
        except OSError as e:
            logger.warning(f"Failed to load TSIG key: {e}")
            return None

        if not secret:
            logger.warning(
                f"Could not extract secret for key '{self.key_name}' from {self.key_file}"
            )
            return None

        logger.info(f"TSIG key loaded from {self.key_file}")
        return dns.tsigkeyring.from_text({self.key_name: secret})

    def get_records(self, zone: str, fqdn: str) -> List[Dict]:
        """Get the record sets of fqdn and of every name below it."""
        records = self._zone_transfer_records(zone, fqdn)
        if records is None:
            records = self._query_records(fqdn)

        logger.info(f"Retrieved {len(records)} record sets for {fqdn} from BIND")
        return records

    def _zone_transfer_records(self, zone: str, fqdn: str) -> Optional[List[Dict]]:
        try:
            zone_obj = dns.zone.from_xfr(
                dns.query.xfr(
                    self.nameserver, zone, port=self.port, keyring=self.keyring, relativize=False
                ),
                relativize=False,
            )
        except (dns.exception.DNSException, OSError) as e:
            logger.debug(f"Zone transfer not available for {zone}: {e}")
            return None

        records = []
        for name, node in zone_obj.nodes.items():
            name_text = sanitize_fqdn(name.derelativize(zone_obj.origin).to_text())
            if not is_within(name_text, fqdn):
                continue
            for rdataset in node.rdatasets:
                record_type = dns.rdatatype.to_text(rdataset.rdtype)
                if record_type in MANAGED_RECORD_TYPES:
                    records.append(_to_record(name_text, record_type, rdataset))
        return records

    def _query_records(self, fqdn: str) -> List[Dict]:
        qname = dns.name.from_text(fqdn)
        records = []
        for record_type in MANAGED_RECORD_TYPES:
            try:
                answer = self.resolver.resolve(qname, record_type)
            except dns.exception.DNSException as e:
                logger.debug(f"DNS query failed for {fqdn} ({record_type}): {e}")
                continue
            # Answers reached through a CNAME belong to the alias target
            if answer.rrset.name != qname:
                continue
            records.append(_to_record(sanitize_fqdn(fqdn), record_type, answer.rrset))
        return records

    def create_record(self, zone: str, record: Dict) -> bool:
        """Add a record set with a dynamic update."""
        update = self._update_message(zone)
        update.add(
            dns.name.from_text(record["fqdn"]),
            record.get("ttl", 300),
            record["type"],
            *record["values"],
        )
        self._send(update, "create", record)
        return True

    def update_record(self, zone: str, record: Dict) -> bool:
        """Replace a record set with a dynamic update."""
        update = self._update_message(zone)
        update.replace(
            dns.name.from_text(record["fqdn"]),
            record.get("ttl", 300),
            record["type"],
            *record["values"],
        )
        self._send(update, "update", record)
        return True

    def delete_record(self, zone: str, record: Dict) -> bool:
        """Delete a record set with a dynamic update."""
        update = self._update_message(zone)
        update.delete(dns.name.from_text(record["fqdn"]), record["type"])
        self._send(update, "delete", record)
        return True

    def _update_message(self, zone: str) -> dns.update.UpdateMessage:
        return dns.update.UpdateMessage(zone, keyring=self.keyring)

    def _send(self, update: dns.update.UpdateMessage, operation: str, record: Dict) -> None:
        try:
            response = dns.query.tcp(
                update, self.nameserver, port=self.port, timeout=self.timeout
            )
        except (dns.exception.DNSException, OSError) as e:
            logger.error(f"Failed to {operation} record {record['fqdn']}: {e}")
            raise

        if response.rcode() != dns.rcode.NOERROR:
            self._handle_dns_error(response, operation)

        logger.debug(f"{operation.capitalize()}d {record['type']} record {record['fqdn']}")

    def _handle_dns_error(self, response: dns.message.Message, operation: str) -> None:
        """Handle DNS error responses by logging and raising appropriate exceptions."""
        error_message = (
            f"DNS update failed with response code: {dns.rcode.to_text(response.rcode())}"
        )
        logger.error(error_message)
        raise RuntimeError(f"Failed to {operation} the record: {error_message}")


def parse_bind_key(key_content: str, key_name: str) -> Optional[str]:
    """Extract the secret of key_name from a BIND key file."""
    match = re.search(
        rf'key\s+"?{re.escape(key_name)}"?\s*{{(.*?)}};', key_content, re.DOTALL
    )
    if not match:
        return None

    secret_match = re.search(r'secret\s+"([^"]+)"', match.group(1))
    return secret_match.group(1) if secret_match else None


def _to_record(fqdn: str, record_type: str, rdataset) -> Dict:
    return {
        "fqdn": fqdn,
        "type": record_type,
        "ttl": rdataset.ttl,
        "values": sorted(rdata.to_text() for rdata in rdataset),
    }
