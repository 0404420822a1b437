"""
Validators - Input validation for DNS records declared in WHOIS files

This module checks names and record values before they reach a DNS provider.
"""

import ipaddress
import logging
import re

logger = logging.getLogger(__name__)

_LABEL_RE = re.compile(r"^[a-zA-Z0-9_]([a-zA-Z0-9-]*[a-zA-Z0-9])?$")
_MX_RE = re.compile(r"^\d{1,5}\s+\S+$")


def validate_fqdn(fqdn: str) -> bool:
    """
    Validate Fully Qualified Domain Name (FQDN).

    Args:
        fqdn: The FQDN to validate, without trailing dot

    Returns:
        True if valid, False otherwise
    """
    if not fqdn or not isinstance(fqdn, str):
        return False

    if fqdn.endswith("."):
        logger.warning(f"FQDN ends with dot: {fqdn}")
        return False

    if len(fqdn) > 253:
        logger.warning(f"FQDN too long: {fqdn}")
        return False

    labels = fqdn.split(".")
    if len(labels) < 2:
        logger.warning(f"FQDN must have at least 2 labels: {fqdn}")
        return False

    for label in labels:
        if len(label) > 63 or not _LABEL_RE.match(label):
            logger.warning(f"Invalid label '{label}' in FQDN: {fqdn}")
            return False

    return True


def validate_ipv4(ipv4: str) -> bool:
    """Validate IPv4 address."""
    if not ipv4 or not isinstance(ipv4, str):
        return False

    try:
        ipaddress.IPv4Address(ipv4.strip())
        return True
    except ipaddress.AddressValueError:
        logger.warning(f"Invalid IPv4 address: {ipv4}")
        return False


def validate_ipv6(ipv6: str) -> bool:
    """Validate IPv6 address."""
    if not ipv6 or not isinstance(ipv6, str):
        return False

    try:
        ipaddress.IPv6Address(ipv6.strip())
        return True
    except ipaddress.AddressValueError:
        logger.warning(f"Invalid IPv6 address: {ipv6}")
        return False


def validate_record_value(record_type: str, value: str) -> bool:
    """
    Validate a record value against its type.

    Args:
        record_type: One of A, AAAA, CNAME, NS, MX, TXT
        value: Presentation format value as written in the WHOIS file

    Returns:
        True if valid, False otherwise
    """
    if not isinstance(value, str) or not value.strip():
        return False

    if record_type == "A":
        return validate_ipv4(value)
    if record_type == "AAAA":
        return validate_ipv6(value)
    if record_type in ("CNAME", "NS"):
        return validate_fqdn(sanitize_fqdn(value))
    if record_type == "MX":
        if not _MX_RE.match(value.strip()):
            logger.warning(f"Invalid MX value, expected '<priority> <host>': {value}")
            return False
        return validate_fqdn(sanitize_fqdn(value.split()[1]))
    if record_type == "TXT":
        return len(value) <= 255

    logger.warning(f"Unsupported record type: {record_type}")
    return False


def sanitize_fqdn(fqdn: str) -> str:
    """
    Normalize FQDN for comparison: trimmed, lowercase, no trailing dot.

    Args:
        fqdn: The FQDN to sanitize

    Returns:
        Sanitized FQDN
    """
    if not fqdn:
        return fqdn

    return fqdn.strip().strip(".").lower()


def is_within(fqdn: str, parent: str) -> bool:
    """Check if fqdn equals parent or is a name below it."""
    fqdn = sanitize_fqdn(fqdn)
    parent = sanitize_fqdn(parent)
    return fqdn == parent or fqdn.endswith(f".{parent}")
