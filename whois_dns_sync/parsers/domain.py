"""
Domain parsing - splits a domain or WHOIS filename into domain and SLD.
"""

import logging
import re
from typing import Dict

from ..exceptions import InvalidDomainFormat

logger = logging.getLogger(__name__)

WHOIS_DIR = "whois"
WHOIS_SUFFIX = ".json"

_WHOIS_PREFIX_RE = re.compile(rf"^{WHOIS_DIR}/")
_WHOIS_SUFFIX_RE = re.compile(rf"{re.escape(WHOIS_SUFFIX)}$")


def clean_domain(value: str) -> str:
    """Strip a leading ``whois/`` directory and a trailing ``.json`` suffix."""
    return _WHOIS_SUFFIX_RE.sub("", _WHOIS_PREFIX_RE.sub("", value))


def parse_domain(value) -> Dict[str, str]:
    """
    Split a WHOIS filename or domain string into domain and SLD.

    The first label is the domain, everything after it is the SLD, so
    multi-level SLDs survive: ``whois/new-dns-example.no.kg.json`` gives
    ``{"domain": "new-dns-example", "sld": "no.kg"}``.

    Args:
        value: Domain string, optionally with ``whois/`` prefix and ``.json`` suffix

    Returns:
        Dictionary with ``domain`` and ``sld`` keys

    Raises:
        InvalidDomainFormat: value is empty, not a string, or has fewer than two labels
    """
    if not value or not isinstance(value, str):
        raise InvalidDomainFormat("Domain string is required and must be a string")

    cleaned = clean_domain(value)
    logger.info(f"Parsing domain from: {value} -> {cleaned}")

    labels = cleaned.split(".")
    if len(labels) < 2 or any(label == "" for label in labels):
        raise InvalidDomainFormat(
            f"Invalid domain format: {value}. Expected format: domain.sld"
        )

    return {"domain": labels[0], "sld": ".".join(labels[1:])}
