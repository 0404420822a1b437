"""
DNS Client - Unified interface for DNS provider APIs

Selects the provider named by ``default_provider`` in the configuration,
currently BIND or the in-memory mock.
"""

import logging
from typing import Dict, List

from .base_provider import DNSProvider
from .bind_provider import BINDProvider
from .mock_provider import MockDNSProvider

logger = logging.getLogger(__name__)

PROVIDERS = {
    "bind": BINDProvider,
    "mock": MockDNSProvider,
}


class DNSClient:
    """Unified DNS client that supports multiple providers."""

    def __init__(self, config: Dict):
        """Initialize DNS client with configuration."""
        self.config = config
        self.provider = self._get_provider()

    def _get_provider(self) -> DNSProvider:
        """Get DNS provider based on configuration."""
        provider_name = self.config.get("default_provider", "mock")
        provider_config = self.config.get("dns_providers", {}).get(provider_name) or {}

        provider_class = PROVIDERS.get(provider_name)
        if provider_class is None:
            logger.warning(f"Unknown provider '{provider_name}', using mock provider")
            return MockDNSProvider()

        logger.info(f"Using DNS provider: {provider_name}")
        return provider_class(provider_config)

    def get_records(self, zone: str, fqdn: str) -> List[Dict]:
        return self.provider.get_records(zone, fqdn)

    def create_record(self, zone: str, record: Dict) -> bool:
        return self.provider.create_record(zone, record)

    def update_record(self, zone: str, record: Dict) -> bool:
        return self.provider.update_record(zone, record)

    def delete_record(self, zone: str, record: Dict) -> bool:
        return self.provider.delete_record(zone, record)
