"""
Exceptions raised while reconciling WHOIS descriptors with DNS.

Every error carries a human readable message; that message is what ends up
in the ``error`` field of the persisted sync result.
"""

from typing import List


class DNSSyncError(Exception):
    """Base class for all WHOIS DNS sync errors."""


class InvalidDomainFormat(DNSSyncError, ValueError):
    """Domain string could not be split into domain and SLD."""


class DescriptorNotFound(DNSSyncError):
    """No candidate location held the requested WHOIS file."""

    def __init__(self, logical_path: str, attempted_paths: List[str]):
        self.logical_path = logical_path
        self.attempted_paths = list(attempted_paths)
        super().__init__(
            f"Whois file not found at any path: {logical_path} "
            f"(tried: {', '.join(self.attempted_paths)})"
        )


class DescriptorMalformed(DNSSyncError, ValueError):
    """WHOIS file exists but is not a JSON object."""


class DescriptorReadFailed(DNSSyncError):
    """WHOIS file exists but could not be read."""


class ChangeSetReadFailed(DNSSyncError):
    """The PR changed-file list could not be read or parsed."""


class NoDescriptorFound(DNSSyncError, LookupError):
    """Change set holds no WHOIS file."""


class AmbiguousDescriptor(DNSSyncError, LookupError):
    """Change set holds more than one WHOIS file."""

    def __init__(self, message: str, filenames: List[str]):
        self.filenames = list(filenames)
        super().__init__(f"{message}: {', '.join(self.filenames)}")


class MissingManualInput(DNSSyncError, ValueError):
    """Manual trigger without a domain or a WHOIS file."""


class MissingTitle(DNSSyncError, ValueError):
    """PR merge trigger without a PR title."""


class UnknownOperation(DNSSyncError, ValueError):
    """Operation name rejected by the unknown operation policy."""


class DNSOperationError(DNSSyncError, RuntimeError):
    """DNS record manager refused or failed to apply a sync request."""
