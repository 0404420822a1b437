"""
Operation names shared by the workflow and the DNS record manager.
"""

from typing import Dict

AUTO = "auto"
REGISTRATION = "registration"
UPDATE = "update"
REMOVE = "remove"

OPERATION_MAP: Dict[str, str] = {
    "add": REGISTRATION,
    "update": UPDATE,
    "delete": REMOVE,
    "registration": REGISTRATION,
    "remove": REMOVE,
}

KNOWN_OPERATIONS = frozenset([AUTO, REGISTRATION, UPDATE, REMOVE])


def map_operation(operation: str) -> str:
    """Translate a workflow operation name; unknown names pass through unchanged."""
    return OPERATION_MAP.get(operation, operation)


def is_known_operation(operation: str) -> bool:
    """Check if a mapped operation is understood by the DNS record manager."""
    return operation in KNOWN_OPERATIONS
