"""
Sync configuration gathered from the workflow environment.

The environment is only read in this module, by SyncConfig.from_env and the
two helpers the CLI falls back on when the configuration cannot be built;
everything downstream receives the resulting object.
"""

import logging
import os
from enum import Enum
from typing import Mapping, Optional

from ..exceptions import DNSSyncError
from ..utils.file_utils import DEFAULT_RESULT_FILE
from .operations import AUTO

logger = logging.getLogger(__name__)

TRIGGER_MANUAL = "manual"
TRIGGER_PR_MERGE = "pr_merge"

DEFAULT_PR_FILES = "pr-files.json"
DEFAULT_MANUAL_TITLE = "Manual DNS Sync"


class LoadFailurePolicy(Enum):
    """What the manual trigger does when a WHOIS file cannot be loaded."""

    PROPAGATE = "propagate"
    FALLBACK_TO_BARE_DOMAIN = "fallback_to_bare_domain"


class UnknownOperationPolicy(Enum):
    """What happens to operation names the DNS record manager does not know."""

    PASSTHROUGH = "passthrough"
    REJECT = "reject"


def _env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def _env_str(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def trigger_type_from_env(environ: Optional[Mapping[str, str]] = None) -> str:
    """Trigger type implied by the raw environment."""
    env = os.environ if environ is None else environ
    if _env_str(env.get("MANUAL_DOMAIN")) or _env_str(env.get("MANUAL_OPERATION")):
        return TRIGGER_MANUAL
    return TRIGGER_PR_MERGE


def result_file_from_env(environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    return _env_str(env.get("DNS_SYNC_RESULT_FILE")) or DEFAULT_RESULT_FILE


class SyncConfig:
    """Everything a single sync run needs to know about its inputs."""

    def __init__(
        self,
        manual_domain: Optional[str] = None,
        manual_operation: Optional[str] = None,
        manual_whois_file: Optional[str] = None,
        force_sync: bool = False,
        whois_file_path: Optional[str] = None,
        pr_title: Optional[str] = None,
        pr_operation: str = AUTO,
        pr_files_path: str = DEFAULT_PR_FILES,
        actor: Optional[str] = None,
        result_file: str = DEFAULT_RESULT_FILE,
        workspace_root: Optional[str] = None,
        unknown_operation_policy: UnknownOperationPolicy = UnknownOperationPolicy.PASSTHROUGH,
    ):
        self.manual_domain = manual_domain
        self.manual_operation = manual_operation
        self.manual_whois_file = manual_whois_file
        self.force_sync = force_sync
        self.whois_file_path = whois_file_path
        self.pr_title = pr_title
        self.pr_operation = pr_operation or AUTO
        self.pr_files_path = pr_files_path
        self.actor = actor
        self.result_file = result_file
        self.workspace_root = workspace_root
        self.unknown_operation_policy = unknown_operation_policy

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SyncConfig":
        """Build the configuration from workflow environment variables."""
        env = os.environ if environ is None else environ

        policy_name = (env.get("UNKNOWN_OPERATION_POLICY") or "passthrough").strip().lower()
        try:
            unknown_operation_policy = UnknownOperationPolicy(policy_name)
        except ValueError:
            raise DNSSyncError(
                f"Invalid UNKNOWN_OPERATION_POLICY '{policy_name}', "
                f"expected one of: {', '.join(p.value for p in UnknownOperationPolicy)}"
            )

        config = cls(
            manual_domain=_env_str(env.get("MANUAL_DOMAIN")),
            manual_operation=_env_str(env.get("MANUAL_OPERATION")),
            manual_whois_file=_env_str(env.get("MANUAL_WHOIS_FILE")),
            force_sync=_env_flag(env.get("FORCE_SYNC")),
            whois_file_path=_env_str(env.get("WHOIS_FILE_PATH")),
            pr_title=_env_str(env.get("PR_TITLE")),
            pr_operation=_env_str(env.get("OPERATION")) or AUTO,
            pr_files_path=_env_str(env.get("PR_FILES_PATH")) or DEFAULT_PR_FILES,
            actor=_env_str(env.get("GITHUB_ACTOR")),
            result_file=result_file_from_env(env),
            workspace_root=_env_str(env.get("WORKSPACE_ROOT"))
            or _env_str(env.get("GITHUB_WORKSPACE")),
            unknown_operation_policy=unknown_operation_policy,
        )
        logger.debug(f"Sync configuration: {config}")
        return config

    @property
    def trigger_type(self) -> str:
        """Manual when a manual domain or operation was supplied, PR merge otherwise."""
        if self.manual_domain or self.manual_operation:
            return TRIGGER_MANUAL
        return TRIGGER_PR_MERGE

    @property
    def load_failure_policy(self) -> LoadFailurePolicy:
        if self.force_sync:
            return LoadFailurePolicy.FALLBACK_TO_BARE_DOMAIN
        return LoadFailurePolicy.PROPAGATE

    def __repr__(self) -> str:
        return (
            f"SyncConfig(trigger={self.trigger_type}, domain={self.manual_domain}, "
            f"operation={self.manual_operation}, whois_file={self.manual_whois_file}, "
            f"force_sync={self.force_sync}, whois_file_path={self.whois_file_path}, "
            f"pr_title={self.pr_title!r}, pr_operation={self.pr_operation})"
        )
