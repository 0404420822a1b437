"""
DNS Sync Handler - turns workflow inputs into a single DNS sync request

A run is triggered either manually (an operator supplies a domain and/or a
WHOIS file) or by a merged PR that touched exactly one WHOIS file. Either way
the handler resolves the WHOIS data, hands it to the DNS record manager and
persists the outcome to the result file, successful or not.
"""

import logging
from typing import Dict, Optional

from ..exceptions import (
    DNSSyncError,
    MissingManualInput,
    MissingTitle,
    UnknownOperation,
)
from ..parsers.changeset import STATUS_REMOVED, extract_whois_file, load_changed_files
from ..parsers.domain import parse_domain
from ..parsers.whois import WhoisFileLoader, build_whois_path
from ..utils.file_utils import FileSystem, LocalFileSystem, utc_timestamp, write_result_file
from .config import (
    DEFAULT_MANUAL_TITLE,
    TRIGGER_MANUAL,
    LoadFailurePolicy,
    SyncConfig,
    UnknownOperationPolicy,
)
from .operations import AUTO, is_known_operation, map_operation

logger = logging.getLogger(__name__)


class DNSSyncHandler:
    """Coordinates one sync run from workflow inputs to the persisted result."""

    def __init__(
        self,
        config: SyncConfig,
        dns_manager,
        filesystem: Optional[FileSystem] = None,
        loader: Optional[WhoisFileLoader] = None,
    ):
        """
        Args:
            config: Inputs of this run
            dns_manager: Object exposing handle_manual_sync and handle_pr_merge
            filesystem: Filesystem used for the change set and the result file
            loader: WHOIS file loader, built from config when omitted
        """
        self.config = config
        self.dns_manager = dns_manager
        self.filesystem = filesystem or LocalFileSystem()
        self.loader = loader or WhoisFileLoader(
            self.filesystem, workspace_root=config.workspace_root
        )

    def handle_sync(self) -> Dict:
        """
        Run the sync for the configured trigger.

        The result file is written before any error is re-raised, so the
        caller always finds a record of the run.
        """
        trigger_type = self.config.trigger_type
        logger.info(f"Starting DNS sync process for {trigger_type} trigger")

        try:
            if trigger_type == TRIGGER_MANUAL:
                result = self.handle_manual_trigger()
            else:
                result = self.handle_pr_merge()
        except Exception as e:
            logger.error(f"DNS sync process failed: {e}")
            self._write_result(
                {
                    "success": False,
                    "error": str(e) or e.__class__.__name__,
                    "timestamp": utc_timestamp(),
                    "triggerType": trigger_type,
                }
            )
            raise

        return self._write_result(result)

    def handle_manual_trigger(self) -> Dict:
        """Resolve manual inputs and dispatch a manual sync."""
        config = self.config
        domain = config.manual_domain
        operation = config.manual_operation or AUTO
        whois_file = config.manual_whois_file
        policy = config.load_failure_policy

        logger.info(f"Processing manual DNS sync trigger: {config}")

        if not domain and not whois_file:
            raise MissingManualInput(
                "Either MANUAL_DOMAIN or MANUAL_WHOIS_FILE must be provided for manual trigger"
            )

        whois_data = None

        if whois_file:
            whois_data = self._load_with_policy(
                build_whois_path(whois_file, config.whois_file_path), policy
            )
            if whois_data is not None:
                logger.info(f"Extracted domain from WHOIS file: {whois_data.get('domain')}")

        if domain and whois_data is None:
            whois_data = self._load_with_policy(
                build_whois_path(f"{domain}.json", config.whois_file_path), policy
            )

        if whois_data is None and domain:
            logger.info(f"Creating basic WHOIS data for domain: {domain}")
            whois_data = {**parse_domain(domain), "operation": operation}

        mapped_operation = self._map_operation(operation)
        logger.info(f"Mapped manual operation from {operation} to {mapped_operation}")

        return self.dns_manager.handle_manual_sync(
            config.pr_title or DEFAULT_MANUAL_TITLE,
            whois_data,
            {
                "operation": mapped_operation,
                "force_sync": config.force_sync,
                "triggered_by": config.actor or "unknown",
            },
        )

    def handle_pr_merge(self) -> Dict:
        """Resolve the WHOIS file changed by the merged PR and dispatch it."""
        config = self.config
        if not config.pr_title:
            raise MissingTitle("PR_TITLE environment variable is required")

        logger.info(f"Processing PR: {config.pr_title}")
        logger.info(f"WHOIS file path: {config.whois_file_path}")
        logger.info(f"Operation: {config.pr_operation}")

        files = load_changed_files(config.pr_files_path, self.filesystem)
        whois_file = extract_whois_file(files)
        logger.info(
            f"Found whois file: {whois_file['filename']} (status: {whois_file.get('status')})"
        )

        if whois_file.get("status") == STATUS_REMOVED:
            return self._handle_removal(whois_file["filename"])

        whois_data = self.loader.read_whois_file(
            build_whois_path(whois_file["filename"], config.whois_file_path)
        )

        if config.pr_operation != AUTO:
            whois_data["operation"] = self._map_operation(config.pr_operation)
            logger.info(
                f"Mapped operation from {config.pr_operation} to {whois_data['operation']}"
            )

        return self.dns_manager.handle_pr_merge(config.pr_title, whois_data)

    def _handle_removal(self, filename: str) -> Dict:
        # The file is gone from the working tree, so the filename is the source of truth.
        logger.info(f"Processing deletion for file: {filename}")
        parsed = parse_domain(filename)
        logger.info(f"Parsed domain: {parsed['domain']}, SLD: {parsed['sld']}")

        original_data = None
        if self.config.whois_file_path:
            original_data = self._read_original_data(filename, parsed)

        request = {**parsed, "operation": "delete"}
        if original_data is not None:
            request["original_data"] = original_data

        return self.dns_manager.handle_pr_merge(self.config.pr_title, request)

    def _read_original_data(self, filename: str, parsed: Dict) -> Optional[Dict]:
        path = build_whois_path(filename, self.config.whois_file_path)
        logger.info(f"Attempting to read extracted file content from: {path}")
        try:
            whois_data = self.loader.read_whois_file(path)
        except DNSSyncError as e:
            logger.warning(
                f"Failed to read extracted file content, proceeding with filename-based deletion: {e}"
            )
            return None

        if whois_data.get("domain") != parsed["domain"] or whois_data.get("sld") != parsed["sld"]:
            logger.warning(
                f"Extracted WHOIS data domain/sld mismatch: expected "
                f"{parsed['domain']}.{parsed['sld']}, got "
                f"{whois_data.get('domain')}.{whois_data.get('sld')}"
            )
        return whois_data

    def _load_with_policy(self, path: str, policy: LoadFailurePolicy) -> Optional[Dict]:
        logger.info(f"Reading WHOIS data from file: {path}")
        try:
            return self.loader.read_whois_file(path)
        except DNSSyncError as e:
            if policy is LoadFailurePolicy.FALLBACK_TO_BARE_DOMAIN:
                logger.warning(
                    f"Failed to read WHOIS file {path}, but continuing due to force sync: {e}"
                )
                return None
            raise

    def _map_operation(self, operation: str) -> str:
        mapped = map_operation(operation)
        if (
            self.config.unknown_operation_policy is UnknownOperationPolicy.REJECT
            and not is_known_operation(mapped)
        ):
            raise UnknownOperation(f"Unknown operation: {operation}")
        return mapped

    def _write_result(self, result: Dict) -> Dict:
        return write_result_file(result, self.config.result_file, self.filesystem)
