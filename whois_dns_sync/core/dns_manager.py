#!/usr/bin/env python3
"""
DNS Record Manager - applies WHOIS sync requests to a DNS provider

Receives the WHOIS data resolved by the sync handler, works out which record
sets of the domain must be created, updated or deleted, and applies them
through the configured DNS provider.
"""

import logging
from typing import Dict, List, Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ..exceptions import DNSOperationError
from ..providers.dns_client import DNSClient
from ..utils.validators import validate_fqdn
from .config import TRIGGER_MANUAL, TRIGGER_PR_MERGE
from .operations import AUTO, REGISTRATION, REMOVE, UPDATE, map_operation
from .record_manager import RecordManager

console = Console()
logger = logging.getLogger(__name__)


class DNSRecordManager:
    """Applies manual and PR merge sync requests to DNS."""

    def __init__(self, config: Optional[Dict] = None, dry_run: bool = False):
        """Initialize the record manager with provider configuration."""
        self.config = config or {}
        self.dry_run = dry_run or bool(self.config.get("dry_run", False))
        self.dns_client = DNSClient(self.config)
        self.record_manager = RecordManager(self.dns_client)

    def handle_manual_sync(
        self, title: str, whois_data: Optional[Dict], options: Dict
    ) -> Dict:
        """
        Apply a manually triggered sync.

        Args:
            title: Title recorded in the result
            whois_data: WHOIS data, None when nothing could be loaded
            options: ``operation``, ``force_sync`` and ``triggered_by``

        Returns:
            Sync result
        """
        if not whois_data:
            raise DNSOperationError("No WHOIS data available for manual sync")

        operation = options.get("operation") or AUTO
        if operation == AUTO:
            operation = map_operation(whois_data.get("operation") or AUTO)

        result = self._sync(
            title,
            whois_data,
            operation,
            force_sync=bool(options.get("force_sync")),
            trigger_type=TRIGGER_MANUAL,
        )
        result["forceSync"] = bool(options.get("force_sync"))
        result["triggeredBy"] = options.get("triggered_by", "unknown")
        return result

    def handle_pr_merge(self, title: str, whois_data: Dict) -> Dict:
        """
        Apply the WHOIS file changed by a merged PR.

        Args:
            title: PR title
            whois_data: Loaded WHOIS file, or domain, sld and ``operation: delete``
                for a removed file

        Returns:
            Sync result
        """
        if not whois_data:
            raise DNSOperationError("No WHOIS data available for PR merge")

        operation = map_operation(whois_data.get("operation") or AUTO)
        result = self._sync(
            title, whois_data, operation, force_sync=False, trigger_type=TRIGGER_PR_MERGE
        )
        if whois_data.get("original_data") is not None:
            result["originalData"] = whois_data["original_data"]
        return result

    def _sync(
        self,
        title: str,
        whois_data: Dict,
        operation: str,
        force_sync: bool,
        trigger_type: str,
    ) -> Dict:
        domain = whois_data.get("domain")
        sld = whois_data.get("sld")
        if not domain or not sld:
            raise DNSOperationError("WHOIS data must contain 'domain' and 'sld'")

        fqdn = f"{domain}.{sld}"
        if not validate_fqdn(fqdn):
            raise DNSOperationError(f"Invalid domain name: {fqdn}")

        if operation not in (AUTO, REGISTRATION, UPDATE, REMOVE):
            raise DNSOperationError(f"Unsupported operation '{operation}' for {fqdn}")

        zone = self.config.get("zones", {}).get(sld, sld)
        logger.info(f"Syncing {fqdn} in zone {zone} (operation: {operation}, title: {title})")

        current_records = self.dns_client.get_records(zone, fqdn)

        if operation == REMOVE:
            changes = self.record_manager.removal_changes(current_records, fqdn)
            if not changes["deletes"]:
                logger.warning(f"No DNS records found for {fqdn}, nothing to remove")
        else:
            self._check_registration_state(operation, fqdn, current_records, force_sync)
            desired_records = self.record_manager.build_desired_records(whois_data, fqdn)
            changes = self.record_manager.analyze_changes(
                current_records, desired_records, fqdn
            )

        self._display_changes_summary(fqdn, changes)

        if self.dry_run:
            console.print("[yellow]DRY RUN MODE - No changes will be applied[/yellow]")
        elif changes["total_changes"] > 0:
            self._apply_changes(changes, zone)
        else:
            console.print("[green]No changes required - DNS records are up to date[/green]")

        return {
            "success": True,
            "triggerType": trigger_type,
            "title": title,
            "operation": operation,
            "domain": domain,
            "sld": sld,
            "fqdn": fqdn,
            "zone": zone,
            "dryRun": self.dry_run,
            "changes": {
                "created": _describe(changes["creates"]),
                "updated": _describe(changes["updates"]),
                "deleted": _describe(changes["deletes"]),
                "unchanged": _describe(changes["no_changes"]),
                "total": changes["total_changes"],
            },
        }

    def _check_registration_state(
        self, operation: str, fqdn: str, current_records: List[Dict], force_sync: bool
    ):
        if force_sync:
            return
        if operation == REGISTRATION and current_records:
            raise DNSOperationError(
                f"Domain {fqdn} already has DNS records; use update or force sync"
            )
        if operation == UPDATE and not current_records:
            raise DNSOperationError(
                f"Domain {fqdn} has no DNS records to update; use registration or force sync"
            )

    def _display_changes_summary(self, fqdn: str, changes: Dict):
        """Display a summary of planned changes."""
        table = Table(title=f"DNS Changes Summary for {fqdn}")
        table.add_column("Operation", style="cyan")
        table.add_column("Count", style="magenta")
        table.add_column("Details", style="white")

        for label, key in (
            ("Create", "creates"),
            ("Update", "updates"),
            ("Delete", "deletes"),
            ("No Change", "no_changes"),
        ):
            if changes[key]:
                table.add_row(label, str(len(changes[key])), ", ".join(_describe(changes[key])))

        console.print(table)
        console.print(f"\n[bold]Total changes: {changes['total_changes']}[/bold]")

    def _apply_changes(self, changes: Dict, zone: str):
        """Apply DNS changes, raising once every change has been attempted."""
        failures = []
        actions = (
            [(self.dns_client.create_record, "create", r) for r in changes["creates"]]
            + [(self.dns_client.update_record, "update", r) for r in changes["updates"]]
            + [(self.dns_client.delete_record, "delete", r) for r in changes["deletes"]]
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Applying DNS changes...", total=len(actions))

            for apply, verb, record in actions:
                try:
                    apply(zone, record)
                    logger.info(f"Applied {verb}: {record['fqdn']} {record['type']}")
                except Exception as e:
                    logger.error(f"Failed to {verb} record {record['fqdn']} {record['type']}: {e}")
                    failures.append(f"{verb} {record['fqdn']} {record['type']}: {e}")
                progress.update(task, advance=1)

        console.print(
            f"[blue]Successfully applied {len(actions) - len(failures)}/{len(actions)} changes[/blue]"
        )
        if failures:
            raise DNSOperationError(f"Some DNS changes failed to apply: {'; '.join(failures)}")


def _describe(records: List[Dict]) -> List[str]:
    return [f"{r['fqdn']} {r['type']}" for r in records]
