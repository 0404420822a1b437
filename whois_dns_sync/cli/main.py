#!/usr/bin/env python3
"""
WHOIS DNS Sync - Command Line Interface

Entry point run by the sync workflow. Sync inputs come from environment
variables, provider settings from a YAML configuration file.
"""

import argparse
import logging
import sys
from typing import Dict, Optional

import yaml

from ..core.config import SyncConfig, result_file_from_env, trigger_type_from_env
from ..core.dns_manager import DNSRecordManager
from ..core.sync_handler import DNSSyncHandler
from ..utils.file_utils import utc_timestamp, write_result_file

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="WHOIS DNS Sync - apply WHOIS file changes to DNS"
    )

    parser.add_argument(
        "--config",
        "-c",
        default="configs/config.yaml",
        help="Configuration file path (default: configs/config.yaml)",
    )

    parser.add_argument(
        "--result-file",
        "-o",
        help="Where to write the sync result (default: $DNS_SYNC_RESULT_FILE or dns-sync-result.json)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be changed without making changes",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except yaml.YAMLError as e:
        config_logger({}, verbose=args.verbose)
        print(f"Error parsing config file: {e}")
        record_setup_failure(e, None, args.result_file)
        sys.exit(1)
    config_logger(config, verbose=args.verbose)

    sync_config = None
    try:
        sync_config = SyncConfig.from_env()
        if args.result_file:
            sync_config.result_file = args.result_file
        dns_manager = DNSRecordManager(config, dry_run=args.dry_run)
    except Exception as e:
        print(f"Error: {e}")
        record_setup_failure(e, sync_config, args.result_file)
        sys.exit(1)

    try:
        result = DNSSyncHandler(sync_config, dns_manager).handle_sync()
    except Exception as e:
        print(f"DNS sync failed: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    logger.info(f"DNS sync completed successfully: {result}")
    print("DNS sync completed successfully")
    sys.exit(0)


def record_setup_failure(
    error: Exception, sync_config: Optional[SyncConfig], result_file: Optional[str]
) -> Dict:
    """Write the failure result for a run that never reached the sync handler."""
    logger.error(f"DNS sync setup failed: {error}")
    if sync_config is not None:
        trigger_type = sync_config.trigger_type
        result_file = sync_config.result_file
    else:
        trigger_type = trigger_type_from_env()
        result_file = result_file or result_file_from_env()

    return write_result_file(
        {
            "success": False,
            "error": str(error) or error.__class__.__name__,
            "timestamp": utc_timestamp(),
            "triggerType": trigger_type,
        },
        result_file,
    )


def load_config(config_path: str) -> Dict:
    """Load configuration from YAML file."""
    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Configuration loaded from {config_path}")
        return config
    except FileNotFoundError:
        logger.warning(f"Config file {config_path} not found, using defaults")
        return get_default_config()


def get_default_config() -> Dict:
    """Return default configuration."""
    return {
        "dns_providers": {"mock": {}},
        "default_provider": "mock",
        "logging": {"level": "INFO"},
    }


def config_logger(config: Dict, verbose: bool = False):
    """Configure logging."""
    logging_config = config.get("logging") or {}
    log_level = "DEBUG" if verbose else logging_config.get("level", "INFO")
    handlers = [logging.StreamHandler(sys.stdout)]

    log_file = logging_config.get("file")
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


if __name__ == "__main__":
    main()
