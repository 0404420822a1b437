"""
Behave environment configuration for WHOIS DNS sync scenarios.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def before_scenario(context, scenario):
    """Give each scenario its own workspace and a clean environment."""
    context.workspace = Path(tempfile.mkdtemp())
    context.original_cwd = os.getcwd()
    os.chdir(context.workspace)

    context.env = {"GITHUB_WORKSPACE": str(context.workspace)}
    context.provider_records = []
    context.error = None
    context.result = None

    logger.info(f"Starting scenario: {scenario.name}")


def after_scenario(context, scenario):
    """Clean up the scenario workspace."""
    os.chdir(context.original_cwd)
    try:
        shutil.rmtree(context.workspace)
    except OSError as e:
        logger.warning(f"Failed to cleanup workspace: {e}")

    logger.info(f"Completed scenario: {scenario.name}")
