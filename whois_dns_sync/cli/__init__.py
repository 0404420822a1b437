"""
Command-line interface components.

This package contains the entry point used by the sync workflow.
"""

from .main import main

__all__ = ["main"]
