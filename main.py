#!/usr/bin/env python3
"""
WHOIS DNS Sync - Main Entry Point

This is the main entry point for the WHOIS DNS Sync.
It can be run directly or imported as a module.
"""

from whois_dns_sync.cli.main import main

if __name__ == "__main__":
    main()
