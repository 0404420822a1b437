#!/usr/bin/env python3
"""
Setup script for WHOIS DNS Sync package.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="whois-dns-sync",
    version="1.0.0",
    author="WHOIS DNS Sync Team",
    author_email="team@example.com",
    description="Sync DNS records from WHOIS descriptor files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/example/whois-dns-sync",
    packages=find_packages(include=["whois_dns_sync", "whois_dns_sync.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Internet :: Name Service (DNS)",
        "Topic :: System :: Systems Administration",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        "test": ["pytest", "behave"],
    },
    entry_points={
        "console_scripts": [
            "whois-dns-sync=whois_dns_sync.cli.main:main",
        ],
    },
)
