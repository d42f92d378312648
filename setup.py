#!/usr/bin/env python3
"""
SSDB Client Setup Script
========================
Allows installation of the ssdb-client package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # With test dependencies
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="ssdb-client",
    version="1.0.0",
    packages=find_packages(include=["ssdb_client", "ssdb_client.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
)
