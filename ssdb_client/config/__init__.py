"""Configuration module for the SSDB client."""

from .settings import Settings, settings, setup_logging

__all__ = ["Settings", "settings", "setup_logging"]
