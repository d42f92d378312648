"""Network module for the SSDB client."""

from .connection import Connection

__all__ = ["Connection"]
