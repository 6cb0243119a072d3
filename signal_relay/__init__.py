"""Signaling relay for peer-to-peer call setup."""

from .connection import Connection
from .registry import Registry
from .router import Router

__all__ = ["Connection", "Registry", "Router"]
__version__ = "0.1.0"
