"""
Ports for Alerta Climática hexagonal architecture.

This module defines the protocols the core relies on for
external I/O, implemented by the adapters package.
"""

from .store import AlertStorePort

__all__ = ["AlertStorePort"]
