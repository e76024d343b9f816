"""
Adapters for Alerta Climática hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .storage import SQLiteAlertStore

__all__ = ["SQLiteAlertStore"]
