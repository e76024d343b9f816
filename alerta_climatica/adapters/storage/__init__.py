"""
Storage adapters for Alerta Climática hexagonal architecture.

This module contains storage adapters for persistence and durability,
including the SQLite-based alert log and zone table.
"""

from .sqlite_store import SQLiteAlertStore

__all__ = ["SQLiteAlertStore"]
