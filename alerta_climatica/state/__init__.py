"""
Shared in-memory state for Alerta Climática.
"""

from .aggregator import Aggregator

__all__ = ["Aggregator"]
