"""
Orchestrators for Alerta Climática.

This module contains the worker pool and the lifecycle controller
that coordinate the flow between ports and adapters.
"""
from .processor import Processor
from .lifecycle import Lifecycle

__all__ = ["Processor", "Lifecycle"]
