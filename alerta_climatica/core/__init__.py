"""
Core domain models and pure functions for Alerta Climática.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import Alert, IncomingMessage, Zone, Severity, ZoneColor
from .classify import classify
from .escalation import escalate, SEVERITY_ORDER

__all__ = ["Alert", "IncomingMessage", "Zone", "Severity", "ZoneColor", "classify", "escalate", "SEVERITY_ORDER"]
