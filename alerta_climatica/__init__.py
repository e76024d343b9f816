"""
Alerta Climática.

Ingests simulated field reports, classifies them against hazard patterns
and keeps a per-zone severity status for the operations dashboard.
"""

__version__ = "0.3.0"
