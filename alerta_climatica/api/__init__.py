"""
HTTP transport for Alerta Climática.
"""

from .app import create_app

__all__ = ["create_app"]
