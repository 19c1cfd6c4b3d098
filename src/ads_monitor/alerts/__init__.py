"""Alert storage and lifecycle."""

from .base import AlertEngine
from .engine import DatabaseAlertEngine, alert_fingerprint

__all__ = ['AlertEngine', 'DatabaseAlertEngine', 'alert_fingerprint']
