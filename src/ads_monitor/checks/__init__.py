"""Monitoring checks and their registry."""

from .base import CheckBase
from .register_checks import ALL_CHECKS, create_default_registry
from .registry import CheckRegistry

__all__ = ['CheckBase', 'CheckRegistry', 'ALL_CHECKS', 'create_default_registry']
