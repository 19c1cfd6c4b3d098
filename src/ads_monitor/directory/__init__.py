"""Directories of monitored clients."""

from .base import ClientDirectory
from .database import DatabaseClientDirectory

__all__ = ['ClientDirectory', 'DatabaseClientDirectory']
