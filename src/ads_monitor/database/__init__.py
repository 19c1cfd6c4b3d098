"""Database models and connection management."""

from .connection import DatabaseConnection
from .models import AlertModel, Base, ClientModel
from .repository import AlertRepository, ClientRepository

__all__ = [
    'Base',
    'AlertModel',
    'ClientModel',
    'DatabaseConnection',
    'AlertRepository',
    'ClientRepository',
]
