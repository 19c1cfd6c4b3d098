"""Database helpers shared by CLI commands."""

from typing import Dict

from ...database.connection import DatabaseConnection
from .config import get_database_url


def open_database(config: Dict[str, Dict[str, str]]) -> DatabaseConnection:
    """Connect to the configured database and make sure the tables exist."""
    connection = DatabaseConnection(get_database_url(config))
    connection.create_tables()
    return connection
