"""Client directory backed by the SQL database."""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from pydantic import ValidationError

from ..database.connection import DatabaseConnection
from ..database.models import ClientModel
from ..database.repository import CONNECTED_STATUS, ClientRepository
from ..models.tenants import AppCredentials, MonitoringThresholds, TenantConfig
from .base import ClientDirectory

logger = logging.getLogger(__name__)


class DatabaseClientDirectory(ClientDirectory):
    """Builds tenant configurations from stored client records."""

    def __init__(self, connection: DatabaseConnection, app_credentials: AppCredentials):
        self.connection = connection
        self.app_credentials = app_credentials
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def list_active_tenants(self) -> List[TenantConfig]:
        with self.connection.get_session() as session:
            clients = ClientRepository(session).list_monitorable()
            tenants = [self._to_tenant(client) for client in clients]

        self.logger.info(f"Found {len(tenants)} clients with Google Ads monitoring enabled")
        return tenants

    def update_last_checked(self, tenant_id: str, timestamp: datetime) -> None:
        with self.connection.get_session() as session:
            if not ClientRepository(session).update_last_checked(tenant_id, timestamp):
                self.logger.warning(f"Client {tenant_id} not found while updating last checked time")

    def upsert_client(
        self,
        name: str,
        customer_id: Optional[str] = None,
        refresh_token: Optional[str] = None,
        status: str = CONNECTED_STATUS,
        monitoring_enabled: Optional[bool] = True,
        thresholds: Optional[Dict[str, Any]] = None,
        time_zone: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> str:
        """Create or update a client record and return its id."""
        if thresholds:
            # Validate overrides before storing them
            thresholds = MonitoringThresholds(**thresholds).model_dump(exclude_none=True)

        with self.connection.get_session() as session:
            client = ClientRepository(session).upsert_client(
                name=name,
                customer_id=customer_id.replace('-', '') if customer_id else customer_id,
                refresh_token=refresh_token,
                google_ads_status=status,
                monitoring_enabled=monitoring_enabled,
                thresholds=thresholds,
                time_zone=time_zone,
                client_id=client_id,
            )
            self.logger.info(f"Stored client {name} ({client.id})")
            return client.id

    def list_clients(self) -> List[Dict[str, Any]]:
        """All client records without secrets."""
        with self.connection.get_session() as session:
            return [
                {
                    'id': client.id,
                    'name': client.name,
                    'customer_id': client.customer_id,
                    'status': client.google_ads_status,
                    'monitoring_enabled': client.monitoring_enabled is not False,
                    'has_refresh_token': bool(client.refresh_token),
                    'time_zone': client.time_zone,
                    'last_checked_at': client.last_checked_at,
                }
                for client in ClientRepository(session).list_clients()
            ]

    def get_tenant(self, client_ref: str) -> Optional[TenantConfig]:
        """Look up one client by id or customer id, ignoring the monitoring filters.

        Returns None when the client does not exist or has no Google Ads connection data.
        """
        with self.connection.get_session() as session:
            client = ClientRepository(session).find(client_ref)
            if not client or not client.customer_id or not client.refresh_token:
                return None
            return self._to_tenant(client)

    def store_refresh_token(self, client_ref: str, refresh_token: str) -> bool:
        """Attach a newly granted refresh token and mark the client connected."""
        with self.connection.get_session() as session:
            stored = ClientRepository(session).set_refresh_token(client_ref, refresh_token)

        if stored:
            self.logger.info(f"Stored refresh token for client {client_ref}")
        return stored

    def _to_tenant(self, client: ClientModel) -> TenantConfig:
        try:
            thresholds = MonitoringThresholds(**(client.thresholds or {}))
        except ValidationError as e:
            self.logger.warning(f"Ignoring invalid thresholds for client {client.name}: {e}")
            thresholds = MonitoringThresholds()

        return TenantConfig(
            tenant_id=client.id,
            tenant_name=client.name,
            account_id=client.customer_id,
            credentials=self.app_credentials.for_refresh_token(client.refresh_token),
            thresholds=thresholds,
            time_zone=client.time_zone,
            last_checked_at=client.last_checked_at,
        )
