"""Repository pattern for database operations."""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models.base import AlertStatus
from .models import AlertModel, ClientModel

logger = logging.getLogger(__name__)

CONNECTED_STATUS = 'connected'


class ClientRepository:
    """Repository for client records."""

    def __init__(self, session: Session):
        """Initialize repository with database session."""
        self.session = session

    def upsert_client(
        self,
        name: str,
        customer_id: Optional[str] = None,
        refresh_token: Optional[str] = None,
        google_ads_status: str = CONNECTED_STATUS,
        monitoring_enabled: Optional[bool] = True,
        thresholds: Optional[Dict[str, Any]] = None,
        time_zone: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> ClientModel:
        """Insert or update a client, matched by id or else by customer id."""
        try:
            db_client = None
            if client_id:
                db_client = self.get_client(client_id)
            elif customer_id:
                db_client = self.get_by_customer_id(customer_id)

            if db_client:
                db_client.name = name
                db_client.customer_id = customer_id
                if refresh_token is not None:
                    db_client.refresh_token = refresh_token
                db_client.google_ads_status = google_ads_status
                db_client.monitoring_enabled = monitoring_enabled
                db_client.thresholds = thresholds or {}
                db_client.time_zone = time_zone
                db_client.updated_at = datetime.utcnow()
            else:
                db_client = ClientModel(
                    name=name,
                    customer_id=customer_id,
                    refresh_token=refresh_token,
                    google_ads_status=google_ads_status,
                    monitoring_enabled=monitoring_enabled,
                    thresholds=thresholds or {},
                    time_zone=time_zone,
                )
                if client_id:
                    db_client.id = client_id
                self.session.add(db_client)

            self.session.commit()
            return db_client

        except Exception as e:
            self.session.rollback()
            logger.error(f"Failed to upsert client {name}: {e}")
            raise

    def get_client(self, client_id: str) -> Optional[ClientModel]:
        """Get a client by ID."""
        return self.session.query(ClientModel).filter(ClientModel.id == client_id).first()

    def get_by_customer_id(self, customer_id: str) -> Optional[ClientModel]:
        """Get a client by its Google Ads customer ID."""
        return self.session.query(ClientModel).filter(
            ClientModel.customer_id == customer_id
        ).first()

    def list_clients(self) -> List[ClientModel]:
        """List all clients ordered by name."""
        return self.session.query(ClientModel).order_by(ClientModel.name).all()

    def list_monitorable(self) -> List[ClientModel]:
        """List connected clients that have what monitoring needs."""
        try:
            return self.session.query(ClientModel).filter(
                ClientModel.google_ads_status == CONNECTED_STATUS,
                ClientModel.customer_id.isnot(None),
                ClientModel.customer_id != '',
                ClientModel.refresh_token.isnot(None),
                ClientModel.refresh_token != '',
                or_(ClientModel.monitoring_enabled.is_(None), ClientModel.monitoring_enabled.is_(True)),
            ).order_by(ClientModel.name).all()
        except Exception as e:
            logger.error(f"Failed to list monitorable clients: {e}")
            raise

    def update_last_checked(self, client_id: str, timestamp: datetime) -> bool:
        """Record when a client was last checked."""
        try:
            db_client = self.get_client(client_id)
            if not db_client:
                return False
            db_client.last_checked_at = timestamp
            self.session.commit()
            return True
        except Exception as e:
            self.session.rollback()
            logger.error(f"Failed to update last checked time for {client_id}: {e}")
            raise

    def find(self, client_ref: str) -> Optional[ClientModel]:
        """Look up a client by id, falling back to its customer id."""
        return self.get_client(client_ref) or self.get_by_customer_id(client_ref.replace('-', ''))

    def set_refresh_token(self, client_ref: str, refresh_token: str) -> bool:
        """Store a refresh token and mark the client connected."""
        try:
            db_client = self.find(client_ref)
            if not db_client:
                return False
            db_client.refresh_token = refresh_token
            db_client.google_ads_status = CONNECTED_STATUS
            db_client.updated_at = datetime.utcnow()
            self.session.commit()
            return True
        except Exception as e:
            self.session.rollback()
            logger.error(f"Failed to store refresh token for {client_ref}: {e}")
            raise


class AlertRepository:
    """Repository for alert records."""

    def __init__(self, session: Session):
        """Initialize repository with database session."""
        self.session = session

    def find_by_fingerprint(self, client_id: str, fingerprint: str) -> Optional[AlertModel]:
        return self.session.query(AlertModel).filter(
            AlertModel.client_id == client_id,
            AlertModel.fingerprint == fingerprint,
        ).first()

    def add(self, alert: AlertModel) -> AlertModel:
        """Store a new alert. Constraint violations propagate to the caller."""
        try:
            self.session.add(alert)
            self.session.commit()
            return alert
        except Exception:
            self.session.rollback()
            raise

    def get(self, alert_id: str) -> Optional[AlertModel]:
        return self.session.query(AlertModel).filter(AlertModel.id == alert_id).first()

    def list_open(
        self,
        client_id: Optional[str] = None,
        channel: Optional[str] = None,
        check_id: Optional[str] = None,
        severities: Optional[Iterable[str]] = None,
    ) -> List[AlertModel]:
        """List open alerts, newest first."""
        query = self.session.query(AlertModel).filter(AlertModel.status == AlertStatus.OPEN.value)

        if client_id:
            query = query.filter(AlertModel.client_id == client_id)
        if channel:
            query = query.filter(AlertModel.channel == channel)
        if check_id:
            query = query.filter(AlertModel.check_id == check_id)
        if severities:
            query = query.filter(AlertModel.severity.in_(list(severities)))

        return query.order_by(AlertModel.detected_at.desc()).all()

    def resolve_open(self, client_id: str, channel: str, check_id: str, resolved_at: datetime) -> int:
        """Mark matching open alerts resolved and return how many changed."""
        try:
            alerts = self.list_open(client_id=client_id, channel=channel, check_id=check_id)
            for alert in alerts:
                alert.status = AlertStatus.RESOLVED.value
                alert.resolved_at = resolved_at
            self.session.commit()
            return len(alerts)
        except Exception as e:
            self.session.rollback()
            logger.error(f"Failed to resolve alerts for {check_id}: {e}")
            raise

    def set_status(self, alert_id: str, status: str, timestamp: datetime) -> bool:
        """Change an alert's status, stamping the matching timestamp."""
        try:
            alert = self.get(alert_id)
            if not alert:
                return False

            alert.status = status
            if status == AlertStatus.ACKNOWLEDGED.value:
                alert.acknowledged_at = timestamp
            elif status == AlertStatus.RESOLVED.value:
                alert.resolved_at = timestamp

            self.session.commit()
            return True
        except Exception as e:
            self.session.rollback()
            logger.error(f"Failed to update alert {alert_id}: {e}")
            raise
