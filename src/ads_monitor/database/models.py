"""SQLAlchemy database models for monitored clients and their alerts."""

import uuid

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, ForeignKey, Index, String, Text, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class ClientModel(Base):
    """A client account with its Google Ads connection."""
    __tablename__ = 'clients'

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    customer_id = Column(String(20))
    refresh_token = Column(Text)
    google_ads_status = Column(String(20), default='pending', nullable=False)
    # NULL counts as enabled
    monitoring_enabled = Column(Boolean, default=True)
    thresholds = Column(JSON, default=dict)
    time_zone = Column(String(64))
    last_checked_at = Column(DateTime)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    alerts = relationship("AlertModel", back_populates="client", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_clients_customer_id', 'customer_id'),
        Index('idx_clients_status', 'google_ads_status'),
    )


class AlertModel(Base):
    """A monitoring alert raised for a client."""
    __tablename__ = 'alerts'

    id = Column(String(36), primary_key=True, default=_new_id)
    client_id = Column(String(36), ForeignKey('clients.id', ondelete='CASCADE'), nullable=False)

    type = Column(String(50), nullable=False, default='fundamental')
    channel = Column(String(50), nullable=False)
    check_id = Column(String(100), nullable=False)

    severity = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default='open')

    title = Column(String(255), nullable=False)
    short_description = Column(Text)
    impact = Column(Text)
    suggested_actions = Column(JSON, default=list)
    details = Column(JSON, default=dict)

    fingerprint = Column(String(255), nullable=False)

    detected_at = Column(DateTime, default=func.now())
    acknowledged_at = Column(DateTime)
    resolved_at = Column(DateTime)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    client = relationship("ClientModel", back_populates="alerts")

    __table_args__ = (
        UniqueConstraint('client_id', 'fingerprint', name='uq_alerts_client_fingerprint'),
        Index('idx_alerts_client_status', 'client_id', 'status'),
        Index('idx_alerts_channel', 'channel'),
        Index('idx_alerts_severity', 'severity'),
        Index('idx_alerts_detected_at', 'detected_at'),
        Index('idx_alerts_client_channel_status', 'client_id', 'channel', 'status'),
    )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'client_id': self.client_id,
            'type': self.type,
            'channel': self.channel,
            'check_id': self.check_id,
            'severity': self.severity,
            'status': self.status,
            'title': self.title,
            'short_description': self.short_description,
            'impact': self.impact,
            'suggested_actions': list(self.suggested_actions or []),
            'details': dict(self.details or {}),
            'fingerprint': self.fingerprint,
            'detected_at': self.detected_at.isoformat() if self.detected_at else None,
            'acknowledged_at': self.acknowledged_at.isoformat() if self.acknowledged_at else None,
            'resolved_at': self.resolved_at.isoformat() if self.resolved_at else None,
        }
