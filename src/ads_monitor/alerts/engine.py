"""Alert engine backed by the SQL database."""

import asyncio
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional
import logging

from sqlalchemy.exc import IntegrityError

from ..database.connection import DatabaseConnection
from ..database.models import AlertModel
from ..database.repository import AlertRepository
from ..models.base import AlertStatus, Platform, Severity
from ..models.checks import AlertOutcome, CheckResult
from .base import AlertEngine

ALERT_TYPE = 'fundamental'
SUMMARY_SEVERITIES = (Severity.CRITICAL.value, Severity.HIGH.value)
SUMMARY_ITEMS_PER_PLATFORM = 3


def alert_fingerprint(check_id: str, day: date) -> str:
    """Deduplication key of an alert within one client."""
    return f"{check_id}:{day.isoformat()}"


class DatabaseAlertEngine(AlertEngine):
    """Alert engine that deduplicates on (client, check, day).

    Session work for the async operations runs in a worker thread, off the
    event loop.
    """

    def __init__(
        self,
        connection: DatabaseConnection,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.connection = connection
        self.clock = clock
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def create_alert_from_check_result(
        self,
        tenant_id: str,
        tenant_name: str,
        platform: Platform,
        result: CheckResult,
    ) -> AlertOutcome:
        return await asyncio.to_thread(self._create_alert, tenant_id, tenant_name, platform, result)

    async def auto_resolve_if_fixed(self, tenant_id: str, platform: Platform, check_id: str) -> int:
        return await asyncio.to_thread(self._resolve_open, tenant_id, platform, check_id)

    def _create_alert(
        self,
        tenant_id: str,
        tenant_name: str,
        platform: Platform,
        result: CheckResult,
    ) -> AlertOutcome:
        if result.alert_data is None:
            return AlertOutcome(success=True, skipped=True, reason='duplicate')

        now = self.clock()
        fingerprint = alert_fingerprint(result.check_id, now.date())
        alert_data = result.alert_data

        try:
            with self.connection.get_session() as session:
                repo = AlertRepository(session)

                existing = repo.find_by_fingerprint(tenant_id, fingerprint)
                if existing:
                    reason = 'already_open' if existing.status == AlertStatus.OPEN.value else 'duplicate'
                    self.logger.debug(f"Alert {fingerprint} for {tenant_name} exists ({reason})")
                    return AlertOutcome(success=True, skipped=True, alert_id=existing.id, reason=reason)

                alert = AlertModel(
                    client_id=tenant_id,
                    type=ALERT_TYPE,
                    channel=platform.value,
                    check_id=result.check_id,
                    severity=alert_data.severity.value,
                    status=AlertStatus.OPEN.value,
                    title=alert_data.title,
                    short_description=alert_data.short_description,
                    impact=alert_data.impact,
                    suggested_actions=list(alert_data.suggested_actions),
                    details={
                        **result.details,
                        **alert_data.details,
                        'client_name': tenant_name,
                        'check_count': result.count,
                    },
                    fingerprint=fingerprint,
                    detected_at=now,
                )

                try:
                    repo.add(alert)
                except IntegrityError:
                    self.logger.debug(f"Alert {fingerprint} for {tenant_name} already exists (constraint)")
                    return AlertOutcome(success=True, skipped=True, reason='duplicate')

                self.logger.info(
                    f"Created alert {alert.id} for {tenant_name}: {alert_data.title} ({alert_data.severity.value})"
                )
                return AlertOutcome(success=True, alert_id=alert.id)

        except Exception as e:
            self.logger.error(f"Failed to create alert {fingerprint} for {tenant_name}: {e}")
            return AlertOutcome(success=False, error=str(e))

    def _resolve_open(self, tenant_id: str, platform: Platform, check_id: str) -> int:
        try:
            with self.connection.get_session() as session:
                resolved = AlertRepository(session).resolve_open(
                    tenant_id, platform.value, check_id, self.clock()
                )
        except Exception as e:
            self.logger.error(f"Failed to auto-resolve alerts for {check_id}: {e}")
            return 0

        if resolved:
            self.logger.info(f"Auto-resolved {resolved} alert(s) for {check_id} (client {tenant_id})")
        return resolved

    def get_open_alerts(
        self,
        tenant_id: Optional[str] = None,
        platform: Optional[Platform] = None,
    ) -> List[Dict[str, Any]]:
        """Open alerts, newest first."""
        with self.connection.get_session() as session:
            alerts = AlertRepository(session).list_open(
                client_id=tenant_id,
                channel=platform.value if platform else None,
            )
            return [alert.to_dict() for alert in alerts]

    def get_alert_summary(self, tenant_id: Optional[str] = None) -> Dict[str, Any]:
        """Open high and critical alerts grouped by platform."""
        with self.connection.get_session() as session:
            alerts = AlertRepository(session).list_open(
                client_id=tenant_id,
                severities=SUMMARY_SEVERITIES,
            )

            by_platform: Dict[str, Dict[str, Any]] = {}
            for alert in alerts:
                group = by_platform.setdefault(alert.channel, {'count': 0, 'items': []})
                group['count'] += 1
                if len(group['items']) < SUMMARY_ITEMS_PER_PLATFORM:
                    group['items'].append({
                        'id': alert.id,
                        'title': alert.title,
                        'short_description': alert.short_description,
                        'severity': alert.severity,
                        'check_id': alert.check_id,
                        'detected_at': alert.detected_at.isoformat() if alert.detected_at else None,
                    })

            return {'total_critical': len(alerts), 'by_platform': by_platform}

    def update_alert_status(self, alert_id: str, status: AlertStatus) -> bool:
        """Set an alert's status. Returns False for an unknown alert."""
        with self.connection.get_session() as session:
            updated = AlertRepository(session).set_status(alert_id, status.value, self.clock())

        if updated:
            self.logger.info(f"Alert {alert_id} marked {status.value}")
        else:
            self.logger.warning(f"Alert {alert_id} not found")
        return updated
