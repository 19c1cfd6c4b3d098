"""Tests for the database backed alert engine."""

import asyncio
import threading
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

from ads_monitor.alerts.engine import DatabaseAlertEngine, alert_fingerprint
from ads_monitor.database.repository import AlertRepository, ClientRepository
from ads_monitor.models.base import AlertStatus, CheckStatus, Platform, Severity
from ads_monitor.models.checks import AlertData, CheckResult


class FakeClock:
    """Settable clock for the engine."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 18, 8, 30))


@pytest.fixture
def client_id(db):
    with db.get_session() as session:
        return ClientRepository(session).upsert_client(name="Bakkerij Jansen", customer_id="1234567890").id


@pytest.fixture
def engine(db, clock):
    return DatabaseAlertEngine(db, clock=clock)


def check_result(check_id="no_delivery", severity=Severity.HIGH, count=2):
    return CheckResult(
        check_id=check_id,
        status=CheckStatus.ERROR,
        count=count,
        details={"campaigns": ["A", "B"]},
        alert_data=AlertData(
            title="Google Ads: campaigns without impressions",
            short_description=f"{count} campaigns enabled but not delivering",
            impact="Budget is not being spent",
            suggested_actions=["Check the campaign settings"],
            severity=severity,
            details={"no_delivery_campaigns": count},
        ),
    )


class TestCreateAlert:
    """Test alert creation and deduplication."""

    def test_fingerprint(self):
        assert alert_fingerprint("no_delivery", datetime(2026, 10, 18).date()) == "no_delivery:2026-10-18"

    @pytest.mark.asyncio
    async def test_creates_open_alert(self, engine, client_id):
        outcome = await engine.create_alert_from_check_result(
            client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result()
        )

        assert outcome.success
        assert not outcome.skipped
        alerts = engine.get_open_alerts(tenant_id=client_id)
        assert len(alerts) == 1
        alert = alerts[0]
        assert alert["id"] == outcome.alert_id
        assert alert["status"] == "open"
        assert alert["type"] == "fundamental"
        assert alert["channel"] == "google_ads"
        assert alert["severity"] == "high"
        assert alert["fingerprint"] == "no_delivery:2026-10-18"
        assert alert["details"] == {
            "campaigns": ["A", "B"],
            "no_delivery_campaigns": 2,
            "client_name": "Bakkerij Jansen",
            "check_count": 2,
        }

    @pytest.mark.asyncio
    async def test_same_day_is_skipped_as_already_open(self, engine, client_id):
        first = await engine.create_alert_from_check_result(
            client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result()
        )
        second = await engine.create_alert_from_check_result(
            client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result(severity=Severity.CRITICAL)
        )

        assert second.success
        assert second.skipped
        assert second.reason == "already_open"
        assert second.alert_id == first.alert_id
        assert len(engine.get_open_alerts(tenant_id=client_id)) == 1

    @pytest.mark.asyncio
    async def test_resolved_alert_is_not_recreated_same_day(self, engine, client_id):
        await engine.create_alert_from_check_result(
            client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result()
        )
        await engine.auto_resolve_if_fixed(client_id, Platform.GOOGLE_ADS, "no_delivery")

        outcome = await engine.create_alert_from_check_result(
            client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result()
        )

        assert outcome.skipped
        assert outcome.reason == "duplicate"

    @pytest.mark.asyncio
    async def test_next_day_creates_new_alert(self, engine, client_id, clock):
        await engine.create_alert_from_check_result(
            client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result()
        )
        clock.now += timedelta(days=1)

        outcome = await engine.create_alert_from_check_result(
            client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result()
        )

        assert outcome.success and not outcome.skipped
        assert len(engine.get_open_alerts(tenant_id=client_id)) == 2

    @pytest.mark.asyncio
    async def test_different_checks_do_not_collide(self, engine, client_id):
        for check_id in ("no_delivery", "cpc_spike"):
            outcome = await engine.create_alert_from_check_result(
                client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result(check_id)
            )
            assert not outcome.skipped

    @pytest.mark.asyncio
    async def test_constraint_violation_is_a_duplicate(self, engine, client_id):
        await engine.create_alert_from_check_result(
            client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result()
        )

        # Another writer inserted the row between lookup and insert
        with patch.object(AlertRepository, "find_by_fingerprint", return_value=None):
            outcome = await engine.create_alert_from_check_result(
                client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result()
            )

        assert outcome.success
        assert outcome.skipped
        assert outcome.reason == "duplicate"

    @pytest.mark.asyncio
    async def test_storage_failure_is_reported(self, clock):
        connection = MagicMock()
        connection.get_session.side_effect = RuntimeError("database unavailable")
        engine = DatabaseAlertEngine(connection, clock=clock)

        outcome = await engine.create_alert_from_check_result(
            "client-1", "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result()
        )

        assert not outcome.success
        assert "database unavailable" in outcome.error


class TestAutoResolve:
    """Test automatic resolution of fixed problems."""

    @pytest.mark.asyncio
    async def test_resolves_only_matching_check(self, engine, client_id, clock):
        await engine.create_alert_from_check_result(
            client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result("no_delivery")
        )
        await engine.create_alert_from_check_result(
            client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result("cpc_spike")
        )
        clock.now += timedelta(hours=2)

        resolved = await engine.auto_resolve_if_fixed(client_id, Platform.GOOGLE_ADS, "no_delivery")

        assert resolved == 1
        remaining = engine.get_open_alerts(tenant_id=client_id)
        assert [a["check_id"] for a in remaining] == ["cpc_spike"]

    @pytest.mark.asyncio
    async def test_nothing_to_resolve(self, engine, client_id):
        assert await engine.auto_resolve_if_fixed(client_id, Platform.GOOGLE_ADS, "no_delivery") == 0

    @pytest.mark.asyncio
    async def test_failure_returns_zero(self, clock):
        connection = MagicMock()
        connection.get_session.side_effect = RuntimeError("database unavailable")
        engine = DatabaseAlertEngine(connection, clock=clock)

        assert await engine.auto_resolve_if_fixed("client-1", Platform.GOOGLE_ADS, "no_delivery") == 0


class TestAlertQueries:
    """Test alert listing, summaries and status changes."""

    @pytest.mark.asyncio
    async def test_summary_groups_high_and_critical(self, engine, client_id):
        for check_id, severity in [
            ("payment_issues", Severity.CRITICAL),
            ("no_delivery", Severity.HIGH),
            ("cpc_spike", Severity.HIGH),
            ("cpa_increase", Severity.HIGH),
            ("low_quality_score", Severity.MEDIUM),
        ]:
            await engine.create_alert_from_check_result(
                client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result(check_id, severity)
            )

        summary = engine.get_alert_summary(tenant_id=client_id)

        assert summary["total_critical"] == 4
        group = summary["by_platform"]["google_ads"]
        assert group["count"] == 4
        assert len(group["items"]) == 3

    @pytest.mark.asyncio
    async def test_update_status(self, engine, client_id, db):
        outcome = await engine.create_alert_from_check_result(
            client_id, "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result()
        )

        assert engine.update_alert_status(outcome.alert_id, AlertStatus.ACKNOWLEDGED)

        with db.get_session() as session:
            alert = AlertRepository(session).get(outcome.alert_id)
            assert alert.status == "acknowledged"
            assert alert.acknowledged_at is not None
        assert engine.get_open_alerts(tenant_id=client_id) == []

    def test_update_unknown_alert(self, engine):
        assert engine.update_alert_status("missing", AlertStatus.RESOLVED) is False


class TestEventLoop:
    """Test that database work stays off the event loop thread."""

    @pytest.mark.asyncio
    async def test_session_work_runs_in_worker_thread(self, clock):
        threads = []

        def get_session():
            threads.append(threading.get_ident())
            raise RuntimeError("database unavailable")

        connection = MagicMock()
        connection.get_session.side_effect = get_session
        engine = DatabaseAlertEngine(connection, clock=clock)

        await engine.create_alert_from_check_result(
            "client-1", "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result()
        )
        await engine.auto_resolve_if_fixed("client-1", Platform.GOOGLE_ADS, "no_delivery")

        assert len(threads) == 2
        assert threading.get_ident() not in threads

    @pytest.mark.asyncio
    async def test_other_tasks_run_during_a_write(self, clock):
        release = threading.Event()
        released = []

        def get_session():
            released.append(release.wait(timeout=1))
            raise RuntimeError("database unavailable")

        async def other_tenant():
            release.set()

        connection = MagicMock()
        connection.get_session.side_effect = get_session
        engine = DatabaseAlertEngine(connection, clock=clock)

        await asyncio.gather(
            engine.create_alert_from_check_result(
                "client-1", "Bakkerij Jansen", Platform.GOOGLE_ADS, check_result()
            ),
            other_tenant(),
        )

        assert released == [True]
