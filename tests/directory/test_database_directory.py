"""Tests for the database backed client directory."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from ads_monitor.database.repository import ClientRepository
from ads_monitor.directory.database import DatabaseClientDirectory
from ads_monitor.models.tenants import AppCredentials


@pytest.fixture
def app_credentials():
    return AppCredentials(
        developer_token="dev-token",
        client_id="client-id.apps.googleusercontent.com",
        client_secret="client-secret",
        login_customer_id="9998887777",
    )


@pytest.fixture
def directory(db, app_credentials):
    return DatabaseClientDirectory(db, app_credentials)


class TestListActiveTenants:
    """Test which clients are selected for monitoring."""

    def test_only_connected_monitored_clients(self, directory):
        directory.upsert_client("Bakkerij Jansen", "123-456-7890", "token-a")
        directory.upsert_client("Fietsenwinkel", "2223334444", "token-b", monitoring_enabled=None)
        directory.upsert_client("Pending BV", "3334445555", "token-c", status="pending")
        directory.upsert_client("Paused BV", "4445556666", "token-d", monitoring_enabled=False)
        directory.upsert_client("No Token BV", "5556667777")
        directory.upsert_client("No Account BV", None, "token-f")

        tenants = directory.list_active_tenants()

        assert [t.tenant_name for t in tenants] == ["Bakkerij Jansen", "Fietsenwinkel"]
        jansen = tenants[0]
        assert jansen.account_id == "1234567890"
        assert jansen.credentials.refresh_token == "token-a"
        assert jansen.credentials.developer_token == "dev-token"
        assert jansen.credentials.login_customer_id == "9998887777"

    def test_empty_directory(self, directory):
        assert directory.list_active_tenants() == []

    def test_thresholds_are_applied(self, directory):
        directory.upsert_client(
            "Bakkerij Jansen", "1234567890", "token-a",
            thresholds={"cpc_spike_increase": 0.5}, time_zone="Europe/Amsterdam",
        )

        tenant = directory.list_active_tenants()[0]

        assert tenant.thresholds.cpc_spike_increase == 0.5
        assert tenant.thresholds.cpc_spike_critical is None
        assert tenant.time_zone == "Europe/Amsterdam"

    def test_invalid_stored_thresholds_fall_back_to_defaults(self, directory, db):
        with db.get_session() as session:
            ClientRepository(session).upsert_client(
                name="Bakkerij Jansen",
                customer_id="1234567890",
                refresh_token="token-a",
                thresholds={"no_delivery_hours": "a while"},
            )

        tenant = directory.list_active_tenants()[0]

        assert tenant.thresholds.no_delivery_hours is None


class TestUpsertClient:
    """Test storing clients."""

    def test_update_by_customer_id(self, directory):
        first = directory.upsert_client("Bakkerij Jansen", "1234567890", "token-a")
        second = directory.upsert_client("Bakkerij Jansen BV", "123-456-7890")

        assert first == second
        clients = directory.list_clients()
        assert len(clients) == 1
        assert clients[0]["name"] == "Bakkerij Jansen BV"
        # An update without a token keeps the stored one
        assert clients[0]["has_refresh_token"] is True

    def test_explicit_id(self, directory):
        client_id = directory.upsert_client("Bakkerij Jansen", "1234567890", client_id="jansen")

        assert client_id == "jansen"

    def test_invalid_thresholds_are_rejected(self, directory):
        with pytest.raises(ValidationError):
            directory.upsert_client("Bakkerij Jansen", "1234567890", thresholds={"cpc_spike_increase": "high"})

    def test_list_clients_hides_tokens(self, directory):
        directory.upsert_client("Bakkerij Jansen", "1234567890", "secret-token")

        client = directory.list_clients()[0]

        assert "refresh_token" not in client
        assert "secret-token" not in client.values()


class TestTenantLookup:
    """Test single client lookups and token storage."""

    def test_update_last_checked(self, directory):
        client_id = directory.upsert_client("Bakkerij Jansen", "1234567890", "token-a")
        checked_at = datetime(2026, 10, 18, 9, 0)

        directory.update_last_checked(client_id, checked_at)

        assert directory.list_active_tenants()[0].last_checked_at == checked_at

    def test_update_last_checked_unknown_client(self, directory):
        directory.update_last_checked("missing", datetime(2026, 10, 18, 9, 0))

    def test_get_tenant_by_customer_id(self, directory):
        client_id = directory.upsert_client("Bakkerij Jansen", "1234567890", "token-a", monitoring_enabled=False)

        tenant = directory.get_tenant("123-456-7890")

        assert tenant is not None
        assert tenant.tenant_id == client_id

    def test_get_tenant_without_token(self, directory):
        client_id = directory.upsert_client("Bakkerij Jansen", "1234567890", status="pending")

        assert directory.get_tenant(client_id) is None
        assert directory.get_tenant("missing") is None

    def test_store_refresh_token(self, directory):
        client_id = directory.upsert_client("Bakkerij Jansen", "1234567890", status="pending")

        assert directory.store_refresh_token(client_id, "new-token")

        tenant = directory.list_active_tenants()[0]
        assert tenant.tenant_id == client_id
        assert tenant.credentials.refresh_token == "new-token"

    def test_store_refresh_token_unknown_client(self, directory):
        assert directory.store_refresh_token("missing", "new-token") is False
