"""Tests for CLI configuration utilities."""

import json

import pytest

from ads_monitor.cli.utils.config import (
    clear_config,
    get_app_credentials,
    get_config,
    get_config_file,
    get_database_url,
    load_config,
    save_config,
)
from ads_monitor.exceptions import MonitorConfigurationError


@pytest.fixture(autouse=True)
def config_home(tmp_path, monkeypatch):
    monkeypatch.setenv("ADS_MONITOR_HOME", str(tmp_path))
    for name in (
        "ADS_MONITOR_DATABASE_URL",
        "GOOGLE_ADS_DEVELOPER_TOKEN",
        "GOOGLE_ADS_CLIENT_ID",
        "GOOGLE_ADS_CLIENT_SECRET",
        "GOOGLE_ADS_LOGIN_CUSTOMER_ID",
    ):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def stored_config():
    return {
        "google_ads": {
            "developer_token": "dev-token",
            "client_id": "client-id.apps.googleusercontent.com",
            "client_secret": "client-secret",
            "login_customer_id": "9998887777",
        },
        "database": {"url": "sqlite:///monitor.db"},
    }


def test_sensitive_values_are_encrypted_on_disk():
    save_config(stored_config())

    on_disk = json.loads(get_config_file().read_text())

    assert on_disk["google_ads"]["developer_token"]["encrypted"] is True
    assert "dev-token" not in get_config_file().read_text()
    assert on_disk["google_ads"]["client_id"] == "client-id.apps.googleusercontent.com"
    assert load_config() == stored_config()


def test_load_missing_config():
    assert load_config() is None


def test_clear_config():
    save_config(stored_config())

    assert clear_config() is True
    assert clear_config() is False
    assert load_config() is None


def test_environment_overrides_file(monkeypatch):
    save_config(stored_config())
    monkeypatch.setenv("GOOGLE_ADS_DEVELOPER_TOKEN", "env-token")

    config = get_config()

    assert config["google_ads"]["developer_token"] == "env-token"
    assert config["google_ads"]["client_secret"] == "client-secret"


def test_database_url_resolution(monkeypatch, config_home):
    assert get_database_url({}) == f"sqlite:///{config_home / 'ads_monitor.db'}"
    assert get_database_url(stored_config()) == "sqlite:///monitor.db"

    monkeypatch.setenv("ADS_MONITOR_DATABASE_URL", "postgresql://localhost/ads")

    assert get_database_url(stored_config()) == "postgresql://localhost/ads"


def test_app_credentials():
    credentials = get_app_credentials(stored_config())

    assert credentials.developer_token == "dev-token"
    assert credentials.login_customer_id == "9998887777"


def test_missing_app_credentials():
    with pytest.raises(MonitorConfigurationError) as exc_info:
        get_app_credentials({"google_ads": {"developer_token": "dev-token"}})

    message = str(exc_info.value)
    assert "GOOGLE_ADS_CLIENT_ID" in message
    assert "GOOGLE_ADS_CLIENT_SECRET" in message
    assert "GOOGLE_ADS_DEVELOPER_TOKEN" not in message
