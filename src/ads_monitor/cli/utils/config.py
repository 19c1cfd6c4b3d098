"""Configuration management utilities."""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from cryptography.fernet import Fernet

from ...exceptions import MonitorConfigurationError
from ...models.tenants import AppCredentials
from ..cli_constants import (
    ENV_DATABASE_URL,
    ENV_HOME,
    ERROR_MISSING_CREDENTIALS,
    FILE_PERMISSION_OWNER_RW,
    GOOGLE_ADS_ENV_MAPPING,
    REQUIRED_GOOGLE_ADS_FIELDS,
)

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = ["secret", "password", "key", "token"]


def get_config_dir() -> Path:
    """Get configuration directory path."""
    config_dir = Path(os.getenv(ENV_HOME) or Path.home() / ".ads-monitor")
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file() -> Path:
    """Get configuration file path."""
    return get_config_dir() / "config.json"


def get_key_file() -> Path:
    """Get encryption key file path."""
    return get_config_dir() / ".key"


def get_or_create_key() -> bytes:
    """Get or create encryption key."""
    key_file = get_key_file()

    if key_file.exists():
        return key_file.read_bytes()

    key = Fernet.generate_key()
    key_file.write_bytes(key)

    # Owner read/write only
    key_file.chmod(FILE_PERMISSION_OWNER_RW)

    return key


def is_sensitive(config_key: str) -> bool:
    return any(s in config_key.lower() for s in SENSITIVE_KEYS)


def encrypt_config(config: dict) -> dict:
    """Encrypt sensitive configuration values."""
    fernet = Fernet(get_or_create_key())

    encrypted_config = {}
    for section, section_config in config.items():
        encrypted_config[section] = {}

        for config_key, value in section_config.items():
            if is_sensitive(config_key) and isinstance(value, str):
                encrypted_config[section][config_key] = {
                    "encrypted": True,
                    "value": fernet.encrypt(value.encode()).decode(),
                }
            else:
                encrypted_config[section][config_key] = value

    return encrypted_config


def decrypt_config(encrypted_config: dict) -> dict:
    """Decrypt sensitive configuration values."""
    fernet = Fernet(get_or_create_key())

    config = {}
    for section, section_config in encrypted_config.items():
        config[section] = {}

        for config_key, value in section_config.items():
            if isinstance(value, dict) and value.get("encrypted"):
                config[section][config_key] = fernet.decrypt(value["value"].encode()).decode()
            else:
                config[section][config_key] = value

    return config


def load_config() -> Optional[Dict[str, Dict[str, str]]]:
    """Load configuration from file."""
    config_file = get_config_file()

    if not config_file.exists():
        return None

    try:
        with open(config_file, "r") as f:
            encrypted_config = json.load(f)

        return decrypt_config(encrypted_config)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Failed to load config file: {e}")
        return None
    except Exception as e:
        logger.error(f"Unexpected error loading config: {e}")
        raise


def save_config(config: Dict[str, Dict[str, str]]) -> None:
    """Save configuration to file."""
    config_file = get_config_file()

    with open(config_file, "w") as f:
        json.dump(encrypt_config(config), f, indent=2)

    config_file.chmod(FILE_PERMISSION_OWNER_RW)


def clear_config() -> bool:
    """Remove the configuration file. Returns False if there was none."""
    config_file = get_config_file()
    if not config_file.exists():
        return False
    config_file.unlink()
    return True


def get_config() -> Dict[str, Dict[str, str]]:
    """Get configuration with environment overrides applied."""
    config = load_config() or {}
    google_ads = config.setdefault("google_ads", {})
    config.setdefault("database", {})

    for config_key, env_key in GOOGLE_ADS_ENV_MAPPING.items():
        env_value = os.getenv(env_key)
        if env_value:
            google_ads[config_key] = env_value

    return config


def get_database_url(config: Dict[str, Dict[str, str]]) -> str:
    """Resolve the database URL: environment, then config file, then a local sqlite file."""
    env_value = os.getenv(ENV_DATABASE_URL)
    if env_value:
        return env_value

    configured = config.get("database", {}).get("url")
    if configured:
        return configured

    return f"sqlite:///{get_config_dir() / 'ads_monitor.db'}"


def get_app_credentials(config: Dict[str, Dict[str, str]]) -> AppCredentials:
    """Build the shared Google Ads credentials.

    Raises:
        MonitorConfigurationError: If a required value is missing
    """
    google_ads = config.get("google_ads", {})

    missing = [
        GOOGLE_ADS_ENV_MAPPING[field]
        for field in REQUIRED_GOOGLE_ADS_FIELDS
        if not google_ads.get(field)
    ]
    if missing:
        raise MonitorConfigurationError(ERROR_MISSING_CREDENTIALS.format(", ".join(missing)))

    return AppCredentials(
        developer_token=google_ads["developer_token"],
        client_id=google_ads["client_id"],
        client_secret=google_ads["client_secret"],
        login_customer_id=google_ads.get("login_customer_id") or None,
    )
