"""Constants for the CLI application."""

from .. import __version__

# Version
VERSION = __version__

# Choices
CATEGORY_CHOICES = ["critical", "delivery", "tracking", "performance", "hygiene", "optimization"]
CLIENT_STATUS_CHOICES = ["connected", "pending", "disconnected"]

# Defaults
DEFAULT_CONCURRENCY = 1
DEFAULT_OAUTH_PORT = 8080
DEFAULT_OAUTH_TIMEOUT = 300

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_KEYBOARD_INTERRUPT = 130

# Environment variables
ENV_HOME = "ADS_MONITOR_HOME"
ENV_DATABASE_URL = "ADS_MONITOR_DATABASE_URL"
GOOGLE_ADS_ENV_MAPPING = {
    "developer_token": "GOOGLE_ADS_DEVELOPER_TOKEN",
    "client_id": "GOOGLE_ADS_CLIENT_ID",
    "client_secret": "GOOGLE_ADS_CLIENT_SECRET",
    "login_customer_id": "GOOGLE_ADS_LOGIN_CUSTOMER_ID",
}
REQUIRED_GOOGLE_ADS_FIELDS = ["developer_token", "client_id", "client_secret"]

# Error messages
ERROR_MISSING_CREDENTIALS = (
    "Missing Google Ads configuration: {}. "
    "Run 'ads-monitor configure' or set the environment variables."
)
ERROR_UNKNOWN_CHECKS = "Unknown check(s): {}"
ERROR_NO_CHECKS_FOUND = "No checks found matching the criteria"
ERROR_CLIENT_NOT_FOUND = "Client '{}' not found"
ERROR_ALERT_NOT_FOUND = "Alert '{}' not found"
ERROR_UNEXPECTED = "Unexpected error: {}"

# Success messages
SUCCESS_CONFIG_SAVED = "Configuration saved successfully"
SUCCESS_CONFIG_CLEARED = "Configuration cleared"

# Info messages
INFO_OPERATION_CANCELLED = "Operation cancelled by user"
INFO_RUN_WITH_DEBUG = "Run with --debug for more information"
INFO_DRY_RUN = "DRY RUN - no alerts will be created or resolved"

# File permissions
FILE_PERMISSION_OWNER_RW = 0o600
