"""Base enumerations shared across the monitor."""

from enum import Enum


class Platform(Enum):
    """Advertising platforms an alert can originate from."""
    GOOGLE_ADS = "google_ads"


class CheckStatus(Enum):
    """Outcome of a single check invocation."""
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class Severity(Enum):
    """Severity levels for alerts."""
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CheckCategory(Enum):
    """Groups used to organise checks."""
    CRITICAL = "critical"
    DELIVERY = "delivery"
    TRACKING = "tracking"
    PERFORMANCE = "performance"
    HYGIENE = "hygiene"
    OPTIMIZATION = "optimization"


class AlertStatus(Enum):
    """Lifecycle states of a stored alert."""
    OPEN = "open"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    IGNORED = "ignored"
