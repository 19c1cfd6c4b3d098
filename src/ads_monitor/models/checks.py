"""Models for check results and alert payloads."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import CheckStatus, Severity


@dataclass
class AlertData:
    """Alert payload attached to a non-ok check result."""
    title: str
    short_description: str
    impact: str
    suggested_actions: List[str]
    severity: Severity
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CheckResult:
    """Result of running a single check for one tenant."""
    check_id: str
    status: CheckStatus
    count: int = 0
    details: Dict[str, Any] = field(default_factory=dict)
    alert_data: Optional[AlertData] = None

    def __post_init__(self):
        """Validate the relationship between status, count and alert data."""
        if self.count < 0:
            raise ValueError(f"count must be >= 0, got {self.count}")
        if self.status == CheckStatus.OK:
            if self.count != 0 or self.alert_data is not None:
                raise ValueError("ok results carry no count and no alert data")
        elif self.alert_data is None:
            raise ValueError(f"{self.status.value} results require alert data")

    @property
    def is_ok(self) -> bool:
        """Whether the check found nothing to report."""
        return self.status == CheckStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON friendly dictionary."""
        data: Dict[str, Any] = {
            "check_id": self.check_id,
            "status": self.status.value,
            "count": self.count,
            "details": self.details,
        }
        if self.alert_data:
            data["alert_data"] = {
                "title": self.alert_data.title,
                "short_description": self.alert_data.short_description,
                "impact": self.alert_data.impact,
                "suggested_actions": list(self.alert_data.suggested_actions),
                "severity": self.alert_data.severity.value,
                "details": self.alert_data.details,
            }
        return data


@dataclass
class AlertOutcome:
    """Outcome of asking the alert engine to create an alert."""
    success: bool
    skipped: bool = False
    alert_id: Optional[str] = None
    reason: Optional[str] = None
    error: Optional[str] = None
