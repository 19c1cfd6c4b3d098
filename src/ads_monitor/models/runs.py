"""Models describing a monitoring run."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class TenantRunSummary:
    """Counters for a single tenant within a run."""
    tenant_id: str
    tenant_name: str
    checks_run: int = 0
    alerts_created: int = 0
    alerts_skipped: int = 0
    error: Optional[str] = None

    @property
    def processed(self) -> bool:
        return self.error is None


@dataclass
class RunResult:
    """Aggregate counters for one monitoring pass."""
    tenants_processed: int = 0
    checks_run: int = 0
    alerts_created: int = 0
    alerts_skipped: int = 0
    errors: List[str] = field(default_factory=list)
    tenants: List[TenantRunSummary] = field(default_factory=list)
    dry_run: bool = False
    started_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None

    @property
    def success(self) -> bool:
        """A run succeeds when no tenant recorded an error."""
        return not self.errors

    def mark_finished(self) -> None:
        """Record the end of the run."""
        self.finished_at = datetime.utcnow()

    @property
    def duration_seconds(self) -> Optional[float]:
        """Run duration, once finished."""
        if not self.finished_at:
            return None
        return (self.finished_at - self.started_at).total_seconds()
