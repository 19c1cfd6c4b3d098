"""Registry for monitoring checks."""

from typing import Dict, Iterable, List, Optional

from ..exceptions import UnknownCheckError
from ..models.base import CheckCategory
from .base import CheckBase


class CheckRegistry:
    """Ordered registry of monitoring checks.

    Checks run in the order they were registered.
    """

    def __init__(self) -> None:
        """Initialize check registry."""
        self._checks: Dict[str, CheckBase] = {}

    def register(self, check: CheckBase) -> None:
        """Register a check.

        Args:
            check: Check instance to register

        Raises:
            ValueError: If check with same id already registered
        """
        if not check.id:
            raise ValueError(f"{check.__class__.__name__} has no CHECK_ID")
        if check.id in self._checks:
            raise ValueError(f"Check '{check.id}' already registered")

        self._checks[check.id] = check

    def get(self, check_id: str) -> Optional[CheckBase]:
        """Get a check by id."""
        return self._checks.get(check_id)

    def list_all(self) -> List[CheckBase]:
        """List all registered checks in registration order."""
        return list(self._checks.values())

    def all_ids(self) -> List[str]:
        return list(self._checks.keys())

    def list_by_category(self, category: CheckCategory) -> List[CheckBase]:
        """List checks of one category in registration order."""
        return [check for check in self._checks.values() if check.category == category]

    def select(self, check_ids: Optional[Iterable[str]] = None) -> List[CheckBase]:
        """Return the registered checks limited to the given ids.

        The registration order is kept regardless of the order of ``check_ids``.

        Raises:
            UnknownCheckError: If any id is not registered
        """
        if not check_ids:
            return self.list_all()

        wanted = set(check_ids)
        unknown = sorted(wanted - set(self._checks))
        if unknown:
            raise UnknownCheckError(unknown)

        return [check for check in self._checks.values() if check.id in wanted]

    def __len__(self) -> int:
        return len(self._checks)

    def __contains__(self, check_id: str) -> bool:
        return check_id in self._checks
