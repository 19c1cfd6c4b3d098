"""Delivery and budget checks."""

from .budget_depleted import BudgetDepletedCheck
from .limited_by_budget import LimitedByBudgetCheck
from .no_delivery import NoDeliveryCheck

__all__ = ["BudgetDepletedCheck", "LimitedByBudgetCheck", "NoDeliveryCheck"]
