"""Week-over-week performance checks."""

from .cpa_increase import CpaIncreaseCheck
from .cpc_spike import CpcSpikeCheck
from .performance_drop import PerformanceDropCheck
from .roas_decrease import RoasDecreaseCheck
from .spend_without_value import SpendWithoutValueCheck

__all__ = [
    "CpaIncreaseCheck",
    "CpcSpikeCheck",
    "PerformanceDropCheck",
    "RoasDecreaseCheck",
    "SpendWithoutValueCheck",
]
