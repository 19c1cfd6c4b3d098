"""Week-over-week account metrics shared by the trend checks."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Tuple

from ...client.google_ads import GoogleAdsClient
from ..base import micros_to_amount, to_float, to_int

CURRENT_PERIOD_QUERY = """
    SELECT
      metrics.conversions,
      metrics.conversions_value,
      metrics.cost_micros,
      metrics.clicks,
      metrics.impressions
    FROM customer
    WHERE segments.date DURING LAST_7_DAYS
"""

# The previous week is derived as the last 14 days minus the last 7.
FULL_PERIOD_QUERY = """
    SELECT
      metrics.conversions,
      metrics.conversions_value,
      metrics.cost_micros,
      metrics.clicks,
      metrics.impressions
    FROM customer
    WHERE segments.date DURING LAST_14_DAYS
"""


@dataclass
class PeriodMetrics:
    """Account totals over one comparison period."""
    conversions: float = 0.0
    conversions_value: float = 0.0
    cost: float = 0.0
    clicks: int = 0
    impressions: int = 0

    @classmethod
    def from_rows(cls, rows: Iterable[Dict[str, Any]]) -> "PeriodMetrics":
        totals = cls()
        for row in rows:
            metrics = row.get("metrics", {})
            totals.conversions += to_float(metrics.get("conversions"))
            totals.conversions_value += to_float(metrics.get("conversionsValue"))
            totals.cost += micros_to_amount(metrics.get("costMicros"))
            totals.clicks += to_int(metrics.get("clicks"))
            totals.impressions += to_int(metrics.get("impressions"))
        return totals

    def __sub__(self, other: "PeriodMetrics") -> "PeriodMetrics":
        return PeriodMetrics(
            conversions=self.conversions - other.conversions,
            conversions_value=self.conversions_value - other.conversions_value,
            cost=self.cost - other.cost,
            clicks=self.clicks - other.clicks,
            impressions=self.impressions - other.impressions,
        )

    @property
    def cpa(self) -> float:
        return self.cost / self.conversions if self.conversions > 0 else 0.0

    @property
    def roas(self) -> float:
        return self.conversions_value / self.cost if self.cost > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {key: round(value, 2) if isinstance(value, float) else value
                for key, value in asdict(self).items()}


async def fetch_period_comparison(client: GoogleAdsClient) -> Tuple[PeriodMetrics, PeriodMetrics]:
    """Return (last 7 days, the 7 days before) account totals."""
    current_response = await client.query(CURRENT_PERIOD_QUERY)
    current = PeriodMetrics.from_rows(current_response.results)

    full_response = await client.query(FULL_PERIOD_QUERY)
    full = PeriodMetrics.from_rows(full_response.results)

    return current, full - current
