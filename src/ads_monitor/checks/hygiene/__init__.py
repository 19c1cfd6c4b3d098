"""Account structure and quality checks."""

from .ad_group_without_ads import AdGroupWithoutAdsCheck
from .keyword_conflicts import KeywordConflictsCheck
from .low_ad_strength import LowAdStrengthCheck
from .low_quality_score import LowQualityScoreCheck

__all__ = [
    "AdGroupWithoutAdsCheck",
    "KeywordConflictsCheck",
    "LowAdStrengthCheck",
    "LowQualityScoreCheck",
]
