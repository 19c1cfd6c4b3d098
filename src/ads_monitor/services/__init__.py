"""Services that orchestrate monitoring runs."""

from .monitor import GoogleAdsMonitor

__all__ = ['GoogleAdsMonitor']
