"""Core data models for the ads monitor."""

from .base import AlertStatus, CheckCategory, CheckStatus, Platform, Severity
from .checks import AlertData, AlertOutcome, CheckResult
from .runs import RunResult, TenantRunSummary
from .tenants import AppCredentials, GoogleAdsCredentials, MonitoringThresholds, TenantConfig

__all__ = [
    'AlertStatus',
    'CheckCategory',
    'CheckStatus',
    'Platform',
    'Severity',
    'AlertData',
    'AlertOutcome',
    'CheckResult',
    'RunResult',
    'TenantRunSummary',
    'AppCredentials',
    'GoogleAdsCredentials',
    'MonitoringThresholds',
    'TenantConfig',
]
