"""Anomaly monitoring and alerting for Google Ads accounts."""

__version__ = "0.1.0"
