"""Conversion tracking checks."""

from .conversion_tracking import ConversionTrackingCheck

__all__ = ["ConversionTrackingCheck"]
