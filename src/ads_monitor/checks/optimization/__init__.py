"""Optimization opportunity checks."""

from .search_term_waste import SearchTermWasteCheck, suggest_negative_keywords

__all__ = ["SearchTermWasteCheck", "suggest_negative_keywords"]
