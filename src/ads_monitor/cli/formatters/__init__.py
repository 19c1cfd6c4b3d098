"""Rich output formatters."""
