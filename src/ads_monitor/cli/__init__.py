"""Command line interface for the ads monitor."""
