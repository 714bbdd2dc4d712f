"""Roof Quotes API: Dutch roof-renovation quotes with AI before/after impressions."""

__version__ = "1.0.0"
