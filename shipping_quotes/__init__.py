"""Shipping Quotes API: multi-carrier rate aggregation."""
__version__ = "1.0.0"
