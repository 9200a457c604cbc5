"""Organic impressions estimator for Amazon keyword rankings."""

__version__ = "0.1.0"
