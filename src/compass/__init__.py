"""Compass - compliance maturity and readiness scoring."""

__version__ = "1.0.0"
