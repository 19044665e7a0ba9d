"""Tracking tag and attribution URL generation for publication placement orders."""

__version__ = "0.1.0"
