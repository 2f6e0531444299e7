"""Rental contract provisioning, payment lifecycle and calendar service."""

__version__ = "0.1.0"
