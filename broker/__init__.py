"""Inquiry broker - fans buyer inquiries out to groups and relays seller responses."""

__version__ = "1.0.0"
