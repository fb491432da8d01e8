"""Timewarden desktop client: live status polling and schedule management."""

__version__ = "0.1.0"
