"""
Handlers package for Lambda function handlers.

This package contains the API endpoint handlers for batches, events,
reminders, users and devices, data export and public share pages, plus the
scheduled reminder notification target.
"""

from . import batches, events, export, notifications, public, reminders, users

__all__ = [
    "batches",
    "events",
    "export",
    "notifications",
    "public",
    "reminders",
    "users",
]
