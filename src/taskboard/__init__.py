"""Multi-user task board: ordered task lists, real-time sync and due-date reminders."""

__version__ = "0.1.0"
