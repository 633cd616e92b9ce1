"""Storage module for bounded in-memory trace history."""

from .bounded_log import BoundedLog, LogEntry, LogSnapshot

__all__ = ["BoundedLog", "LogEntry", "LogSnapshot"]
