"""Utility functions."""

from .logging_setup import setup_logging
from .trace_formatter import TraceFormatter

__all__ = ["setup_logging", "TraceFormatter"]
