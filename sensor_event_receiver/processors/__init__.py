"""Processors module for decoded record handling."""

from .event_router import EventRouter, TriggerEvent
from .trigger_dispatcher import TriggerDispatcher, log_trigger

__all__ = [
    "EventRouter",
    "TriggerEvent",
    "TriggerDispatcher",
    "log_trigger"
]
