"""Hooks — synchronous named-hook dispatcher with redirection and before/after callbacks."""

from .core import Dispatcher
from .exceptions import HooksError, InvalidNameError, RedirectCycleError
from .models import DispatcherSettings
from .registration import Handler, HandlerEntry, Registration

__all__ = [
    "Dispatcher",
    "DispatcherSettings",
    "Handler",
    "HandlerEntry",
    "HooksError",
    "InvalidNameError",
    "RedirectCycleError",
    "Registration",
]
