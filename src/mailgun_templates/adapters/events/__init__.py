"""Events adapter - in-process dispatching of domain events.

Contents:
    * :class:`.dispatcher.EventDispatcher` - Logging subscriber dispatcher
"""

from __future__ import annotations

from .dispatcher import EventDispatcher, Listener

__all__ = ["EventDispatcher", "Listener"]
