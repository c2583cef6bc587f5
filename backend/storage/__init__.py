# storage/__init__.py
from .base import Subscription, RosterStore, SessionStore
from .memory import MemoryRosterStore, MemorySessionStore
from .local import LocalRosterStore, LocalSessionStore

__all__ = [
    'Subscription', 'RosterStore', 'SessionStore',
    'MemoryRosterStore', 'MemorySessionStore',
    'LocalRosterStore', 'LocalSessionStore'
]
