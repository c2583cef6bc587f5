"""
Wires one deployment variant (memory, local or sql) into the service objects
used for the lifetime of the app: stores, roster controller, session manager.
"""
import logging

from flask import current_app

from accounts import PasswordAuthenticator, SessionManager
from roster import RosterController
from storage import (
    LocalRosterStore, LocalSessionStore, MemoryRosterStore, MemorySessionStore
)
from utils.async_runner import AsyncRunner

logger = logging.getLogger(__name__)


class ClassroomServices:

    def __init__(self, roster_store, session_store, store_timeout=None,
                 scope_by_class=False, runner=None):
        self.runner = runner or AsyncRunner()
        self.roster_store = roster_store
        self.session_store = session_store
        self.roster = RosterController(
            roster_store,
            store_timeout=store_timeout,
            scope_by_class=scope_by_class
        )
        self.authenticator = PasswordAuthenticator(session_store)
        self.sessions = SessionManager(session_store, self.authenticator, self.roster)

    def close(self):
        self.runner.call(self.roster.reset)
        self.runner.stop()


def build_services(app):
    """Pick the stores for app.config['CLASSROOM_STORAGE']"""
    backend = app.config['CLASSROOM_STORAGE']
    timeout = app.config.get('STORE_TIMEOUT')

    if backend == 'memory':
        roster_store = MemoryRosterStore()
        session_store = MemorySessionStore()
        scope_by_class = False
    elif backend == 'local':
        data_dir = app.config['CLASSROOM_DATA_DIR']
        roster_store = LocalRosterStore(data_dir)
        session_store = LocalSessionStore(data_dir)
        scope_by_class = True
    else:
        from storage.sql import SqlRosterStore, SqlSessionStore
        roster_store = SqlRosterStore(app)
        session_store = SqlSessionStore(app)
        scope_by_class = False

    logger.info('Using %s storage (live updates: %s)', backend, roster_store.supports_subscribe)
    return ClassroomServices(
        roster_store,
        session_store,
        store_timeout=timeout,
        scope_by_class=scope_by_class
    )


def get_services():
    return current_app.extensions['classroom']
