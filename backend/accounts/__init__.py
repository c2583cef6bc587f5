# accounts/__init__.py
from .auth import PasswordAuthenticator, normalize_identity
from .manager import SessionManager, SessionState

__all__ = ['PasswordAuthenticator', 'normalize_identity', 'SessionManager', 'SessionState']
