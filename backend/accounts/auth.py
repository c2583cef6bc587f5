"""
Password authentication against accounts kept in the session store
"""
import asyncio
import logging

from werkzeug.security import check_password_hash, generate_password_hash

from errors import AccountExists, InvalidCredentials
from models.teacher import TeacherAccount
from utils.helpers import utcnow
from utils.validation import validate_account

logger = logging.getLogger(__name__)


def normalize_identity(email):
    return (email or '').strip().lower()


class PasswordAuthenticator:

    def __init__(self, store, clock=utcnow):
        self.store = store
        self._clock = clock

    async def create_account(self, email, password):
        """Register an account; returns its identity"""
        validate_account(email, password)
        identity = normalize_identity(email)

        if await self.store.get_account(identity) is not None:
            raise AccountExists()

        password_hash = await asyncio.to_thread(generate_password_hash, password)
        account = TeacherAccount(
            identity=identity,
            password_hash=password_hash,
            created_at=self._clock()
        )
        await self.store.save_account(account)
        logger.info('Account created for %s', identity)
        return identity

    async def verify(self, credentials):
        """Return the identity for valid credentials, else raise InvalidCredentials"""
        identity = normalize_identity(credentials.email)
        if not identity or not credentials.password:
            raise InvalidCredentials('Email and password required')

        account = await self.store.get_account(identity)
        if account is None:
            raise InvalidCredentials()

        valid = await asyncio.to_thread(
            check_password_hash, account.password_hash, credentials.password
        )
        if not valid:
            raise InvalidCredentials()
        return identity
