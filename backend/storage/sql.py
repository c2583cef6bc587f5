"""
Document-database stores on Flask-SQLAlchemy.
Each call runs in a worker thread inside its own app context.
Roster writes made through this store are pushed to live subscribers.
"""
import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError

from errors import NotFound, StoreUnavailable
from models.base import db
from models.documents import (
    StudentDocument, AccountDocument, ProfileDocument, SessionDocument
)
from .base import RosterStore, SessionStore, SubscriptionHub

logger = logging.getLogger(__name__)


class _SqlStore:

    def __init__(self, app):
        self.app = app

    async def _run(self, func, *args):
        def work():
            with self.app.app_context():
                try:
                    return func(*args)
                except SQLAlchemyError:
                    db.session.rollback()
                    raise

        try:
            return await asyncio.to_thread(work)
        except (SQLAlchemyError, ValueError) as e:
            logger.error('Database error in %s: %s', type(self).__name__, e)
            raise StoreUnavailable(f'Database error: {e}')


class SqlRosterStore(SubscriptionHub, _SqlStore, RosterStore):

    # ============ BLOCKING HELPERS ============
    def _load_all(self, owner_id):
        documents = (
            StudentDocument.query
            .filter_by(owner_id=owner_id)
            .order_by(StudentDocument.created_at)
            .all()
        )
        return [document.to_record() for document in documents]

    def _put(self, record):
        if db.session.get(StudentDocument, record.id) is not None:
            raise StoreUnavailable(f'Record {record.id} already exists')
        db.session.add(StudentDocument.from_record(record))
        db.session.commit()

    def _patch(self, record_id, fields):
        document = db.session.get(StudentDocument, record_id)
        if document is None:
            raise NotFound(f'Student {record_id} not found')
        document.apply(document.to_record().model_copy(update=fields))
        db.session.commit()
        return document.owner_id

    def _delete(self, record_id):
        document = db.session.get(StudentDocument, record_id)
        if document is None:
            raise NotFound(f'Student {record_id} not found')
        owner_id = document.owner_id
        db.session.delete(document)
        db.session.commit()
        return owner_id

    def _replace_all(self, owner_id, records):
        # One transaction: either every document is replaced or none is
        StudentDocument.query.filter_by(owner_id=owner_id).delete()
        for record in records:
            db.session.add(StudentDocument.from_record(record))
        db.session.commit()

    # ============ STORE CONTRACT ============
    async def load_all(self, owner_id):
        return await self._run(self._load_all, owner_id)

    async def put(self, record):
        await self._run(self._put, record)
        await self.publish(record.owner_id)

    async def patch(self, record_id, fields):
        owner_id = await self._run(self._patch, record_id, fields)
        await self.publish(owner_id)

    async def delete(self, record_id):
        owner_id = await self._run(self._delete, record_id)
        await self.publish(owner_id)

    async def replace_all(self, owner_id, records):
        await self._run(self._replace_all, owner_id, list(records))
        await self.publish(owner_id)


class SqlSessionStore(_SqlStore, SessionStore):

    def _get_session(self):
        document = db.session.get(SessionDocument, 'current')
        return document.to_session() if document else None

    def _save_session(self, session):
        document = db.session.get(SessionDocument, 'current')
        if document is None:
            document = SessionDocument(key='current', body=session.to_document())
            db.session.add(document)
        else:
            document.body = session.to_document()
        db.session.commit()

    def _clear_session(self):
        SessionDocument.query.delete()
        db.session.commit()

    def _get_profile(self, identity):
        document = db.session.get(ProfileDocument, identity)
        return document.to_profile() if document else None

    def _save_profile(self, identity, profile):
        document = db.session.get(ProfileDocument, identity)
        if document is None:
            db.session.add(ProfileDocument(identity=identity, body=profile.to_document()))
        else:
            document.body = profile.to_document()
        db.session.commit()

    def _get_account(self, identity):
        document = db.session.get(AccountDocument, identity)
        return document.to_account() if document else None

    def _save_account(self, account):
        document = db.session.get(AccountDocument, account.identity)
        if document is None:
            db.session.add(AccountDocument(identity=account.identity, body=account.to_document()))
        else:
            document.body = account.to_document()
        db.session.commit()

    async def get_session(self):
        return await self._run(self._get_session)

    async def save_session(self, session):
        await self._run(self._save_session, session)

    async def clear_session(self):
        await self._run(self._clear_session)

    async def get_profile(self, identity):
        return await self._run(self._get_profile, identity)

    async def save_profile(self, identity, profile):
        await self._run(self._save_profile, identity, profile)

    async def get_account(self, identity):
        return await self._run(self._get_account, identity)

    async def save_account(self, account):
        await self._run(self._save_account, account)
