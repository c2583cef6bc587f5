"""
Device-local stores: JSON files in a data directory.
No live updates; the controller reloads explicitly with refresh().
"""
import asyncio
import json
import logging
import os

from errors import NotFound, StoreUnavailable
from models.student import StudentRecord
from models.teacher import SessionRecord, TeacherAccount, TeacherProfile
from .base import RosterStore, SessionStore

logger = logging.getLogger(__name__)


class JsonFile:
    """A JSON document on disk, written atomically"""

    def __init__(self, path, default):
        self.path = path
        self.default = default

    def read(self):
        if not os.path.exists(self.path):
            return json.loads(json.dumps(self.default))
        with open(self.path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def write(self, data):
        os.makedirs(os.path.dirname(self.path) or '.', exist_ok=True)
        tmp_path = self.path + '.tmp'
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)

    def remove(self):
        if os.path.exists(self.path):
            os.remove(self.path)


async def _run(func, *args):
    """Run blocking file work off the event loop; file and document errors become StoreUnavailable"""
    try:
        return await asyncio.to_thread(func, *args)
    except (OSError, ValueError) as e:
        logger.error('Local storage error: %s', e)
        raise StoreUnavailable(f'Local storage error: {e}')


class LocalRosterStore(RosterStore):

    def __init__(self, data_dir):
        self._file = JsonFile(os.path.join(data_dir, 'students.json'), [])
        self._lock = asyncio.Lock()

    def _read(self):
        return [StudentRecord.from_document(doc) for doc in self._file.read()]

    def _write(self, records):
        self._file.write([r.to_document() for r in records])

    async def load_all(self, owner_id):
        async with self._lock:
            records = await _run(self._read)
        return [r for r in records if r.owner_id == owner_id]

    async def put(self, record):
        async with self._lock:
            records = await _run(self._read)
            if any(r.id == record.id for r in records):
                raise StoreUnavailable(f'Record {record.id} already exists')
            records.append(record)
            await _run(self._write, records)

    async def patch(self, record_id, fields):
        async with self._lock:
            records = await _run(self._read)
            for index, record in enumerate(records):
                if record.id == record_id:
                    records[index] = record.model_copy(update=fields)
                    break
            else:
                raise NotFound(f'Student {record_id} not found')
            await _run(self._write, records)

    async def delete(self, record_id):
        async with self._lock:
            records = await _run(self._read)
            remaining = [r for r in records if r.id != record_id]
            if len(remaining) == len(records):
                raise NotFound(f'Student {record_id} not found')
            await _run(self._write, remaining)

    async def replace_all(self, owner_id, records):
        async with self._lock:
            existing = await _run(self._read)
            kept = [r for r in existing if r.owner_id != owner_id]
            # Single file write, so the replacement is all-or-nothing
            await _run(self._write, kept + list(records))


class LocalSessionStore(SessionStore):

    def __init__(self, data_dir):
        self._session = JsonFile(os.path.join(data_dir, 'session.json'), None)
        self._profiles = JsonFile(os.path.join(data_dir, 'profiles.json'), {})
        self._accounts = JsonFile(os.path.join(data_dir, 'accounts.json'), {})
        self._lock = asyncio.Lock()

    async def get_session(self):
        document = await _run(self._session.read)
        if document is None:
            return None
        return await _run(SessionRecord.from_document, document)

    async def save_session(self, session):
        await _run(self._session.write, session.to_document())

    async def clear_session(self):
        await _run(self._session.remove)

    async def get_profile(self, identity):
        profiles = await _run(self._profiles.read)
        if identity not in profiles:
            return None
        return await _run(TeacherProfile.from_document, profiles[identity])

    async def save_profile(self, identity, profile):
        async with self._lock:
            profiles = await _run(self._profiles.read)
            profiles[identity] = profile.to_document()
            await _run(self._profiles.write, profiles)

    async def get_account(self, identity):
        accounts = await _run(self._accounts.read)
        if identity not in accounts:
            return None
        return await _run(TeacherAccount.from_document, accounts[identity])

    async def save_account(self, account):
        async with self._lock:
            accounts = await _run(self._accounts.read)
            accounts[account.identity] = account.to_document()
            await _run(self._accounts.write, accounts)
