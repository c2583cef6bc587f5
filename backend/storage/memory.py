"""
In-memory stores. Used by the `memory` deployment and as test doubles.
"""
from errors import NotFound, StoreUnavailable
from .base import RosterStore, SessionStore, SubscriptionHub


class MemoryRosterStore(SubscriptionHub, RosterStore):
    """Dict-backed roster store; live=False disables subscriptions"""

    def __init__(self, records=None, live=True):
        self._records = {}
        self.supports_subscribe = live
        for record in records or []:
            self._records[record.id] = record

    async def load_all(self, owner_id):
        return [r for r in self._records.values() if r.owner_id == owner_id]

    async def put(self, record):
        if record.id in self._records:
            raise StoreUnavailable(f'Record {record.id} already exists')
        self._records[record.id] = record
        await self.publish(record.owner_id)

    async def patch(self, record_id, fields):
        existing = self._records.get(record_id)
        if existing is None:
            raise NotFound(f'Student {record_id} not found')
        self._records[record_id] = existing.model_copy(update=fields)
        await self.publish(existing.owner_id)

    async def delete(self, record_id):
        existing = self._records.pop(record_id, None)
        if existing is None:
            raise NotFound(f'Student {record_id} not found')
        await self.publish(existing.owner_id)

    async def replace_all(self, owner_id, records):
        kept = {k: v for k, v in self._records.items() if v.owner_id != owner_id}
        for record in records:
            kept[record.id] = record
        self._records = kept
        await self.publish(owner_id)

    async def publish(self, owner_id):
        if self.supports_subscribe:
            await super().publish(owner_id)


class MemorySessionStore(SessionStore):

    def __init__(self):
        self._session = None
        self._profiles = {}
        self._accounts = {}

    async def get_session(self):
        return self._session

    async def save_session(self, session):
        self._session = session

    async def clear_session(self):
        self._session = None

    async def get_profile(self, identity):
        return self._profiles.get(identity)

    async def save_profile(self, identity, profile):
        self._profiles[identity] = profile

    async def get_account(self, identity):
        return self._accounts.get(identity)

    async def save_account(self, account):
        self._accounts[account.identity] = account
