"""
Storage contracts consumed by the roster controller and the session manager,
and the snapshot stream used by live-updating roster stores.
"""
import abc
import asyncio
import logging

logger = logging.getLogger(__name__)

_CLOSED = object()


class Subscription:
    """
    Stream of full roster snapshots for one owner.

    Only the newest undelivered snapshot is kept; a slow consumer skips
    intermediate snapshots instead of applying stale ones.

    Usage:
        subscription = store.subscribe(owner_id)
        async for records in subscription:
            ...
        subscription.cancel()
    """

    def __init__(self, owner_id, academic_year=None, on_cancel=None):
        self.owner_id = owner_id
        self.academic_year = academic_year
        self._on_cancel = on_cancel
        self._queue = asyncio.Queue(maxsize=1)
        self.closed = False
        # Task delivering the first snapshot, owned by the subscription
        self.initial_task = None

    def _offer(self, item):
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(item)

    def push(self, records):
        """Deliver a snapshot; replaces any snapshot not yet consumed"""
        if self.closed:
            return
        if self.academic_year is not None:
            records = [r for r in records if r.academic_year == self.academic_year]
        self._offer(list(records))

    def fail(self, error):
        """Deliver an error; the consumer sees it raised from next_snapshot()"""
        if not self.closed:
            self._offer(error)

    def cancel(self):
        if self.closed:
            return
        self.closed = True
        if self.initial_task is not None and not self.initial_task.done():
            self.initial_task.cancel()
        self._offer(_CLOSED)
        if self._on_cancel:
            self._on_cancel(self)

    async def next_snapshot(self):
        item = await self._queue.get()
        if item is _CLOSED:
            # Keep the sentinel for any other waiter
            self._offer(_CLOSED)
            raise StopAsyncIteration
        if isinstance(item, Exception):
            raise item
        return item

    def __aiter__(self):
        return self

    async def __anext__(self):
        return await self.next_snapshot()


class RosterStore(abc.ABC):
    """Persists student records keyed by id, scoped by owner"""

    supports_subscribe = False

    @abc.abstractmethod
    async def load_all(self, owner_id):
        """All records owned by owner_id"""

    @abc.abstractmethod
    async def put(self, record):
        """Insert a new record"""

    @abc.abstractmethod
    async def patch(self, record_id, fields):
        """Merge snake_case fields into an existing record; NotFound if absent"""

    @abc.abstractmethod
    async def delete(self, record_id):
        """Hard delete; NotFound if absent"""

    @abc.abstractmethod
    async def replace_all(self, owner_id, records):
        """Atomically replace every record of owner_id with records"""

    def subscribe(self, owner_id, academic_year=None):
        raise NotImplementedError(f'{type(self).__name__} does not support live updates')


class SubscriptionHub:
    """
    Mixin for roster stores that push snapshots after every write.
    The first snapshot is delivered as soon as the subscription opens.
    """

    supports_subscribe = True

    def _subscriptions(self):
        if not hasattr(self, '_subscribers'):
            self._subscribers = {}
        return self._subscribers

    def subscribe(self, owner_id, academic_year=None):
        if not self.supports_subscribe:
            raise NotImplementedError(f'{type(self).__name__} has live updates disabled')
        subscription = Subscription(owner_id, academic_year, on_cancel=self._unsubscribe)
        self._subscriptions().setdefault(owner_id, []).append(subscription)
        logger.debug('Subscription opened for %s', owner_id)
        subscription.initial_task = asyncio.get_running_loop().create_task(
            self._push_initial(subscription)
        )
        return subscription

    def _unsubscribe(self, subscription):
        subscribers = self._subscriptions().get(subscription.owner_id, [])
        if subscription in subscribers:
            subscribers.remove(subscription)
        logger.debug('Subscription closed for %s', subscription.owner_id)

    async def _push_initial(self, subscription):
        try:
            records = await self.load_all(subscription.owner_id)
        except Exception as e:
            subscription.fail(e)
            return
        subscription.push(records)

    async def publish(self, owner_id):
        """Push the current snapshot of owner_id to its subscribers"""
        subscribers = list(self._subscriptions().get(owner_id, []))
        if not subscribers:
            return
        try:
            records = await self.load_all(owner_id)
        except Exception as e:
            logger.error('Snapshot for %s failed: %s', owner_id, e)
            for subscription in subscribers:
                subscription.fail(e)
            return
        for subscription in subscribers:
            subscription.push(records)


class SessionStore(abc.ABC):
    """Persists the current session, teacher profiles and password accounts"""

    @abc.abstractmethod
    async def get_session(self):
        """Current SessionRecord or None"""

    @abc.abstractmethod
    async def save_session(self, session):
        pass

    @abc.abstractmethod
    async def clear_session(self):
        pass

    @abc.abstractmethod
    async def get_profile(self, identity):
        """TeacherProfile or None"""

    @abc.abstractmethod
    async def save_profile(self, identity, profile):
        pass

    @abc.abstractmethod
    async def get_account(self, identity):
        """TeacherAccount or None"""

    @abc.abstractmethod
    async def save_account(self, account):
        pass
