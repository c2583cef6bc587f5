"""
Roster Controller.

Owns the canonical student list for the active session, keeps it in step
with the roster store, and derives the filtered, sorted view.
"""
import asyncio
import json
import logging

from pydantic import ValidationError

from errors import (
    ClassroomError, InvalidImportData, NotAuthenticated, NotFound,
    StoreUnavailable, ValidationFailed
)
from models.student import StudentRecord
from utils.helpers import calculate_age, generate_id, utcnow
from utils.validation import parse_create_input, parse_update_input
from .stats import filter_options, recent_students, roster_statistics
from .view import FilterCriteria, SessionScope, SortSpec, apply_scope, compute_view

logger = logging.getLogger(__name__)

REQUIRED_IMPORT_KEYS = ('id', 'fullName', 'rollNo')


class RosterController:
    """
    One instance per authenticated session.

    Every store call is async and bounded by store_timeout; the view is
    recomputed synchronously after every change of records, scope, filter or sort.
    With scope_by_class the session scope also restricts to the teacher's
    class and division (device-local deployment).
    """

    def __init__(self, store, clock=utcnow, store_timeout=None, scope_by_class=False):
        self.store = store
        self.scope_by_class = scope_by_class
        self.last_error = None
        self._clock = clock
        self._timeout = store_timeout
        self._records = []
        self._visible = []
        self._scope = None
        self._criteria = FilterCriteria()
        self._sort = SortSpec()
        self._subscription = None
        self._consumer = None
        self._load_task = None
        self._write_lock = asyncio.Lock()
        self._listeners = []

    # ============ READ-ONLY STATE ============
    @property
    def records(self):
        return tuple(self._records)

    @property
    def visible(self):
        return tuple(self._visible)

    @property
    def scope(self):
        return self._scope

    @property
    def criteria(self):
        return self._criteria

    @property
    def sort_spec(self):
        return self._sort

    @property
    def is_live(self):
        return self._subscription is not None and not self._subscription.closed

    @property
    def scoped_records(self):
        return apply_scope(self._records, self._scope)

    def get_by_id(self, record_id):
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    # ============ LISTENERS ============
    def add_listener(self, callback):
        """callback(records, visible) after every recompute; returns a remover"""
        self._listeners.append(callback)

        def remove():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return remove

    # ============ INTERNALS ============
    def _require_scope(self):
        if self._scope is None:
            raise NotAuthenticated('No active session')
        return self._scope

    def _make_scope(self, owner_id, academic_year, class_standard=None, division=None):
        if not self.scope_by_class:
            class_standard = division = None
        return SessionScope(
            owner_id=owner_id,
            academic_year=academic_year,
            class_standard=class_standard or None,
            division=division or None
        )

    async def _call(self, awaitable):
        try:
            if self._timeout:
                return await asyncio.wait_for(awaitable, self._timeout)
            return await awaitable
        except asyncio.TimeoutError:
            raise StoreUnavailable('Storage backend timed out')

    def _recompute(self):
        self._visible = compute_view(self._records, self._criteria, self._sort, self._scope)
        for callback in list(self._listeners):
            callback(self.records, self.visible)

    def _replace(self, records):
        self._records = list(records)
        self._recompute()

    def _upsert(self, record):
        for index, existing in enumerate(self._records):
            if existing.id == record.id:
                self._records[index] = record
                break
        else:
            self._records.append(record)
        self._recompute()

    def _discard(self, record_id, recompute=True):
        self._records = [r for r in self._records if r.id != record_id]
        if recompute:
            self._recompute()

    def _cancel_pending_load(self):
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
        self._load_task = None

    def _stop_live_updates(self):
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        if self._consumer is not None and not self._consumer.done():
            self._consumer.cancel()
        self._consumer = None

    async def _fetch(self, owner_id):
        if self.store.supports_subscribe:
            subscription = self.store.subscribe(owner_id)
            try:
                records = await self._call(subscription.next_snapshot())
            except BaseException:
                subscription.cancel()
                raise
            return records, subscription

        records = await self._call(self.store.load_all(owner_id))
        return records, None

    async def _consume(self, subscription):
        try:
            async for records in subscription:
                if subscription is not self._subscription:
                    break
                self._replace(records)
        except ClassroomError as e:
            # No caller to raise to; kept for the presentation layer
            logger.error('Live updates for %s stopped: %s', subscription.owner_id, e)
            self.last_error = e
            subscription.cancel()

    # ============ LOADING ============
    async def load(self, owner_id, academic_year, class_standard=None, division=None):
        """
        Load (or subscribe to) every record of owner_id and scope the view.

        A newer load() or reset() supersedes this one; the caller then gets
        NotAuthenticated and the canonical list is left untouched.
        """
        if not owner_id or not academic_year:
            raise NotAuthenticated('A teacher and academic year are required')

        self._cancel_pending_load()
        self._stop_live_updates()
        scope = self._make_scope(owner_id, academic_year, class_standard, division)

        task = asyncio.ensure_future(self._fetch(owner_id))
        self._load_task = task
        try:
            records, subscription = await task
        except asyncio.CancelledError:
            if self._load_task is task:
                raise
            raise NotAuthenticated('Session changed during load')
        finally:
            superseded = self._load_task is not task
            if not superseded:
                self._load_task = None

        if superseded:
            if subscription is not None:
                subscription.cancel()
            raise NotAuthenticated('Session changed during load')

        self._scope = scope
        self.last_error = None
        if subscription is not None:
            self._subscription = subscription
            self._consumer = asyncio.ensure_future(self._consume(subscription))

        self._replace(records)
        logger.info('Loaded %d students for %s (%s)', len(records), owner_id, academic_year)
        return self.records

    async def refresh(self):
        """Explicit reload; the only way to see changes in stores without live updates"""
        scope = self._require_scope()
        records = await self._call(self.store.load_all(scope.owner_id))
        if self._scope is scope:
            self._replace(records)
        return self.records

    def rescope(self, **changes):
        """Adjust academic_year, class_standard or division of the active scope"""
        scope = self._require_scope()
        self._scope = self._make_scope(
            scope.owner_id,
            changes.get('academic_year', scope.academic_year),
            changes.get('class_standard', scope.class_standard),
            changes.get('division', scope.division)
        )
        self._recompute()
        return self._scope

    def reset(self):
        """Drop everything held for the session (logout)"""
        self._cancel_pending_load()
        self._stop_live_updates()
        self._scope = None
        self._criteria = FilterCriteria()
        self._sort = SortSpec()
        self.last_error = None
        self._replace([])

    # ============ CRUD ============
    async def add(self, data):
        scope = self._require_scope()
        now = self._clock()
        student = parse_create_input(data, today=now.date())

        fields = dict(student)
        fields['academic_year'] = fields.get('academic_year') or scope.academic_year
        record = StudentRecord(
            id=generate_id(),
            owner_id=scope.owner_id,
            created_at=now,
            updated_at=now,
            age=calculate_age(student.birth_date, now),
            **fields
        )

        async with self._write_lock:
            await self._call(self.store.put(record))
            if self._scope is scope:
                self._upsert(record)

        logger.info('Added student %s (%s)', record.id, record.roll_no)
        return record

    async def update(self, data):
        scope = self._require_scope()
        now = self._clock()
        record_id, changes = parse_update_input(data, today=now.date())

        async with self._write_lock:
            existing = self.get_by_id(record_id)
            if existing is None:
                raise NotFound(f'Student {record_id} not found')

            if 'birth_date' in changes:
                changes['age'] = calculate_age(changes['birth_date'], now)
            changes['updated_at'] = max(now, existing.created_at)
            merged = existing.model_copy(update=changes)

            await self._call(self.store.patch(record_id, changes))
            if self._scope is scope:
                self._upsert(merged)

        return merged

    async def delete(self, record_id):
        """Deleting an id that is not in the canonical list raises NotFound"""
        self._require_scope()

        async with self._write_lock:
            if self.get_by_id(record_id) is None:
                raise NotFound(f'Student {record_id} not found')
            try:
                await self._call(self.store.delete(record_id))
            except NotFound:
                # Already deleted elsewhere
                self._discard(record_id)
                raise
            self._discard(record_id)

        logger.info('Deleted student %s', record_id)

    # ============ VIEW ============
    def set_filter(self, criteria=None, **kwargs):
        if criteria is None or isinstance(criteria, dict):
            try:
                criteria = FilterCriteria.model_validate({**(criteria or {}), **kwargs})
            except ValidationError as e:
                raise ValidationFailed({'filter': str(e)})
        self._criteria = criteria
        return self.recompute_view()

    def set_sort(self, spec=None, **kwargs):
        if spec is None or isinstance(spec, dict):
            try:
                spec = SortSpec.model_validate({**(spec or {}), **kwargs})
            except ValidationError as e:
                raise ValidationFailed({'sort': str(e)})
        self._sort = spec
        return self.recompute_view()

    def recompute_view(self):
        self._recompute()
        return list(self._visible)

    # ============ BULK ============
    async def clear_all(self):
        """
        Delete every record of the session. Only confirmed deletions leave the
        canonical list; failures raise StoreUnavailable with the failed ids.
        """
        self._require_scope()

        async with self._write_lock:
            targets = list(self._records)
            results = await asyncio.gather(
                *(self._call(self.store.delete(r.id)) for r in targets),
                return_exceptions=True
            )

            failed = []
            unexpected = None
            for record, result in zip(targets, results):
                if isinstance(result, NotFound) or not isinstance(result, BaseException):
                    self._discard(record.id, recompute=False)
                    continue
                failed.append(record.id)
                if not isinstance(result, ClassroomError) and unexpected is None:
                    unexpected = result
            self._recompute()

        if unexpected is not None:
            raise unexpected
        if failed:
            logger.error('Clear all: %d of %d deletions failed', len(failed), len(targets))
            raise StoreUnavailable(
                f'{len(failed)} of {len(targets)} students could not be deleted',
                failed_ids=failed
            )
        logger.info('Cleared %d students', len(targets))

    def export_all(self):
        """The canonical list as a JSON array of student documents"""
        self._require_scope()
        return json.dumps([r.to_document() for r in self._records], indent=2)

    async def import_all(self, snapshot):
        """
        Replace the session's records with snapshot (JSON text or list of documents).
        Any invalid element rejects the whole batch with InvalidImportData.
        """
        scope = self._require_scope()
        records = self._parse_snapshot(snapshot, scope)

        async with self._write_lock:
            await self._call(self.store.replace_all(scope.owner_id, records))
            if self._scope is scope:
                self._replace(records)

        logger.info('Imported %d students for %s', len(records), scope.owner_id)
        return self.records

    def _parse_snapshot(self, snapshot, scope):
        if isinstance(snapshot, (str, bytes)):
            try:
                documents = json.loads(snapshot)
            except ValueError:
                raise InvalidImportData('Import data is not valid JSON')
        else:
            documents = snapshot

        if not isinstance(documents, list):
            raise InvalidImportData('Invalid JSON format: Expected an array of students')

        today = self._clock().date()
        records = []
        seen = set()
        for index, document in enumerate(documents):
            if not isinstance(document, dict):
                raise InvalidImportData(f'Invalid student data at index {index}', index=index)

            for key in REQUIRED_IMPORT_KEYS:
                value = document.get(key)
                if not isinstance(value, str) or not value:
                    raise InvalidImportData(
                        f'Invalid student data at index {index}: {key} is required',
                        index=index, field=key
                    )

            if document['id'] in seen:
                raise InvalidImportData(f'Duplicate student id at index {index}', index=index)
            seen.add(document['id'])

            owner_id = document.get('ownerId') or scope.owner_id
            if owner_id != scope.owner_id:
                raise InvalidImportData(
                    f'Student at index {index} belongs to another teacher', index=index
                )

            try:
                record = StudentRecord.from_document(
                    {'age': 0, **document, 'ownerId': owner_id}
                )
            except ValidationError as e:
                raise InvalidImportData(
                    f'Invalid student data at index {index}',
                    index=index, errors=[err['msg'] for err in e.errors()]
                )

            records.append(record.model_copy(update={'age': calculate_age(record.birth_date, today)}))

        return records

    # ============ DASHBOARD ============
    def statistics(self):
        return roster_statistics(self.scoped_records)

    def recent_students(self, limit=5):
        return recent_students(self.scoped_records, limit)

    def filter_options(self):
        return filter_options(self.scoped_records)
