"""
Profile/Session Manager.

State machine:
    ANONYMOUS -> AUTHENTICATED_NO_PROFILE -> AUTHENTICATED_COMPLETE
    any state -> ANONYMOUS on logout

The roster controller is loaded when the session becomes complete,
rescoped on academic-year or class changes, and reset on logout.

Every transition remembers the session generation it started in. Logout and
each new login bump the generation; a transition that finds the generation
changed after one of its awaits stops with NotAuthenticated and never
installs its session.
"""
import enum
import logging

from pydantic import ValidationError

from errors import (
    InvalidCredentials, InvalidSessionState, NotAuthenticated, ValidationFailed
)
from models.teacher import Credentials, SessionRecord, TeacherProfile
from utils.helpers import utcnow
from utils.validation import parse_profile_input

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    ANONYMOUS = 'anonymous'
    AUTHENTICATED_NO_PROFILE = 'authenticated_no_profile'
    AUTHENTICATED_COMPLETE = 'authenticated_complete'


class SessionManager:

    def __init__(self, store, authenticator, roster, clock=utcnow):
        self.store = store
        self.authenticator = authenticator
        self.roster = roster
        self._clock = clock
        self._session = None
        self._generation = 0

    # ============ STATE ============
    @property
    def session(self):
        return self._session

    @property
    def identity(self):
        return self._session.identity if self._session else None

    @property
    def state(self):
        if self._session is None:
            return SessionState.ANONYMOUS
        if self._session.has_profile:
            return SessionState.AUTHENTICATED_COMPLETE
        return SessionState.AUTHENTICATED_NO_PROFILE

    def _require_state(self, state):
        if self._session is None:
            raise NotAuthenticated()
        if self.state != state:
            raise InvalidSessionState(
                f'Operation requires state {state.value}, current state is {self.state.value}'
            )

    def _new_generation(self):
        self._generation += 1
        return self._generation

    def _check_generation(self, generation):
        if generation != self._generation:
            raise NotAuthenticated('Session changed during the operation')

    async def _save(self, session, generation):
        self._check_generation(generation)
        await self.store.save_session(session)
        if generation != self._generation:
            # The stored copy is stale now; make the store match memory again
            if self._session is None:
                await self.store.clear_session()
            else:
                await self.store.save_session(self._session)
            raise NotAuthenticated('Session changed during the operation')
        self._session = session
        return session

    async def reload_roster(self):
        """(Re)load the roster for the complete session"""
        self._require_state(SessionState.AUTHENTICATED_COMPLETE)
        profile = self._session.teacher_profile
        return await self.roster.load(
            self._session.identity,
            self._session.active_academic_year,
            profile.class_standard,
            profile.division
        )

    # ============ TRANSITIONS ============
    async def restore(self):
        """Adopt a persisted session saved with remember_me, otherwise clear it"""
        generation = self._new_generation()
        session = await self.store.get_session()
        self._check_generation(generation)
        if session is None:
            return None

        if not session.remember_me:
            await self.store.clear_session()
            return None

        profile = await self.store.get_profile(session.identity)
        self._check_generation(generation)
        academic_year = session.active_academic_year or (profile.academic_year if profile else None)
        self._session = session.model_copy(update={
            'teacher_profile': profile,
            'active_academic_year': academic_year
        })
        logger.info('Restored session for %s', session.identity)

        if profile is not None:
            await self.reload_roster()
        return self._session

    async def create_account(self, email, password, remember_me=True):
        generation = self._new_generation()
        identity = await self.authenticator.create_account(email, password)
        self._check_generation(generation)
        self.roster.reset()
        session = SessionRecord(identity=identity, login_time=self._clock(), remember_me=remember_me)
        return await self._save(session, generation)

    async def login(self, credentials):
        if not isinstance(credentials, Credentials):
            try:
                credentials = Credentials.model_validate(credentials)
            except ValidationError:
                raise InvalidCredentials('Email and password required')

        generation = self._new_generation()
        identity = await self.authenticator.verify(credentials)
        self._check_generation(generation)
        self.roster.reset()

        profile = await self.store.get_profile(identity)
        session = await self._save(SessionRecord(
            identity=identity,
            login_time=self._clock(),
            remember_me=credentials.remember_me,
            teacher_profile=profile
        ), generation)
        logger.info('Login %s (%s)', identity, self.state.value)

        if profile is not None:
            await self.reload_roster()
        return session

    async def complete_profile(self, profile_data):
        self._require_state(SessionState.AUTHENTICATED_NO_PROFILE)
        generation = self._generation
        changes = parse_profile_input(profile_data)
        if not changes.get('email'):
            changes['email'] = self._session.identity

        now = self._clock()
        profile = TeacherProfile(created_at=now, updated_at=now, **changes)
        await self.store.save_profile(self._session.identity, profile)
        self._check_generation(generation)

        session = await self._save(self._session.model_copy(update={
            'teacher_profile': profile,
            'active_academic_year': profile.academic_year
        }), generation)
        logger.info('Profile completed for %s', session.identity)

        await self.reload_roster()
        return session

    async def logout(self):
        self._new_generation()
        # Roster first so no student data stays addressable
        self.roster.reset()
        identity = self.identity
        self._session = None
        await self.store.clear_session()
        if identity:
            logger.info('Logout %s', identity)

    async def change_academic_year(self, academic_year):
        self._require_state(SessionState.AUTHENTICATED_COMPLETE)
        generation = self._generation
        academic_year = (academic_year or '').strip()
        if not academic_year:
            raise ValidationFailed({'academic_year': 'Academic year is required'})

        session = await self._save(self._session.model_copy(update={
            'active_academic_year': academic_year
        }), generation)

        if self.roster.scope is not None:
            self.roster.rescope(academic_year=academic_year)
        else:
            await self.reload_roster()
        return session

    async def update_profile(self, partial):
        self._require_state(SessionState.AUTHENTICATED_COMPLETE)
        generation = self._generation
        changes = parse_profile_input(partial, partial=True)

        current = self._session.teacher_profile
        changes['updated_at'] = max(self._clock(), current.updated_at)
        profile = current.model_copy(update=changes)
        await self.store.save_profile(self._session.identity, profile)
        self._check_generation(generation)

        session = await self._save(self._session.model_copy(update={'teacher_profile': profile}), generation)

        class_changed = 'class_standard' in changes or 'division' in changes
        if class_changed and self.roster.scope is not None:
            self.roster.rescope(class_standard=profile.class_standard, division=profile.division)
        return session
