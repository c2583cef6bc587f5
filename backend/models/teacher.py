"""
Teacher accounts, profiles and the persisted login session
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import ConfigDict, field_validator, model_validator

from .schema import DocumentModel


class Credentials(DocumentModel):
    model_config = ConfigDict(extra='ignore')

    email: str
    password: str
    remember_me: bool = True


class TeacherAccount(DocumentModel):
    """Password account; identity is the lower-cased email"""
    identity: str
    password_hash: str
    created_at: datetime


class ProfileInput(DocumentModel):
    """Fields a teacher fills in to complete or edit a profile"""
    model_config = ConfigDict(extra='forbid')

    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    school_name: Optional[str] = None
    class_standard: Optional[str] = None
    division: Optional[str] = None
    academic_year: Optional[str] = None
    phone_number: Optional[str] = None
    photo_ref: Optional[str] = None

    def changes(self):
        return {name: getattr(self, name) for name in self.model_fields_set}


class TeacherProfile(DocumentModel):
    name: str
    email: str
    subject: str
    school_name: str
    class_standard: str
    division: Optional[str] = None
    academic_year: str
    phone_number: Optional[str] = None
    photo_ref: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator('created_at', 'updated_at')
    @classmethod
    def assume_utc(cls, value):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def class_label(self):
        """e.g. 7-A, or 12 when no division is set"""
        if self.division:
            return f'{self.class_standard}-{self.division}'
        return self.class_standard


class SessionRecord(DocumentModel):
    """The logged-in context; teacher_profile is absent until the profile is complete"""
    identity: str
    login_time: datetime
    remember_me: bool = True
    teacher_profile: Optional[TeacherProfile] = None
    active_academic_year: Optional[str] = None

    @model_validator(mode='after')
    def default_academic_year(self):
        if self.teacher_profile is not None and not self.active_academic_year:
            self.active_academic_year = self.teacher_profile.academic_year
        return self

    @property
    def has_profile(self):
        return self.teacher_profile is not None
