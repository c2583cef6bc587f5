"""
Student records for the classroom roster.
StudentRecord is immutable; updates produce a new record.
"""
import enum
from datetime import date, datetime, timezone
from typing import Optional

from pydantic import ConfigDict, field_validator, model_validator

from .schema import DocumentModel


class Gender(str, enum.Enum):
    MALE = 'male'
    FEMALE = 'female'
    OTHER = 'other'


class BloodGroup(str, enum.Enum):
    A_POSITIVE = 'A+'
    A_NEGATIVE = 'A-'
    B_POSITIVE = 'B+'
    B_NEGATIVE = 'B-'
    AB_POSITIVE = 'AB+'
    AB_NEGATIVE = 'AB-'
    O_POSITIVE = 'O+'
    O_NEGATIVE = 'O-'


class CasteCategory(str, enum.Enum):
    GENERAL = 'General'
    OBC = 'OBC'
    SC = 'SC'
    ST = 'ST'
    EWS = 'EWS'
    OTHER = 'Other'


class StudentRecord(DocumentModel):
    """One enrolled student, as held in the canonical list and the stores"""
    model_config = ConfigDict(frozen=True)

    # ============ SYSTEM FIELDS ============
    id: str
    owner_id: str
    created_at: datetime
    updated_at: datetime

    # ============ ACADEMIC SCOPE ============
    academic_year: str
    class_standard: str
    division: str

    # ============ IDENTITY DOCUMENTS ============
    roll_no: str
    register_name: str = ''
    full_name: str
    saral_id: str = ''
    apar_id: str = ''
    pen_no: str = ''
    aadhaar_no: str = ''

    # ============ PHYSICAL ============
    height_cm: str = ''
    weight_kg: str = ''

    # ============ PERSONAL ============
    gender: Gender
    birth_date: date
    age: int
    blood_group: Optional[BloodGroup] = None

    # ============ FAMILY ============
    father_name: str = ''
    mother_name: str = ''
    father_mobile: str = ''
    mother_mobile: str = ''

    # ============ CULTURAL ============
    mother_tongue: str = ''
    religion: str = ''
    caste: str = ''
    caste_category: Optional[CasteCategory] = None

    # ============ OTHER ============
    address: str = ''
    bank_account_no: Optional[str] = None
    notes: Optional[str] = None
    photo_ref: Optional[str] = None

    @field_validator('created_at', 'updated_at')
    @classmethod
    def assume_utc(cls, value):
        # Naive timestamps from older exports are read as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode='after')
    def check_timestamps(self):
        if self.updated_at < self.created_at:
            raise ValueError('updatedAt must not be earlier than createdAt')
        return self

    def __repr__(self):
        return f'<Student {self.full_name} ({self.roll_no})>'


class StudentCreateInput(DocumentModel):
    """Caller-supplied fields for a new student; system fields are assigned on add"""
    model_config = ConfigDict(extra='forbid')

    academic_year: Optional[str] = None
    class_standard: str
    division: str

    roll_no: str
    register_name: str
    full_name: str
    saral_id: str
    apar_id: str
    pen_no: str
    aadhaar_no: str

    height_cm: str
    weight_kg: str

    gender: Gender
    birth_date: date
    blood_group: BloodGroup

    father_name: str
    mother_name: str
    father_mobile: str
    mother_mobile: str

    mother_tongue: str
    religion: str
    caste: str
    caste_category: CasteCategory

    address: str
    bank_account_no: Optional[str] = None
    notes: Optional[str] = None
    photo_ref: Optional[str] = None


class StudentUpdateInput(DocumentModel):
    """Partial update; only fields explicitly provided are merged"""
    model_config = ConfigDict(extra='forbid')

    id: str

    academic_year: Optional[str] = None
    class_standard: Optional[str] = None
    division: Optional[str] = None

    roll_no: Optional[str] = None
    register_name: Optional[str] = None
    full_name: Optional[str] = None
    saral_id: Optional[str] = None
    apar_id: Optional[str] = None
    pen_no: Optional[str] = None
    aadhaar_no: Optional[str] = None

    height_cm: Optional[str] = None
    weight_kg: Optional[str] = None

    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    blood_group: Optional[BloodGroup] = None

    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    father_mobile: Optional[str] = None
    mother_mobile: Optional[str] = None

    mother_tongue: Optional[str] = None
    religion: Optional[str] = None
    caste: Optional[str] = None
    caste_category: Optional[CasteCategory] = None

    address: Optional[str] = None
    bank_account_no: Optional[str] = None
    notes: Optional[str] = None
    photo_ref: Optional[str] = None

    def changes(self):
        """Fields the caller actually set, without the id"""
        patch = {name: getattr(self, name) for name in self.model_fields_set}
        patch.pop('id', None)
        return patch
