# models/__init__.py
from .student import (
    Gender, BloodGroup, CasteCategory,
    StudentRecord, StudentCreateInput, StudentUpdateInput
)
from .teacher import (
    Credentials, TeacherAccount, ProfileInput, TeacherProfile, SessionRecord
)

__all__ = [
    'Gender', 'BloodGroup', 'CasteCategory',
    'StudentRecord', 'StudentCreateInput', 'StudentUpdateInput',
    'Credentials', 'TeacherAccount', 'ProfileInput', 'TeacherProfile', 'SessionRecord'
]
