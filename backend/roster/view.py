"""
Derived roster view: session scope, filter criteria and sort order.
compute_view is pure; the same inputs always give the same list.
"""
import enum
from typing import Optional

from pydantic import ConfigDict, field_validator

from models.schema import DocumentModel
from models.student import BloodGroup, CasteCategory, Gender
from utils.helpers import matches_search


class SortField(str, enum.Enum):
    FULL_NAME = 'fullName'
    ROLL_NO = 'rollNo'
    AGE = 'age'
    CLASS_STANDARD = 'classStandard'


class SortDirection(str, enum.Enum):
    ASC = 'asc'
    DESC = 'desc'


# Sort field -> record attribute
SORT_ATTRIBUTES = {
    SortField.FULL_NAME: 'full_name',
    SortField.ROLL_NO: 'roll_no',
    SortField.AGE: 'age',
    SortField.CLASS_STANDARD: 'class_standard',
}

SEARCH_ATTRIBUTES = ('full_name', 'roll_no', 'saral_id', 'aadhaar_no')


class FilterCriteria(DocumentModel):
    """All criteria optional and AND-combined; empty strings count as unset"""
    model_config = ConfigDict(frozen=True, extra='forbid')

    search_query: Optional[str] = None
    class_standard: Optional[str] = None
    division: Optional[str] = None
    gender: Optional[Gender] = None
    caste_category: Optional[CasteCategory] = None
    blood_group: Optional[BloodGroup] = None
    academic_year: Optional[str] = None

    @field_validator('*', mode='before')
    @classmethod
    def blank_as_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SortSpec(DocumentModel):
    model_config = ConfigDict(frozen=True, extra='forbid')

    field: SortField = SortField.FULL_NAME
    direction: SortDirection = SortDirection.ASC


class SessionScope(DocumentModel):
    """Which records the session may see; class fields apply in device-local mode"""
    model_config = ConfigDict(frozen=True)

    owner_id: str
    academic_year: str
    class_standard: Optional[str] = None
    division: Optional[str] = None


def in_scope(record, scope):
    if record.academic_year != scope.academic_year:
        return False
    if scope.class_standard and record.class_standard != scope.class_standard:
        return False
    if scope.division and record.division != scope.division:
        return False
    return True


def apply_scope(records, scope):
    if scope is None:
        return []
    return [r for r in records if r.owner_id == scope.owner_id and in_scope(r, scope)]


def _matches(record, criteria):
    query = criteria.search_query
    if query and not any(matches_search(getattr(record, name), query) for name in SEARCH_ATTRIBUTES):
        return False

    # Exact-match criteria, in order
    for name in ('class_standard', 'division', 'gender', 'caste_category',
                 'blood_group', 'academic_year'):
        wanted = getattr(criteria, name)
        if wanted and getattr(record, name) != wanted:
            return False
    return True


def _sort_key(attribute):
    def key(record):
        value = getattr(record, attribute)
        return value.lower() if isinstance(value, str) else value
    return key


def compute_view(records, criteria, sort_spec, scope):
    """
    Scope first, then each criterion, then a stable sort.
    Ties keep canonical order in both directions.
    """
    result = apply_scope(records, scope)
    result = [r for r in result if _matches(r, criteria)]

    attribute = SORT_ATTRIBUTES[sort_spec.field]
    result.sort(key=_sort_key(attribute), reverse=sort_spec.direction == SortDirection.DESC)
    return result
