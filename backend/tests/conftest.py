"""
Shared fixtures for the classroom roster tests
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date, datetime, timedelta, timezone
import pytest

from errors import StoreUnavailable
from models.student import StudentRecord
from storage.memory import MemoryRosterStore

OWNER = 'priya.sharma@school.com'
ACADEMIC_YEAR = '2024-2025'
FIXED_NOW = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


class Clock:
    """Adjustable clock passed to controllers and managers"""

    def __init__(self, now=FIXED_NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FlakyRosterStore(MemoryRosterStore):
    """Memory store whose deletes fail for chosen ids"""

    def __init__(self, records=None, live=False, fail_delete=()):
        super().__init__(records, live=live)
        self.fail_delete = set(fail_delete)

    async def delete(self, record_id):
        if record_id in self.fail_delete:
            raise StoreUnavailable('Disk full')
        await super().delete(record_id)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def student_input():
    """Factory for a complete, valid add-student payload (camelCase keys)"""
    def make(**overrides):
        data = {
            'classStandard': '7',
            'division': 'A',
            'rollNo': '1',
            'registerName': 'GR-101',
            'fullName': 'Aarav Mehta',
            'saralId': 'SARAL001',
            'aparId': 'APAR001',
            'penNo': 'PEN001',
            'aadhaarNo': '123456789012',
            'heightCm': '140',
            'weightKg': '35',
            'gender': 'male',
            'birthDate': '2012-03-05',
            'bloodGroup': 'B+',
            'fatherName': 'Suresh Mehta',
            'motherName': 'Kavita Mehta',
            'fatherMobile': '9876543210',
            'motherMobile': '9876543211',
            'motherTongue': 'Marathi',
            'religion': 'Hindu',
            'caste': 'Maratha',
            'casteCategory': 'General',
            'address': '12 MG Road, Pune',
        }
        data.update(overrides)
        return data
    return make


@pytest.fixture
def make_record():
    """Factory for stored StudentRecords owned by OWNER"""
    counter = {'n': 0}

    def make(**overrides):
        counter['n'] += 1
        n = counter['n']
        fields = {
            'id': f'student-{n}',
            'owner_id': OWNER,
            'created_at': FIXED_NOW - timedelta(days=10 - n),
            'updated_at': FIXED_NOW - timedelta(days=10 - n),
            'academic_year': ACADEMIC_YEAR,
            'class_standard': '7',
            'division': 'A',
            'roll_no': str(n),
            'full_name': f'Student {n}',
            'gender': 'female',
            'birth_date': date(2012, 1, 1),
            'age': 12,
            'aadhaar_no': '123456789012',
        }
        fields.update(overrides)
        return StudentRecord(**fields)
    return make
