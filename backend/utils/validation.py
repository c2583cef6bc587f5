"""
Explicit validation for roster and profile input.
Runs before any store call; every failure raises ValidationFailed.
"""
import re
from datetime import date

from pydantic import ValidationError

from errors import ValidationFailed
from models.student import StudentCreateInput, StudentUpdateInput
from models.teacher import ProfileInput
from .helpers import digits_only

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
MIN_PASSWORD_LENGTH = 6

# field -> (minimum length, message)
STUDENT_TEXT_RULES = {
    'roll_no': (1, 'Roll number is required'),
    'register_name': (1, 'Register name is required'),
    'full_name': (2, 'Full name must be at least 2 characters'),
    'class_standard': (1, 'Class standard is required'),
    'division': (1, 'Division is required'),
    'saral_id': (1, 'Saral ID is required'),
    'apar_id': (1, 'Apar ID is required'),
    'pen_no': (1, 'PEN number is required'),
    'aadhaar_no': (1, 'Aadhaar number is required'),
    'weight_kg': (1, 'Weight is required'),
    'height_cm': (1, 'Height is required'),
    'father_name': (2, 'Father name must be at least 2 characters'),
    'mother_name': (2, 'Mother name must be at least 2 characters'),
    'father_mobile': (1, 'Father mobile number is required'),
    'mother_mobile': (1, 'Mother mobile number is required'),
    'mother_tongue': (1, 'Mother tongue is required'),
    'religion': (1, 'Religion is required'),
    'caste': (1, 'Caste is required'),
    'address': (5, 'Address must be at least 5 characters'),
}

# Record fields that may not be cleared by an update
STUDENT_REQUIRED_VALUES = set(STUDENT_TEXT_RULES) | {
    'academic_year', 'gender', 'birth_date', 'blood_group', 'caste_category'
}

PROFILE_TEXT_RULES = {
    'name': (3, 'Full name must be at least 3 characters'),
    'subject': (2, 'Subject must be at least 2 characters'),
    'school_name': (3, 'School name must be at least 3 characters'),
    'class_standard': (1, 'Class is required'),
    'academic_year': (1, 'Academic year is required'),
}


def _pydantic_errors(error):
    errors = {}
    for item in error.errors():
        field = '.'.join(str(part) for part in item['loc']) or 'input'
        errors.setdefault(field, item['msg'])
    return errors


def is_valid_aadhaar(value):
    return len(digits_only(value)) == 12


def is_valid_mobile(value):
    return len(digits_only(value)) == 10


def is_valid_email(value):
    return bool(value and re.match(EMAIL_PATTERN, value))


def _check_text(fields, rules, errors, partial):
    for field, (min_length, message) in rules.items():
        if partial and field not in fields:
            continue
        value = fields.get(field)
        if value is None or len(str(value).strip()) < min_length:
            errors[field] = message


def validate_student_fields(fields, partial=False, today=None):
    """
    Check format rules over snake_case student fields.
    With partial=True only the fields present are checked.
    """
    errors = {}
    _check_text(fields, STUDENT_TEXT_RULES, errors, partial)

    if partial:
        for field in STUDENT_REQUIRED_VALUES:
            if field in fields and fields[field] is None:
                errors.setdefault(field, f'{field} cannot be cleared')

    if fields.get('aadhaar_no') and not is_valid_aadhaar(fields['aadhaar_no']):
        errors['aadhaar_no'] = 'Aadhaar number must be 12 digits'

    for field in ('father_mobile', 'mother_mobile'):
        if fields.get(field) and not is_valid_mobile(fields[field]):
            errors[field] = 'Mobile number must be 10 digits'

    birth_date = fields.get('birth_date')
    if birth_date is not None and birth_date > (today or date.today()):
        errors['birth_date'] = 'Birth date cannot be in the future'

    if 'academic_year' in fields and fields['academic_year'] is not None:
        if not str(fields['academic_year']).strip():
            errors['academic_year'] = 'Academic year is required'

    if fields.get('bank_account_no') and not digits_only(fields['bank_account_no']):
        errors['bank_account_no'] = 'Bank account number must contain digits'

    if errors:
        raise ValidationFailed(errors)


def parse_create_input(data, today=None):
    """Parse and validate a StudentCreateInput (or a camelCase/snake_case dict)"""
    if not isinstance(data, StudentCreateInput):
        try:
            data = StudentCreateInput.model_validate(data)
        except ValidationError as e:
            raise ValidationFailed(_pydantic_errors(e))

    validate_student_fields(dict(data), today=today)
    return data


def parse_update_input(data, today=None):
    """Parse and validate a StudentUpdateInput; returns (id, changes)"""
    if not isinstance(data, StudentUpdateInput):
        try:
            data = StudentUpdateInput.model_validate(data)
        except ValidationError as e:
            raise ValidationFailed(_pydantic_errors(e))

    changes = data.changes()
    validate_student_fields(changes, partial=True, today=today)
    return data.id, changes


def parse_profile_input(data, partial=False):
    """Parse and validate profile fields; returns the changes dict"""
    if not isinstance(data, ProfileInput):
        try:
            data = ProfileInput.model_validate(data)
        except ValidationError as e:
            raise ValidationFailed(_pydantic_errors(e))

    changes = data.changes()
    errors = {}
    _check_text(changes, PROFILE_TEXT_RULES, errors, partial)

    if 'email' in changes and changes['email'] is None and partial:
        errors['email'] = 'Email is required'
    elif changes.get('email') and not is_valid_email(changes['email']):
        errors['email'] = 'Invalid email format'

    if changes.get('phone_number') and not is_valid_mobile(changes['phone_number']):
        errors['phone_number'] = 'Mobile number must be 10 digits'

    if errors:
        raise ValidationFailed(errors)
    return changes


def validate_account(email, password):
    errors = {}
    if not email:
        errors['email'] = 'Email is required'
    elif not is_valid_email(email):
        errors['email'] = 'Invalid email format'

    if not password:
        errors['password'] = 'Password is required'
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors['password'] = f'Password must be at least {MIN_PASSWORD_LENGTH} characters'

    if errors:
        raise ValidationFailed(errors)
