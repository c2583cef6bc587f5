"""
Small pure helpers shared by the roster and session layers
"""
import re
import uuid
from datetime import date, datetime, timezone


def generate_id():
    """Generate a UUID string for record ids"""
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


def to_date(value):
    """Accept a date, datetime or ISO string and return a date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def calculate_age(birth_date, today=None):
    """
    Whole calendar years between birth_date and today.
    One year is subtracted while today's (month, day) is before the birthday.
    """
    birth = to_date(birth_date)
    today = to_date(today) if today else date.today()

    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age


def digits_only(value):
    return re.sub(r'\D', '', value or '')


def format_aadhaar(aadhaar):
    """Display an Aadhaar number as XXXX XXXX XXXX"""
    cleaned = digits_only(aadhaar)
    if len(cleaned) == 12:
        return f'{cleaned[:4]} {cleaned[4:8]} {cleaned[8:]}'
    return aadhaar


def format_mobile(mobile):
    """Display a mobile number as XXXXX XXXXX"""
    cleaned = digits_only(mobile)
    if len(cleaned) == 10:
        return f'{cleaned[:5]} {cleaned[5:]}'
    return mobile


def format_date(value):
    """e.g. 05 Mar 2012"""
    return to_date(value).strftime('%d %b %Y')


def get_initials(full_name):
    names = (full_name or '').split()
    if not names:
        return ''
    if len(names) == 1:
        return names[0][0].upper()
    return names[0][0].upper() + names[-1][0].upper()


def matches_search(text, query):
    """Case-insensitive substring match"""
    return query.lower() in (text or '').lower()
