"""
Tests for formatting and age helpers
"""
from datetime import date, datetime, timezone

from utils.helpers import (
    calculate_age, format_aadhaar, format_date, format_mobile,
    generate_id, get_initials, matches_search, to_date
)


class TestCalculateAge:

    def test_day_before_birthday(self):
        assert calculate_age(date(2010, 5, 15), date(2024, 5, 14)) == 13

    def test_on_birthday(self):
        assert calculate_age(date(2010, 5, 15), date(2024, 5, 15)) == 14

    def test_accepts_iso_strings_and_datetimes(self):
        today = datetime(2024, 5, 15, 8, 30, tzinfo=timezone.utc)
        assert calculate_age('2010-05-15', today) == 14

    def test_earlier_month_same_day(self):
        assert calculate_age(date(2010, 12, 1), date(2024, 6, 1)) == 13


class TestFormatting:

    def test_format_aadhaar(self):
        assert format_aadhaar('123456789012') == '1234 5678 9012'

    def test_format_aadhaar_leaves_invalid_values(self):
        assert format_aadhaar('12345') == '12345'

    def test_format_mobile(self):
        assert format_mobile('9876543210') == '98765 43210'
        assert format_mobile('98765') == '98765'

    def test_format_date(self):
        assert format_date('2012-03-05') == '05 Mar 2012'

    def test_initials(self):
        assert get_initials('Aarav Mehta') == 'AM'
        assert get_initials('aarav kumar mehta') == 'AM'
        assert get_initials('Aarav') == 'A'
        assert get_initials('') == ''

    def test_matches_search_is_case_insensitive(self):
        assert matches_search('Aarav Mehta', 'MEH')
        assert not matches_search('Aarav Mehta', 'xyz')
        assert not matches_search(None, 'a')


class TestMisc:

    def test_to_date(self):
        assert to_date('2024-06-01T09:00:00Z') == date(2024, 6, 1)

    def test_generate_id_is_unique(self):
        assert generate_id() != generate_id()
