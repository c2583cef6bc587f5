"""
Tests for the derived roster view and dashboard figures
"""
from conftest import ACADEMIC_YEAR, OWNER

import pytest

from roster.stats import filter_options, recent_students, roster_statistics
from roster.view import (
    FilterCriteria, SessionScope, SortDirection, SortField, SortSpec, compute_view
)


@pytest.fixture
def scope():
    return SessionScope(owner_id=OWNER, academic_year=ACADEMIC_YEAR)


class TestComputeView:

    def test_sort_by_name_is_case_insensitive(self, make_record, scope):
        records = [make_record(full_name=name) for name in ('Zoya', 'amit', 'Bob')]
        view = compute_view(records, FilterCriteria(), SortSpec(), scope)
        assert [r.full_name for r in view] == ['amit', 'Bob', 'Zoya']

    def test_descending_sort(self, make_record, scope):
        records = [make_record(age=age) for age in (11, 13, 12)]
        spec = SortSpec(field=SortField.AGE, direction=SortDirection.DESC)
        assert [r.age for r in compute_view(records, FilterCriteria(), spec, scope)] == [13, 12, 11]

    def test_ties_keep_canonical_order(self, make_record, scope):
        records = [make_record(full_name='Same') for _ in range(3)]
        view = compute_view(records, FilterCriteria(), SortSpec(), scope)
        assert [r.id for r in view] == [r.id for r in records]

    def test_pure(self, make_record, scope):
        records = [make_record(), make_record(class_standard='8')]
        criteria = FilterCriteria(class_standard='7')
        first = compute_view(records, criteria, SortSpec(), scope)
        second = compute_view(records, criteria, SortSpec(), scope)
        assert first == second
        assert len(records) == 2

    def test_scope_hides_other_years_and_owners(self, make_record, scope):
        records = [
            make_record(),
            make_record(academic_year='2023-2024'),
            make_record(owner_id='someone.else@school.com'),
        ]
        view = compute_view(records, FilterCriteria(), SortSpec(), scope)
        assert [r.id for r in view] == [records[0].id]

    def test_class_scope(self, make_record):
        scope = SessionScope(owner_id=OWNER, academic_year=ACADEMIC_YEAR, class_standard='7', division='A')
        records = [make_record(), make_record(division='B')]
        assert len(compute_view(records, FilterCriteria(), SortSpec(), scope)) == 1

    def test_no_scope_shows_nothing(self, make_record):
        assert compute_view([make_record()], FilterCriteria(), SortSpec(), None) == []

    def test_search_matches_name_roll_saral_aadhaar(self, make_record, scope):
        records = [
            make_record(full_name='Aarav Mehta'),
            make_record(roll_no='42'),
            make_record(saral_id='SRL-777'),
            make_record(aadhaar_no='999988887777'),
        ]
        for query, expected in (('mehta', 0), ('42', 1), ('srl-7', 2), ('99998888', 3)):
            view = compute_view(records, FilterCriteria(search_query=query), SortSpec(), scope)
            assert [r.id for r in view] == [records[expected].id]

    def test_criteria_are_and_combined(self, make_record, scope):
        records = [
            make_record(gender='male', class_standard='7'),
            make_record(gender='male', class_standard='8'),
            make_record(gender='female', class_standard='7'),
        ]
        criteria = FilterCriteria(gender='male', class_standard='7')
        assert [r.id for r in compute_view(records, criteria, SortSpec(), scope)] == [records[0].id]

    def test_empty_strings_are_unset(self, make_record, scope):
        records = [make_record(), make_record()]
        criteria = FilterCriteria(search_query='', class_standard='')
        assert len(compute_view(records, criteria, SortSpec(), scope)) == 2

    def test_blank_enum_criteria_are_unset(self):
        criteria = FilterCriteria(gender='', blood_group=' ', caste_category='', division='')
        assert criteria == FilterCriteria()
        assert FilterCriteria.model_validate({'bloodGroup': ''}).blood_group is None


class TestStats:

    def test_statistics(self, make_record):
        records = [
            make_record(gender='male', class_standard='7'),
            make_record(gender='female', class_standard='7'),
            make_record(gender='other', class_standard='8'),
        ]
        stats = roster_statistics(records)
        assert stats['total'] == 3
        assert (stats['male'], stats['female'], stats['other']) == (1, 1, 1)
        assert stats['unique_classes'] == 2
        assert stats['by_class'] == {'7': 2, '8': 1}

    def test_recent_students_newest_first(self, make_record):
        records = [make_record() for _ in range(7)]
        recent = recent_students(records, limit=5)
        assert [r.id for r in recent] == [r.id for r in reversed(records)][:5]

    def test_filter_options(self, make_record):
        records = [make_record(class_standard='8', division='B'), make_record()]
        assert filter_options(records) == {'classes': ['7', '8'], 'divisions': ['A', 'B']}
