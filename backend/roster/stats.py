"""
Dashboard figures over a list of student records
"""
from collections import Counter

from models.student import Gender


def roster_statistics(records):
    genders = Counter(r.gender for r in records)
    classes = Counter(r.class_standard for r in records)
    return {
        'total': len(records),
        'male': genders.get(Gender.MALE, 0),
        'female': genders.get(Gender.FEMALE, 0),
        'other': genders.get(Gender.OTHER, 0),
        'unique_classes': len(classes),
        'by_class': dict(sorted(classes.items())),
    }


def recent_students(records, limit=5):
    """Newest first by creation time"""
    return sorted(records, key=lambda r: r.created_at, reverse=True)[:limit]


def filter_options(records):
    """Distinct classes and divisions for the filter pickers"""
    return {
        'classes': sorted({r.class_standard for r in records}),
        'divisions': sorted({r.division for r in records}),
    }
