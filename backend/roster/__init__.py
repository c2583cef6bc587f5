# roster/__init__.py
from .controller import RosterController
from .view import FilterCriteria, SortSpec, SortField, SortDirection, SessionScope, compute_view

__all__ = [
    'RosterController', 'FilterCriteria', 'SortSpec', 'SortField',
    'SortDirection', 'SessionScope', 'compute_view'
]
