"""
Tests for configuration loading and the error payloads
"""
import pytest

from config import get_database_uri, load_config
from errors import NotFound, StoreUnavailable, ValidationFailed


class TestConfig:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv('CLASSROOM_STORAGE', raising=False)
        monkeypatch.delenv('STORE_TIMEOUT', raising=False)
        config = load_config()
        assert config['CLASSROOM_STORAGE'] == 'local'
        assert config['STORE_TIMEOUT'] == 10.0

    def test_environment_and_overrides(self, monkeypatch):
        monkeypatch.setenv('CLASSROOM_STORAGE', 'SQL')
        monkeypatch.setenv('STORE_TIMEOUT', '2.5')
        config = load_config({'SECRET_KEY': 'override'})
        assert config['CLASSROOM_STORAGE'] == 'sql'
        assert config['STORE_TIMEOUT'] == 2.5
        assert config['SECRET_KEY'] == 'override'

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            load_config({'CLASSROOM_STORAGE': 'cloud'})

    def test_postgres_url_normalised(self, monkeypatch):
        monkeypatch.setenv('DATABASE_URL', 'postgres://user:pw@db/roster')
        assert get_database_uri() == 'postgresql://user:pw@db/roster'

    def test_sqlite_fallback(self, monkeypatch):
        monkeypatch.delenv('DATABASE_URL', raising=False)
        assert get_database_uri().startswith('sqlite:///')


class TestErrors:

    def test_payload(self):
        error = NotFound('Student s1 not found')
        assert error.status_code == 404
        assert error.to_dict() == {
            'success': False,
            'error': 'Student s1 not found',
            'code': 'NOT_FOUND'
        }

    def test_details(self):
        error = StoreUnavailable(failed_ids=['a'])
        assert error.message == StoreUnavailable.default_message
        assert error.to_dict()['details'] == {'failed_ids': ['a']}

    def test_validation_fields(self):
        error = ValidationFailed({'full_name': 'Required'})
        assert error.errors == {'full_name': 'Required'}
        assert error.to_dict()['details'] == {'fields': {'full_name': 'Required'}}
