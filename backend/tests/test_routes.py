#!/usr/bin/env python
"""
Tests for the HTTP API
"""
import json

import pytest

from app import create_app

PROFILE = {
    'name': 'Priya Sharma',
    'subject': 'Mathematics',
    'schoolName': 'Demo School',
    'classStandard': '7',
    'division': 'A',
    'academicYear': '2024-2025',
}


class TestApi:
    """Test cases for the auth, students and dashboard blueprints"""

    @pytest.fixture(scope='function')
    def app(self):
        """Create test app on in-memory storage"""
        app = create_app({
            'CLASSROOM_STORAGE': 'memory',
            'SECRET_KEY': 'test-secret',
            'TESTING': True
        })
        yield app
        app.extensions['classroom'].close()

    @pytest.fixture
    def client(self, app):
        return app.test_client()

    @pytest.fixture
    def auth_headers(self, client):
        """Registered teacher with a completed profile"""
        response = client.post('/auth/register', json={
            'email': 'priya.sharma@school.com',
            'password': 'secret1'
        })
        headers = {'Authorization': f"Bearer {response.get_json()['token']}"}
        client.post('/auth/profile', json=PROFILE, headers=headers)
        return headers

    @pytest.fixture
    def student_id(self, client, auth_headers, student_input):
        response = client.post('/students', json=student_input(), headers=auth_headers)
        return response.get_json()['student']['id']

    # ============ AUTH ============
    def test_health(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        data = response.get_json()
        assert data['storage'] == 'memory'
        assert data['session_state'] == 'anonymous'
        assert data['live_updates'] is True

    def test_register_then_complete_profile(self, client):
        response = client.post('/auth/register', json={
            'email': 'rajesh.kumar@school.com',
            'password': 'secret1'
        })
        assert response.status_code == 201
        data = response.get_json()
        assert data['state'] == 'authenticated_no_profile'
        headers = {'Authorization': f"Bearer {data['token']}"}

        response = client.post('/auth/profile', json=PROFILE, headers=headers)
        assert response.status_code == 201
        data = response.get_json()
        assert data['state'] == 'authenticated_complete'
        assert data['classLabel'] == '7-A'
        assert data['session']['activeAcademicYear'] == '2024-2025'

    def test_register_validation_and_duplicates(self, client, auth_headers):
        response = client.post('/auth/register', json={'email': 'bad', 'password': '1'})
        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_FAILED'

        response = client.post('/auth/register', json={
            'email': 'priya.sharma@school.com',
            'password': 'secret1'
        })
        assert response.status_code == 409
        assert response.get_json()['code'] == 'ACCOUNT_EXISTS'

    def test_login(self, client, auth_headers):
        client.post('/auth/logout', headers=auth_headers)

        response = client.post('/auth/login', json={
            'email': 'priya.sharma@school.com',
            'password': 'wrong-password'
        })
        assert response.status_code == 401
        assert response.get_json()['code'] == 'INVALID_CREDENTIALS'

        response = client.post('/auth/login', json={
            'email': 'priya.sharma@school.com',
            'password': 'secret1'
        })
        assert response.status_code == 200
        assert response.get_json()['state'] == 'authenticated_complete'

    def test_requires_token(self, client, auth_headers):
        response = client.get('/students')
        assert response.status_code == 401
        assert response.get_json() == {
            'success': False,
            'error': 'Authentication required',
            'code': 'AUTH_REQUIRED'
        }

        response = client.get('/students', headers={'Authorization': 'Bearer not-a-token'})
        assert response.status_code == 401

    def test_logout_invalidates_token(self, client, auth_headers):
        response = client.post('/auth/logout', headers=auth_headers)
        assert response.status_code == 200
        assert client.get('/auth/session', headers=auth_headers).status_code == 401

    def test_profile_twice_is_conflict(self, client, auth_headers):
        response = client.post('/auth/profile', json=PROFILE, headers=auth_headers)
        assert response.status_code == 409
        assert response.get_json()['code'] == 'INVALID_SESSION_STATE'

    def test_update_profile_and_year(self, client, auth_headers):
        response = client.patch('/auth/profile', json={'subject': 'Physics'}, headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()['session']['teacherProfile']['subject'] == 'Physics'

        response = client.put('/auth/academic-year', json={'academicYear': '2025-2026'}, headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()['session']['activeAcademicYear'] == '2025-2026'

    # ============ STUDENTS ============
    def test_create_and_get_student(self, client, auth_headers, student_id):
        response = client.get(f'/students/{student_id}', headers=auth_headers)
        assert response.status_code == 200
        data = response.get_json()
        assert data['student']['fullName'] == 'Aarav Mehta'
        assert isinstance(data['student']['age'], int)
        assert data['display'] == {
            'initials': 'AM',
            'aadhaarNo': '1234 5678 9012',
            'fatherMobile': '98765 43210',
            'motherMobile': '98765 43211',
            'birthDate': '05 Mar 2012'
        }

    def test_create_student_validation(self, client, auth_headers, student_input):
        response = client.post('/students', json=student_input(aadhaarNo='123'), headers=auth_headers)
        assert response.status_code == 400
        data = response.get_json()
        assert data['code'] == 'VALIDATION_FAILED'
        assert 'aadhaar_no' in data['details']['fields']

    def test_list_filter_and_sort(self, client, auth_headers, student_input):
        for name, standard in (('Zoya Khan', '8'), ('amit Rao', '7'), ('Bob Dsouza', '7')):
            client.post('/students', json=student_input(fullName=name, classStandard=standard), headers=auth_headers)

        response = client.get('/students', headers=auth_headers)
        names = [s['fullName'] for s in response.get_json()['students']]
        assert names == ['amit Rao', 'Bob Dsouza', 'Zoya Khan']

        response = client.get('/students?classStandard=7&sort=fullName&order=desc', headers=auth_headers)
        data = response.get_json()
        assert [s['fullName'] for s in data['students']] == ['Bob Dsouza', 'amit Rao']
        assert data['total'] == 2

        response = client.get('/students?search=zoya', headers=auth_headers)
        assert response.get_json()['total'] == 1

        response = client.get('/students?sort=shoeSize', headers=auth_headers)
        assert response.status_code == 400

    def test_list_reports_applied_view(self, client, auth_headers, student_id):
        response = client.get('/students?gender=male&bloodGroup=&order=desc', headers=auth_headers)
        data = response.get_json()
        assert data['filters']['gender'] == 'male'
        assert data['filters']['bloodGroup'] is None
        assert data['sort'] == {'field': 'fullName', 'direction': 'desc'}
        assert data['live'] is True
        assert [s['id'] for s in data['students']] == [student_id]

    def test_sample_students(self, client, auth_headers):
        response = client.post('/students/sample', json={'count': 3}, headers=auth_headers)
        assert response.status_code == 201
        data = response.get_json()
        assert data['total'] == 3
        assert all(s['academicYear'] == '2024-2025' for s in data['students'])

        assert client.get('/students', headers=auth_headers).get_json()['total'] == 3
        response = client.post('/students/sample', headers=auth_headers)
        assert response.get_json()['total'] == 10

        for count in (0, 101, 'many'):
            response = client.post('/students/sample', json={'count': count}, headers=auth_headers)
            assert response.status_code == 400
        assert client.post('/students/sample').status_code == 401

    def test_update_and_delete_student(self, client, auth_headers, student_id):
        response = client.patch(f'/students/{student_id}', json={'fullName': 'Aarav M. Mehta'}, headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()['student']['fullName'] == 'Aarav M. Mehta'

        assert client.delete(f'/students/{student_id}', headers=auth_headers).status_code == 200
        response = client.delete(f'/students/{student_id}', headers=auth_headers)
        assert response.status_code == 404
        assert response.get_json()['code'] == 'NOT_FOUND'
        assert client.get(f'/students/{student_id}', headers=auth_headers).status_code == 404

    def test_clear_and_refresh(self, client, auth_headers, student_id):
        assert client.delete('/students', headers=auth_headers).status_code == 200
        response = client.post('/students/refresh', headers=auth_headers)
        assert response.get_json()['total'] == 0

    # ============ BACKUP ============
    def test_export_then_import(self, client, auth_headers, student_id):
        response = client.get('/students/export', headers=auth_headers)
        assert response.status_code == 200
        assert response.headers['Content-Disposition'].startswith('attachment; filename=students-backup-')
        exported = json.loads(response.get_data(as_text=True))
        assert [s['id'] for s in exported] == [student_id]

        client.delete('/students', headers=auth_headers)
        response = client.post(
            '/students/import',
            data=json.dumps(exported),
            content_type='application/json',
            headers=auth_headers
        )
        assert response.status_code == 200
        assert response.get_json()['total'] == 1
        assert client.get(f'/students/{student_id}', headers=auth_headers).status_code == 200

    def test_invalid_import(self, client, auth_headers, student_id):
        response = client.post(
            '/students/import',
            data=json.dumps([{'id': 'x', 'fullName': 'No Roll'}]),
            content_type='application/json',
            headers=auth_headers
        )
        assert response.status_code == 400
        assert response.get_json()['code'] == 'INVALID_IMPORT_DATA'
        assert client.get(f'/students/{student_id}', headers=auth_headers).status_code == 200

    # ============ DASHBOARD ============
    def test_dashboard_overview(self, client, auth_headers, student_id):
        response = client.get('/dashboard/overview', headers=auth_headers)
        assert response.status_code == 200
        data = response.get_json()
        assert data['class_label'] == '7-A'
        assert data['summary']['total'] == 1
        assert data['summary']['male'] == 1
        assert [s['id'] for s in data['recent_students']] == [student_id]
        assert data['filter_options'] == {'classes': ['7'], 'divisions': ['A']}

    def test_unknown_endpoint(self, client):
        response = client.get('/does-not-exist')
        assert response.status_code == 404
        assert response.get_json()['success'] is False
