# routes/auth.py
from flask import Blueprint, request, jsonify

from errors import ValidationFailed
from services import get_services
from utils.tokens import issue_token, require_auth

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def session_payload(services):
    """Current session as JSON, with the derived state"""
    sessions = services.sessions
    session, state = services.runner.call(lambda: (sessions.session, sessions.state))
    payload = {
        'state': state.value,
        'session': session.to_document() if session else None,
    }
    if session and session.has_profile:
        payload['classLabel'] = session.teacher_profile.class_label
    return payload


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationFailed({'body': 'Expected a JSON object'})
    return data


# ================= ACCOUNT =================
@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Create a password account and log it in.
    The teacher profile is completed afterwards via POST /auth/profile.
    """
    data = _json_body()
    services = get_services()

    session = services.runner.run(services.sessions.create_account(
        data.get('email'),
        data.get('password'),
        bool(data.get('rememberMe', True))
    ))

    return jsonify({
        'message': 'Account created. Please complete your teacher profile.',
        'token': issue_token(session.identity),
        **session_payload(services)
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = _json_body()
    services = get_services()

    session = services.runner.run(services.sessions.login(data))

    return jsonify({
        'message': 'Login successful',
        'token': issue_token(session.identity),
        **session_payload(services)
    })


@auth_bp.route('/logout', methods=['POST'])
@require_auth
def logout():
    services = get_services()
    services.runner.run(services.sessions.logout())
    return jsonify({'message': 'Logged out successfully'})


@auth_bp.route('/session', methods=['GET'])
@require_auth
def get_session():
    return jsonify(session_payload(get_services()))


# ================= PROFILE =================
@auth_bp.route('/profile', methods=['POST'])
@require_auth
def complete_profile():
    """
    Complete the teacher profile once after registration.
    Loads the roster for the profile's class and academic year.
    """
    services = get_services()
    services.runner.run(services.sessions.complete_profile(_json_body()))
    return jsonify({
        'message': 'Profile completed successfully',
        **session_payload(services)
    }), 201


@auth_bp.route('/profile', methods=['PATCH'])
@require_auth
def update_profile():
    services = get_services()
    services.runner.run(services.sessions.update_profile(_json_body()))
    return jsonify({
        'message': 'Profile updated successfully',
        **session_payload(services)
    })


@auth_bp.route('/academic-year', methods=['PUT'])
@require_auth
def change_academic_year():
    data = _json_body()
    services = get_services()
    services.runner.run(services.sessions.change_academic_year(data.get('academicYear')))
    return jsonify({
        'message': 'Academic year changed',
        **session_payload(services)
    })
