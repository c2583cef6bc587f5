from flask import Blueprint, Response, request, jsonify

from errors import NotFound, ValidationFailed
from seed import SAMPLE_STUDENT_COUNT, seed_sample_students
from services import get_services
from utils.helpers import format_aadhaar, format_date, format_mobile, get_initials, utcnow
from utils.tokens import require_auth

students_bp = Blueprint('students', __name__, url_prefix='/students')

# Query parameter -> filter criteria key
FILTER_PARAMS = {
    'search': 'searchQuery',
    'classStandard': 'classStandard',
    'division': 'division',
    'gender': 'gender',
    'casteCategory': 'casteCategory',
    'bloodGroup': 'bloodGroup',
    'academicYear': 'academicYear',
}


def student_display(record):
    """Formatted values for the details screen"""
    return {
        'initials': get_initials(record.full_name),
        'aadhaarNo': format_aadhaar(record.aadhaar_no),
        'fatherMobile': format_mobile(record.father_mobile),
        'motherMobile': format_mobile(record.mother_mobile),
        'birthDate': format_date(record.birth_date),
    }


def _json_object():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationFailed({'body': 'Expected a JSON object'})
    return data


@students_bp.route('', methods=['GET'])
@require_auth
def get_students():
    """
    Filtered, sorted view of the session's students.

    Query params: search, classStandard, division, gender, casteCategory,
    bloodGroup, academicYear, sort (fullName|rollNo|age|classStandard), order (asc|desc)
    """
    services = get_services()
    roster = services.roster

    criteria = {}
    for param, key in FILTER_PARAMS.items():
        value = request.args.get(param, '').strip()
        if value:
            criteria[key] = value
    sort = {
        'field': request.args.get('sort', 'fullName'),
        'direction': request.args.get('order', 'asc').lower()
    }

    def refresh_view():
        roster.set_filter(criteria)
        roster.set_sort(sort)
        return roster.visible, roster.criteria, roster.sort_spec, roster.is_live

    visible, applied, spec, live = services.runner.call(refresh_view)

    return jsonify({
        'students': [r.to_document() for r in visible],
        'total': len(visible),
        'filters': applied.to_document(),
        'sort': spec.to_document(),
        'live': live
    })


@students_bp.route('/<student_id>', methods=['GET'])
@require_auth
def get_student(student_id):
    services = get_services()
    record = services.runner.call(services.roster.get_by_id, student_id)
    if record is None:
        raise NotFound(f'Student {student_id} not found')

    return jsonify({
        'student': record.to_document(),
        'display': student_display(record)
    })


@students_bp.route('', methods=['POST'])
@require_auth
def create_student():
    services = get_services()
    record = services.runner.run(services.roster.add(_json_object()))
    return jsonify({
        'message': 'Student added successfully',
        'student': record.to_document()
    }), 201


@students_bp.route('/<student_id>', methods=['PATCH'])
@require_auth
def update_student(student_id):
    services = get_services()
    data = {**_json_object(), 'id': student_id}
    record = services.runner.run(services.roster.update(data))
    return jsonify({
        'message': 'Student updated successfully',
        'student': record.to_document()
    })


@students_bp.route('/<student_id>', methods=['DELETE'])
@require_auth
def delete_student(student_id):
    services = get_services()
    services.runner.run(services.roster.delete(student_id))
    return jsonify({'message': 'Student deleted successfully'})


@students_bp.route('', methods=['DELETE'])
@require_auth
def clear_students():
    """Delete every student of the session"""
    services = get_services()
    services.runner.run(services.roster.clear_all())
    return jsonify({'message': 'All students deleted'})


@students_bp.route('/refresh', methods=['POST'])
@require_auth
def refresh_students():
    services = get_services()
    records = services.runner.run(services.roster.refresh())
    return jsonify({
        'message': 'Students reloaded',
        'total': len(records)
    })


# ================= BACKUP =================
@students_bp.route('/export', methods=['GET'])
@require_auth
def export_students():
    """Download every student of the session as a JSON file"""
    services = get_services()
    body = services.runner.call(services.roster.export_all)
    filename = f"students-backup-{utcnow().strftime('%Y-%m-%d')}.json"

    return Response(
        body,
        mimetype='application/json',
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )


@students_bp.route('/import', methods=['POST'])
@require_auth
def import_students():
    """
    Replace every student of the session with an exported JSON array.
    Either the whole file is accepted or nothing changes.
    """
    services = get_services()
    records = services.runner.run(services.roster.import_all(request.get_data(as_text=True)))
    return jsonify({
        'message': f'Imported {len(records)} students',
        'total': len(records)
    })


@students_bp.route('/sample', methods=['POST'])
@require_auth
def add_sample_students():
    """Add generated students to the session; optional JSON body {"count": n} (1-100)"""
    data = request.get_json(silent=True) or {}
    count = data.get('count', SAMPLE_STUDENT_COUNT) if isinstance(data, dict) else None
    if not isinstance(count, int) or isinstance(count, bool) or not 1 <= count <= 100:
        raise ValidationFailed({'count': 'Count must be a number between 1 and 100'})

    services = get_services()
    records = services.runner.run(seed_sample_students(services.roster, count))
    return jsonify({
        'message': f'Added {len(records)} sample students',
        'students': [r.to_document() for r in records],
        'total': len(records)
    }), 201
