from flask import Blueprint, jsonify, request

from services import get_services
from utils.tokens import require_auth

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/dashboard')


@dashboard_bp.route('/overview', methods=['GET'])
@require_auth
def overview():
    """
    Dashboard overview for the active class and academic year
    """
    services = get_services()
    roster = services.roster
    limit = request.args.get('limit', 5, type=int)

    def collect():
        return (
            services.sessions.session,
            roster.statistics(),
            roster.recent_students(limit),
            roster.filter_options(),
            roster.is_live
        )

    session, stats, recent, options, live = services.runner.call(collect)
    profile = session.teacher_profile if session else None

    return jsonify({
        'teacher': profile.name if profile else None,
        'class_label': profile.class_label if profile else None,
        'academic_year': session.active_academic_year if session else None,
        'summary': stats,
        'recent_students': [r.to_document() for r in recent],
        'filter_options': options,
        'live': live
    })
