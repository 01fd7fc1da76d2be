"""
Profile routes for Bookshelf Sync.
"""

from datetime import date

from flask import Blueprint, jsonify, request

from bookshelf.web.services import get_services, to_json

profile_bp = Blueprint('profile', __name__, url_prefix='/api/profile')


def _bad_birth_date():
    return jsonify({'error': 'birthDate must be an ISO date (YYYY-MM-DD)'}), 400


@profile_bp.route('', methods=['GET'])
def get_profile():
    return jsonify(to_json(get_services().profile.load_profile()))


@profile_bp.route('', methods=['PUT'])
def update_profile():
    """
    Update the profile.

    Accepts JSON, or a multipart form with an optional ``image`` file.
    """
    profile = get_services().profile
    data = request.get_json(silent=True) if request.is_json else request.form
    data = data or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'request body must be a JSON object'}), 400

    birth_date = None
    raw_birth_date = data.get('birthDate')
    if raw_birth_date:
        if not isinstance(raw_birth_date, str):
            return _bad_birth_date()
        try:
            birth_date = date.fromisoformat(raw_birth_date)
        except ValueError:
            return _bad_birth_date()

    image = request.files.get('image')
    if image is not None:
        profile.set_selected_image(image.read())

    state = profile.update_profile(
        first_name=data.get('firstName') or '',
        last_name=data.get('lastName') or '',
        second_last_name=data.get('secondLastName') or '',
        birth_date=birth_date,
    )
    return jsonify({
        'update': to_json(state),
        'profile': to_json(profile.profile_state.value),
    }), 400 if state.is_error else 200
