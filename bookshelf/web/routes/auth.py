"""
Sign-in routes for Bookshelf Sync.
"""

from flask import Blueprint, jsonify, request

from bookshelf.web.services import get_services, to_json

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _credentials():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    return str(data.get('email') or ''), str(data.get('password') or '')


@auth_bp.route('/signin', methods=['POST'])
def sign_in():
    auth = get_services().auth
    ok = auth.sign_in(*_credentials())
    return jsonify(to_json(auth.login_state.value)), 200 if ok else 401


@auth_bp.route('/signup', methods=['POST'])
def sign_up():
    auth = get_services().auth
    ok = auth.sign_up(*_credentials())
    return jsonify(to_json(auth.login_state.value)), 201 if ok else 400


@auth_bp.route('/signout', methods=['POST'])
def sign_out():
    auth = get_services().auth
    auth.sign_out()
    return jsonify(to_json(auth.login_state.value))


@auth_bp.route('/state')
def state():
    auth = get_services().auth
    return jsonify({
        'logged_in': auth.is_user_logged_in(),
        'uid': auth.current_uid(),
        'login': to_json(auth.login_state.value),
    })
