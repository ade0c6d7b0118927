"""
User routes — caller's own profile and the admin-only listing.
"""
from flask import Blueprint, jsonify, g

from dealflow.auth import require_auth, require_admin
from dealflow.services.profiles import fetch_or_create_profile, list_profiles

bp = Blueprint('users', __name__)

PROFILE_SOURCE_HEADER = 'X-Profile-Source'


@bp.route('/api/user/profile')
@require_auth
def user_profile():
    result = fetch_or_create_profile(g.user)
    resp = jsonify(result.profile)
    resp.headers[PROFILE_SOURCE_HEADER] = result.outcome.value
    return resp


@bp.route('/api/users')
@require_admin
def users_list():
    return jsonify(list_profiles())
