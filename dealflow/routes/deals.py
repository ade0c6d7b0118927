"""
Deal routes — bearer-protected CRUD over business_ideas.
"""
from flask import Blueprint, request, jsonify

from dealflow.auth import require_auth
from dealflow.services.deals import list_deals, get_deal, create_deal, update_deal, delete_deal

bp = Blueprint('deals', __name__)


@bp.route('/api/deals')
@require_auth
def deals_list():
    """All deals, newest first."""
    return jsonify(list_deals())


@bp.route('/api/deals/<deal_id>')
@require_auth
def deals_get(deal_id):
    return jsonify(get_deal(deal_id))


@bp.route('/api/deals', methods=['POST'])
@require_auth
def deals_create():
    data = request.get_json(silent=True)
    return jsonify(create_deal(data)), 201


@bp.route('/api/deals/<deal_id>', methods=['PUT'])
@require_auth
def deals_update(deal_id):
    data = request.get_json(silent=True)
    return jsonify(update_deal(deal_id, data))


@bp.route('/api/deals/<deal_id>', methods=['DELETE'])
@require_auth
def deals_delete(deal_id):
    # Idempotent: deleting a missing id is still a success
    delete_deal(deal_id)
    return jsonify({'message': 'Deal deleted successfully'})
