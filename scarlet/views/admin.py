from flask import Blueprint, jsonify, request

from .. import policy
from . import current_actor, services, token_required

admin_bp = Blueprint('admin', __name__)


@admin_bp.get('/')
def home():
    return jsonify({'service': 'scarlet-api', 'ok': True})


@admin_bp.get('/donors/search')
def search_donors():
    """Active donors filtered by exact blood group / district / upazila"""
    donors = services().users.search_donors(
        blood_group=request.args.get('blood_group'),
        district=request.args.get('district'),
        upazila=request.args.get('upazila'),
    )
    return jsonify(donors)


@admin_bp.get('/admin/stats')
@token_required
def stats():
    policy.can_view_stats(current_actor()).raise_for_denial()
    counts = services().requests.counts_by_status()
    return jsonify({
        'total_donors': services().users.count_donors(),
        'total_requests': services().requests.count(),
        'requests_by_status': counts,
    })
