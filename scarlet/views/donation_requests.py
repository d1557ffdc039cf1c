from flask import Blueprint, jsonify, request

from . import current_actor, json_body, optional_json_body, services, token_required
from ..storage import parse_page_args

requests_bp = Blueprint('donation_requests', __name__, url_prefix='/donation-requests')

MY_REQUESTS_LIMIT = 5
LISTING_LIMIT = 10


@requests_bp.post('')
@token_required
def create_request():
    request_id = services().requests.create(current_actor(), json_body())
    return jsonify({'message': 'Request created', 'id': request_id}), 201


@requests_bp.get('/recent')
@token_required
def recent_requests():
    requests = services().requests.recent(current_actor(), request.args.get('email'))
    return jsonify(requests)


@requests_bp.get('/my-requests')
@token_required
def my_requests():
    page, limit = parse_page_args(request.args, MY_REQUESTS_LIMIT)
    requests, total_pages = services().requests.requests_of(
        current_actor(), page, limit,
        email=request.args.get('email'),
        status=request.args.get('status'),
    )
    return jsonify({'requests': requests, 'total_pages': total_pages})


@requests_bp.get('')
@token_required
def all_requests():
    page, limit = parse_page_args(request.args, LISTING_LIMIT)
    requests, total_pages = services().requests.list_all(
        current_actor(), page, limit, status=request.args.get('status'))
    return jsonify({'requests': requests, 'total_pages': total_pages})


@requests_bp.get('/public')
def public_requests():
    """Anonymous listing; only pending requests are ever exposed"""
    page, limit = parse_page_args(request.args, LISTING_LIMIT)
    requests, total_pages = services().requests.list_public(page, limit)
    return jsonify({'requests': requests, 'total_pages': total_pages})


@requests_bp.get('/<request_id>')
@token_required
def get_request(request_id):
    # TODO: confirm with product whether detail reads should be owner/elevated only
    return jsonify(services().requests.get(request_id))


@requests_bp.put('/<request_id>')
@token_required
def update_request(request_id):
    services().requests.update(current_actor(), request_id, json_body())
    return jsonify({'message': 'Donation request updated successfully'})


@requests_bp.patch('/<request_id>/status')
@token_required
def change_status(request_id):
    status = json_body().get('status')
    services().requests.transition(current_actor(), request_id, status)
    return jsonify({'message': 'Status updated successfully'})


@requests_bp.patch('/<request_id>/donate')
@token_required
def donate(request_id):
    data = optional_json_body()
    services().requests.commit(current_actor(), request_id, data.get('donor_name'))
    return jsonify({'message': 'Donation confirmed successfully'})


@requests_bp.delete('/<request_id>')
@token_required
def delete_request(request_id):
    services().requests.delete(current_actor(), request_id)
    return jsonify({'message': 'Donation request deleted successfully'})
