from flask import Blueprint, jsonify, request

from .. import policy
from ..errors import NotFoundError
from ..models import new_user
from ..storage import parse_page_args
from . import current_actor, json_body, services, token_required

users_bp = Blueprint('users', __name__)

USERS_PAGE_LIMIT = 10


@users_bp.post('/users')
def register():
    """Public registration; always creates an active donor"""
    user = new_user(json_body())
    user_id = services().users.create(user)
    return jsonify({'message': 'User registered successfully', 'user_id': user_id}), 201


@users_bp.get('/users/profile')
@token_required
def get_profile():
    return jsonify(current_actor())


@users_bp.put('/users/profile')
@token_required
def update_profile():
    actor = current_actor()
    return jsonify(services().users.update_profile(actor['email'], json_body()))


@users_bp.get('/users/<email>/role')
@token_required
def get_role(email):
    user = services().users.find_by_email(email)
    if not user:
        raise NotFoundError('User not found')
    return jsonify({'role': user['role']})


@users_bp.get('/users')
@token_required
def list_users():
    policy.can_manage_users(current_actor()).raise_for_denial()
    page, limit = parse_page_args(request.args, USERS_PAGE_LIMIT)
    users, total_pages = services().users.list_users(page, limit, request.args.get('status'))
    return jsonify({'users': users, 'total_pages': total_pages})


@users_bp.patch('/users/<user_id>/status')
@token_required
def set_status(user_id):
    policy.can_manage_users(current_actor()).raise_for_denial()
    services().users.update_status(user_id, json_body().get('status'))
    return jsonify({'message': 'User status updated successfully'})


@users_bp.patch('/users/<user_id>/role')
@token_required
def set_role(user_id):
    policy.can_manage_users(current_actor()).raise_for_denial()
    services().users.update_role(user_id, json_body().get('role'))
    return jsonify({'message': 'User role updated successfully'})
