from flask import Blueprint, jsonify, request

from . import current_actor, json_body, services, token_required

blogs_bp = Blueprint('blogs', __name__, url_prefix='/blogs')


@blogs_bp.post('')
@token_required
def create_blog():
    blog_id = services().blogs.create(current_actor(), json_body())
    return jsonify({'message': 'Blog created successfully', 'id': blog_id}), 201


@blogs_bp.get('')
@token_required
def list_blogs():
    return jsonify(services().blogs.list(request.args.get('status')))


@blogs_bp.get('/<blog_id>')
@token_required
def get_blog(blog_id):
    return jsonify(services().blogs.get(blog_id))


@blogs_bp.put('/<blog_id>')
@token_required
def edit_blog(blog_id):
    services().blogs.edit(current_actor(), blog_id, request.get_json(silent=True))
    return jsonify({'message': 'Blog updated successfully'})


@blogs_bp.patch('/<blog_id>/status')
@token_required
def set_blog_status(blog_id):
    # a non-object body reads as a missing status
    data = request.get_json(silent=True)
    status = data.get('status') if isinstance(data, dict) else None
    outcome = services().blogs.set_status(current_actor(), blog_id, status)
    return jsonify({'message': f'Blog {outcome} successfully'})


@blogs_bp.delete('/<blog_id>')
@token_required
def delete_blog(blog_id):
    services().blogs.delete(current_actor(), blog_id)
    return jsonify({'message': 'Blog deleted successfully'})
