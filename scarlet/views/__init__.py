"""
HTTP layer.

Blueprints translate requests into service calls; failures are rendered as
{"message": ...} with the status carried by the error class.
"""

import logging
from functools import wraps

from flask import current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..errors import ScarletError, ValidationError
from ..identity import bearer_token

logger = logging.getLogger(__name__)


def services():
    return current_app.extensions['scarlet']


def token_required(f):
    """Verify the bearer credential and expose the email as g.actor_email"""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = bearer_token(request.headers.get('Authorization'))
        g.actor_email = services().verifier.verify(token)
        return f(*args, **kwargs)
    return decorated


def current_actor():
    """User record of the authenticated caller, looked up fresh per request"""
    if 'actor' not in g:
        g.actor = services().users.resolve(g.actor_email)
    return g.actor


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def optional_json_body():
    """json_body for endpoints whose body may be left out entirely"""
    if not request.get_data():
        return {}
    return json_body()


def register_views(app):
    from .admin import admin_bp
    from .blogs import blogs_bp
    from .donation_requests import requests_bp
    from .users import users_bp

    app.register_blueprint(users_bp)
    app.register_blueprint(requests_bp)
    app.register_blueprint(blogs_bp)
    app.register_blueprint(admin_bp)

    @app.errorhandler(ScarletError)
    def handle_scarlet_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'message': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.exception('Unhandled error on %s %s', request.method, request.path)
        return jsonify({'message': 'Server error'}), 500
