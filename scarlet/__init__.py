"""
Scarlet API
REST backend for blood donation coordination: donors, donation requests,
blog content, gated by bearer authentication and role-based policy.
"""

import logging

from flask import Flask

from .blogs import BlogService
from .config import Config
from .directory import UserDirectory
from .donations import DonationRequestService
from .identity import FirebaseVerifier, StaticVerifier
from .logging_config import configure_logging
from .storage import MemoryStore

logger = logging.getLogger(__name__)


class Services:
    """Collaborators built once per application and shared by every request"""

    def __init__(self, store, verifier):
        self.store = store
        self.verifier = verifier
        self.users = UserDirectory(store.users)
        self.requests = DonationRequestService(store.requests)
        self.blogs = BlogService(store.blogs)


def build_store(config):
    backend = config['STORAGE_BACKEND']
    if backend == 'dynamodb':
        # imported here so the memory backend runs without AWS configuration
        from .storage_aws import DynamoStore
        return DynamoStore(config['AWS_REGION'], config['DYNAMODB_TABLE_PREFIX'])
    if backend == 'memory':
        return MemoryStore(config['DATA_DIR'] or None)
    raise ValueError(f'Unknown storage backend {backend!r}')


def build_verifier(config):
    backend = config['AUTH_BACKEND']
    if backend == 'firebase':
        return FirebaseVerifier(config['FIREBASE_SERVICE_KEY'] or None)
    if backend == 'static':
        return StaticVerifier(config['DEV_TOKENS'])
    raise ValueError(f'Unknown auth backend {backend!r}')


def create_app(config_object=None, store=None, verifier=None, **overrides):
    """Application factory; store and verifier may be injected"""
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.config.update(overrides)

    configure_logging(app.config['LOG_LEVEL'])

    services = Services(
        store if store is not None else build_store(app.config),
        verifier if verifier is not None else build_verifier(app.config),
    )
    app.extensions['scarlet'] = services

    from .views import register_views
    register_views(app)

    logger.info('Scarlet API ready (storage=%s)', type(services.store).__name__)
    return app
