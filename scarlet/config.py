"""
Application configuration, read from the environment.

Loaded with app.config.from_object(); pass another object (or a dict of
overrides to create_app) to change it in tests.
"""

import os


def _flag(name, default='false'):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def _port(name, default):
    raw = os.environ.get(name, '').strip()
    try:
        port = int(raw) if raw else default
    except ValueError:
        return default
    return port if 0 < port <= 65535 else default


def parse_dev_tokens(raw):
    """'token1:a@x.com,token2:b@x.com' -> {'token1': 'a@x.com', ...}"""
    tokens = {}
    for pair in (raw or '').split(','):
        token, sep, email = pair.strip().partition(':')
        if sep and token and email:
            tokens[token] = email
    return tokens


class Config:
    SECRET_KEY = os.environ.get('SCARLET_SECRET_KEY', 'scarlet-dev-key')
    DEBUG = _flag('SCARLET_DEBUG')
    HOST = os.environ.get('SCARLET_HOST', '0.0.0.0')
    PORT = _port('PORT', 5000)
    LOG_LEVEL = os.environ.get('SCARLET_LOG_LEVEL', 'INFO')

    # memory | dynamodb
    STORAGE_BACKEND = os.environ.get('SCARLET_STORAGE', 'memory')
    DATA_DIR = os.environ.get('SCARLET_DATA_DIR', '')
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')
    DYNAMODB_TABLE_PREFIX = os.environ.get('SCARLET_TABLE_PREFIX', '')

    # firebase | static
    AUTH_BACKEND = os.environ.get('SCARLET_AUTH', 'firebase')
    FIREBASE_SERVICE_KEY = os.environ.get('FB_SERVICE_KEY', '')
    DEV_TOKENS = parse_dev_tokens(os.environ.get('SCARLET_DEV_TOKENS', ''))
