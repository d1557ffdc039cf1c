"""
Bearer credential handling.

A verifier is any object with verify(token) -> email. FirebaseVerifier is
the production implementation and checks Firebase ID tokens with
firebase-admin.
"""

import base64
import binascii
import json
import logging

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials

from .errors import AuthenticationError, DependencyError

logger = logging.getLogger(__name__)


def bearer_token(header):
    """Extract the token from an 'Authorization: Bearer <token>' header"""
    if not header or not header.startswith('Bearer '):
        raise AuthenticationError('Unauthorized: No token provided')
    token = header.split(' ', 1)[1].strip()
    if not token:
        raise AuthenticationError('Unauthorized: No token provided')
    return token


def decode_service_key(encoded):
    """FB_SERVICE_KEY holds the service account JSON, base64 encoded"""
    try:
        return json.loads(base64.b64decode(encoded).decode('utf-8'))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise ValueError('FB_SERVICE_KEY is not base64-encoded JSON') from e


class FirebaseVerifier:

    def __init__(self, service_key=None, app_name='scarlet'):
        if service_key:
            credential = credentials.Certificate(decode_service_key(service_key))
        else:
            logger.warning('FB_SERVICE_KEY not set; using application default credentials')
            credential = None
        self.app = firebase_admin.initialize_app(credential, name=app_name)

    def verify(self, token):
        try:
            decoded = firebase_auth.verify_id_token(token, app=self.app)
        except firebase_auth.CertificateFetchError as e:
            logger.error('Could not fetch Firebase certificates: %s', e, exc_info=True)
            raise DependencyError('Server error') from e
        except (firebase_auth.InvalidIdTokenError, firebase_auth.UserDisabledError) as e:
            raise AuthenticationError('Unauthorized: Invalid token') from e
        except ValueError as e:
            # tokens reaching here are non-empty strings: a missing project id
            logger.error('Firebase is not configured for token checks: %s', e)
            raise DependencyError('Server error') from e

        email = decoded.get('email')
        if not email:
            raise AuthenticationError('Unauthorized: No user email found')
        return email.lower()


class StaticVerifier:
    """Token -> email table; for local development and tests"""

    def __init__(self, tokens=None):
        self.tokens = dict(tokens or {})

    def verify(self, token):
        email = self.tokens.get(token)
        if not email:
            raise AuthenticationError('Unauthorized: Invalid token')
        return email.lower()
