# tests/conftest.py
import pytest

from scarlet import create_app
from scarlet.identity import StaticVerifier
from scarlet.models import new_user
from scarlet.storage import MemoryStore

# name -> (role, status)
ACCOUNTS = {
    'alice': ('donor', 'active'),
    'bob': ('donor', 'active'),
    'carol': ('donor', 'active'),
    'vera': ('volunteer', 'active'),
    'adam': ('admin', 'active'),
    'blake': ('donor', 'blocked'),
    'bella': ('admin', 'blocked'),
}

REQUEST_PAYLOAD = {
    'recipient_name': 'Rahim Uddin',
    'recipient_district': 'Dhaka',
    'recipient_upazila': 'Savar',
    'hospital_name': 'Enam Medical College',
    'full_address': 'Savar, Dhaka 1340',
    'blood_group': 'O-',
    'donation_date': '2026-11-02',
    'donation_time': '10:30',
    'request_message': 'Needed for surgery',
}


def email_of(name):
    return f'{name}@example.com'


def auth(name):
    """Authorization header for a seeded account"""
    return {'Authorization': f'Bearer {name}-token'}


def make_user(name, role='donor', status='active', **fields):
    user = new_user({
        'name': name.capitalize(),
        'email': email_of(name),
        'avatar': f'https://img.example.com/{name}.png',
        'blood_group': fields.pop('blood_group', 'A+'),
        'district': fields.pop('district', 'Dhaka'),
        'upazila': fields.pop('upazila', 'Savar'),
    })
    user.update(role=role, status=status, **fields)
    return user


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def users(store):
    seeded = {}
    for name, (role, status) in ACCOUNTS.items():
        user = make_user(name, role, status)
        store.users.put(user)
        seeded[name] = user
    return seeded


@pytest.fixture
def verifier():
    tokens = {f'{name}-token': email_of(name) for name in ACCOUNTS}
    tokens['ghost-token'] = email_of('ghost')
    return StaticVerifier(tokens)


@pytest.fixture
def app(store, verifier, users):
    return create_app(store=store, verifier=verifier, TESTING=True, LOG_LEVEL='WARNING')


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def create_request(client):
    """POST a donation request as the given account and return its id"""
    def _create(name='alice', **overrides):
        payload = dict(REQUEST_PAYLOAD, **overrides)
        resp = client.post('/donation-requests', json=payload, headers=auth(name))
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()['id']
    return _create
