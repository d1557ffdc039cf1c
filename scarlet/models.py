"""
Record shapes and shared constants.

Users, donation requests and blogs are stored as plain dicts; the helpers
here build new records and validate the enumerated fields.
"""

import re
import uuid
from datetime import datetime, timezone

from .errors import ValidationError

# ============== ENUMERATIONS ==============

BLOOD_GROUPS = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']

ROLE_DONOR = 'donor'
ROLE_VOLUNTEER = 'volunteer'
ROLE_ADMIN = 'admin'
ROLES = [ROLE_DONOR, ROLE_VOLUNTEER, ROLE_ADMIN]
ELEVATED_ROLES = (ROLE_ADMIN, ROLE_VOLUNTEER)

USER_ACTIVE = 'active'
USER_BLOCKED = 'blocked'
USER_STATUSES = [USER_ACTIVE, USER_BLOCKED]

BLOG_DRAFT = 'draft'
BLOG_PUBLISHED = 'published'
BLOG_STATUSES = [BLOG_DRAFT, BLOG_PUBLISHED]

# ============== IDS ==============

USER_PREFIX = 'USR'
REQUEST_PREFIX = 'DR'
BLOG_PREFIX = 'BLOG'


def generate_id(prefix='ID'):
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def validate_id(value, prefix, label):
    """Reject ids that could never have been generated for this prefix"""
    if not value or not re.fullmatch(rf'{prefix}-[0-9A-F]{{8}}', value):
        raise ValidationError(f'Invalid {label} ID')
    return value


def now():
    return datetime.now(timezone.utc).isoformat()


# ============== FIELD VALIDATION ==============

USER_REQUIRED_FIELDS = ['name', 'email', 'avatar', 'blood_group', 'district', 'upazila']
PROFILE_REQUIRED_FIELDS = ['name', 'district', 'upazila', 'blood_group']
PROFILE_FIELDS = ['name', 'avatar', 'district', 'upazila', 'blood_group']

REQUEST_REQUIRED_FIELDS = [
    'recipient_name',
    'recipient_district',
    'recipient_upazila',
    'hospital_name',
    'full_address',
    'blood_group',
    'donation_date',
    'donation_time',
    'request_message',
]

BLOG_REQUIRED_FIELDS = ['title', 'thumbnail', 'content']


def require_fields(data, fields, message='Missing required fields'):
    if not isinstance(data, dict):
        raise ValidationError(message)
    missing = [f for f in fields if not data.get(f)]
    if missing:
        raise ValidationError(message)
    # every required field is free text
    for field in fields:
        if not isinstance(data[field], str):
            raise ValidationError(f'Invalid value for {field}')
    return data


def check_choice(value, choices, message):
    if value not in choices:
        raise ValidationError(message)
    return value


# ============== RECORD BUILDERS ==============

def new_user(data):
    """Build a user record from a registration payload"""
    require_fields(data, USER_REQUIRED_FIELDS)
    check_choice(data['blood_group'], BLOOD_GROUPS, 'Invalid blood group')
    timestamp = now()
    return {
        'user_id': generate_id(USER_PREFIX),
        'email': data['email'].strip().lower(),
        'name': data['name'],
        'avatar': data['avatar'],
        'blood_group': data['blood_group'],
        'district': data['district'],
        'upazila': data['upazila'],
        # registration never grants elevated rights
        'role': ROLE_DONOR,
        'status': USER_ACTIVE,
        'created_at': timestamp,
        'updated_at': timestamp,
    }


def new_donation_request(data, requester):
    require_fields(data, REQUEST_REQUIRED_FIELDS, 'Missing fields')
    check_choice(data['blood_group'], BLOOD_GROUPS, 'Invalid blood group')
    timestamp = now()
    record = {f: data[f] for f in REQUEST_REQUIRED_FIELDS}
    record.update({
        'request_id': generate_id(REQUEST_PREFIX),
        'requester_name': requester['name'],
        'requester_email': requester['email'],
        'status': 'pending',
        'donor_name': None,
        'donor_email': None,
        'created_at': timestamp,
        'updated_at': timestamp,
    })
    return record


def new_blog(data, author):
    require_fields(data, BLOG_REQUIRED_FIELDS, 'All fields are required')
    timestamp = now()
    return {
        'blog_id': generate_id(BLOG_PREFIX),
        'title': data['title'],
        'thumbnail': data['thumbnail'],
        'content': data['content'],
        'author': {
            'name': author['name'],
            'email': author['email'],
            'role': author['role'],
        },
        'status': BLOG_DRAFT,
        'created_at': timestamp,
        'updated_at': timestamp,
    }
