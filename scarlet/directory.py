"""User directory: account records keyed by id, unique by email."""

import logging

from .errors import ConflictError, NotFoundError, ValidationError
from .models import (
    BLOOD_GROUPS, PROFILE_FIELDS, PROFILE_REQUIRED_FIELDS, ROLE_DONOR, ROLES,
    USER_ACTIVE, USER_STATUSES, USER_PREFIX, check_choice, now, require_fields,
    validate_id,
)
from .storage import paginate

logger = logging.getLogger(__name__)


class UserDirectory:

    def __init__(self, table):
        self.table = table

    def find_by_email(self, email):
        if not email:
            return None
        return self.table.find_unique(email.strip().lower())

    def find_by_id(self, user_id):
        return self.table.get(user_id)

    def resolve(self, email):
        """Actor lookup for an authenticated identity"""
        user = self.find_by_email(email)
        if not user:
            raise NotFoundError('User not found')
        return user

    def create(self, user):
        if not self.table.put_unique(user):
            raise ConflictError('User already exists')
        user_id = user['user_id']
        logger.info('New user registered: %s (%s)', user_id, user['blood_group'])
        return user_id

    def _set(self, user_id, fields):
        validate_id(user_id, USER_PREFIX, 'user')
        fields['updated_at'] = now()
        if not self.table.update(user_id, fields):
            raise NotFoundError('User not found')

    def update_status(self, user_id, status):
        check_choice(status, USER_STATUSES, 'Invalid status value')
        self._set(user_id, {'status': status})
        logger.info('User %s status set to %s', user_id, status)

    def update_role(self, user_id, role):
        check_choice(role, ROLES, 'Invalid role value')
        self._set(user_id, {'role': role})
        logger.info('User %s role set to %s', user_id, role)

    def update_profile(self, email, data):
        require_fields(data, PROFILE_REQUIRED_FIELDS)
        check_choice(data['blood_group'], BLOOD_GROUPS, 'Invalid blood group')
        user = self.resolve(email)
        fields = {f: data.get(f, user.get(f)) for f in PROFILE_FIELDS}
        fields['updated_at'] = now()
        if not self.table.update(user['user_id'], fields):
            raise NotFoundError('User not found')
        return self.table.get(user['user_id'])

    def list_users(self, page, limit, status=None):
        filters = {}
        if status:
            filters['status'] = check_choice(status, USER_STATUSES, 'Invalid status value')
        return paginate(self.table.scan(filters), page, limit)

    def search_donors(self, blood_group=None, district=None, upazila=None):
        """Active donors matching every given field exactly"""
        if blood_group and blood_group not in BLOOD_GROUPS:
            raise ValidationError('Invalid blood group')
        filters = {'role': ROLE_DONOR, 'status': USER_ACTIVE}
        if blood_group:
            filters['blood_group'] = blood_group
        if district:
            filters['district'] = district
        if upazila:
            filters['upazila'] = upazila
        return self.table.scan(filters)

    def count_donors(self):
        return self.table.count({'role': ROLE_DONOR})
