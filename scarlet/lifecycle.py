"""
Donation request lifecycle.

pending -> inprogress -> done | canceled

The guard on the dedicated status operation is value-set membership only:
an authorized caller may move a request from any status to any of the four
values. Only commitment is tied to a specific prior status (pending).

Every status change is expressed as a (expected_prior_status, fields) pair
so the store can apply it as a conditional write.
"""

from .errors import ValidationError
from .models import BLOOD_GROUPS, check_choice, now

PENDING = 'pending'
INPROGRESS = 'inprogress'
DONE = 'done'
CANCELED = 'canceled'

STATUSES = [PENDING, INPROGRESS, DONE, CANCELED]

# never writable through the general update path
PROTECTED_FIELDS = (
    'request_id',
    'status',
    'requester_email',
    'requester_name',
    'donor_name',
    'donor_email',
    'created_at',
    'updated_at',
)


def validate_status(value):
    if value not in STATUSES:
        raise ValidationError('Invalid ID or status')
    return value


def strip_update_payload(payload):
    """Drop status and identity fields from an arbitrary edit"""
    if not isinstance(payload, dict):
        raise ValidationError('Invalid update payload')
    fields = {k: v for k, v in payload.items() if k not in PROTECTED_FIELDS}
    if 'blood_group' in fields:
        check_choice(fields['blood_group'], BLOOD_GROUPS, 'Invalid blood group')
    fields['updated_at'] = now()
    return fields


def plan_transition(request_doc, target):
    validate_status(target)
    return request_doc['status'], {'status': target, 'updated_at': now()}


def plan_commitment(donor_name, donor_email):
    """Commitment only applies to a request that is still pending"""
    return PENDING, {
        'donor_name': donor_name,
        'donor_email': donor_email,
        'status': INPROGRESS,
        'updated_at': now(),
    }
