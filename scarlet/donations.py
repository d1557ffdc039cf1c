"""
Donation request operations.

Each operation reads the request fresh, asks scarlet.policy whether the
actor may proceed, and writes through the table. Status changes use the
table's conditional update so a racing writer is detected instead of
silently overwritten.
"""

import logging

from . import lifecycle, policy
from .errors import ConflictError, NotFoundError
from .models import REQUEST_PREFIX, new_donation_request, validate_id
from .storage import newest_first, paginate

logger = logging.getLogger(__name__)

RECENT_LIMIT = 3


class DonationRequestService:

    def __init__(self, table):
        self.table = table

    def get(self, request_id):
        validate_id(request_id, REQUEST_PREFIX, 'request')
        request_doc = self.table.get(request_id)
        if not request_doc:
            raise NotFoundError('Request not found')
        return request_doc

    # ============== CREATE / READ ==============

    def create(self, actor, data):
        policy.can_create_request(actor).raise_for_denial()
        request_doc = new_donation_request(data, actor)
        request_id = self.table.put(request_doc)
        logger.info('Donation request %s created by %s (%s)',
                    request_id, actor['email'], request_doc['blood_group'])
        return request_id

    def recent(self, actor, email=None):
        email = (email or actor['email']).strip().lower()
        policy.can_read_requests_of(actor, email).raise_for_denial()
        return newest_first(self.table.scan({'requester_email': email}))[:RECENT_LIMIT]

    def requests_of(self, actor, page, limit, email=None, status=None):
        email = (email or actor['email']).strip().lower()
        policy.can_read_requests_of(actor, email).raise_for_denial()
        filters = {'requester_email': email}
        if status:
            filters['status'] = status
        return paginate(self.table.scan(filters), page, limit)

    def list_all(self, actor, page, limit, status=None):
        policy.can_list_all_requests(actor).raise_for_denial()
        filters = {'status': status} if status else {}
        return paginate(self.table.scan(filters), page, limit)

    def list_public(self, page, limit):
        return paginate(self.table.scan({'status': lifecycle.PENDING}), page, limit)

    # ============== MUTATE ==============

    def update(self, actor, request_id, payload):
        request_doc = self.get(request_id)
        policy.can_update_request(actor, request_doc).raise_for_denial()
        fields = lifecycle.strip_update_payload(payload)
        if not self.table.update(request_id, fields):
            raise NotFoundError('Request not found')
        logger.info('Donation request %s updated by %s', request_id, actor['email'])

    def transition(self, actor, request_id, target):
        lifecycle.validate_status(target)
        request_doc = self.get(request_id)
        policy.can_transition_request(actor, request_doc).raise_for_denial()
        prior, fields = lifecycle.plan_transition(request_doc, target)
        if not self.table.update(request_id, fields, expected={'status': prior}):
            raise ConflictError('Request status changed concurrently')
        logger.info('Donation request %s: %s -> %s by %s',
                    request_id, prior, target, actor['email'])

    def commit(self, actor, request_id, donor_name=None):
        """Claim a pending request: donor fields and inprogress in one write"""
        request_doc = self.get(request_id)
        policy.can_commit_donation(actor, request_doc).raise_for_denial()
        prior, fields = lifecycle.plan_commitment(donor_name or actor.get('name'), actor['email'])
        if not self.table.update(request_id, fields, expected={'status': prior}):
            raise ConflictError('This request is no longer available for donation')
        logger.info('Donation request %s claimed by %s', request_id, actor['email'])

    def delete(self, actor, request_id):
        request_doc = self.get(request_id)
        policy.can_delete_request(actor, request_doc).raise_for_denial()
        if not self.table.delete(request_id):
            raise NotFoundError('Request not found')
        logger.info('Donation request %s deleted by %s', request_id, actor['email'])

    # ============== STATS ==============

    def count(self):
        return self.table.count()

    def counts_by_status(self):
        counts = {status: 0 for status in lifecycle.STATUSES}
        for request_doc in self.table.scan():
            status = request_doc.get('status')
            if status in counts:
                counts[status] += 1
        return counts
