"""
Authorization policy.

Pure decision functions over an actor (a user record) and, where relevant,
the current state of the resource. They never raise for an expected denial;
callers receive a Decision and decide what to do with it.

Status checks run before role checks: a blocked admin still cannot create a
donation request, and a request that is no longer pending cannot be claimed
even by an otherwise eligible donor.
"""

import logging

from .errors import ERROR_KINDS
from .lifecycle import PENDING
from .models import ELEVATED_ROLES, ROLE_ADMIN, USER_ACTIVE

logger = logging.getLogger(__name__)


class Decision:
    """Outcome of a policy check"""

    __slots__ = ('allowed', 'kind', 'message')

    def __init__(self, allowed, kind=None, message=None):
        self.allowed = allowed
        self.kind = kind
        self.message = message

    def __bool__(self):
        return self.allowed

    def __repr__(self):
        if self.allowed:
            return 'Decision(allowed)'
        return f'Decision(denied, {self.kind!r}, {self.message!r})'

    def raise_for_denial(self):
        if self.allowed:
            return
        logger.info('Policy denied: %s (%s)', self.message, self.kind)
        raise ERROR_KINDS[self.kind](self.message)


ALLOW = Decision(True)


def deny(message, kind='authorization'):
    return Decision(False, kind, message)


def is_admin(actor):
    return actor.get('role') == ROLE_ADMIN


def is_elevated(actor):
    return actor.get('role') in ELEVATED_ROLES


def is_requester(actor, request_doc):
    return bool(actor.get('email')) and actor.get('email') == request_doc.get('requester_email')


# ============== DONATION REQUESTS ==============

def can_create_request(actor):
    if actor.get('status') != USER_ACTIVE:
        return deny('Blocked users cannot create requests')
    return ALLOW


def can_read_requests_of(actor, email):
    """Own-request listings are scoped to the actor unless elevated"""
    if email == actor.get('email') or is_elevated(actor):
        return ALLOW
    return deny('Forbidden: cannot view another user\'s requests')


def can_list_all_requests(actor):
    if is_elevated(actor):
        return ALLOW
    return deny('Forbidden: Access denied')


def can_update_request(actor, request_doc):
    if is_requester(actor, request_doc) or is_admin(actor):
        return ALLOW
    return deny('Unauthorized to update this request')


def can_transition_request(actor, request_doc):
    if is_elevated(actor) or is_requester(actor, request_doc):
        return ALLOW
    return deny('Unauthorized')


def can_commit_donation(actor, request_doc):
    if not actor.get('email'):
        return deny('Unauthorized: No user email found', kind='authentication')
    if request_doc.get('status') != PENDING:
        return deny('This request is no longer available for donation', kind='conflict')
    if is_requester(actor, request_doc):
        return deny('You cannot donate to your own request')
    return ALLOW


def can_delete_request(actor, request_doc):
    if is_admin(actor) or is_requester(actor, request_doc):
        return ALLOW
    return deny('Unauthorized to delete this request')


# ============== USERS, BLOGS, ADMIN ==============

def can_manage_users(actor):
    if is_admin(actor):
        return ALLOW
    return deny('unauthorized')


def can_moderate_blogs(actor):
    """Authorship grants nothing; only admins edit, publish or delete"""
    if is_admin(actor):
        return ALLOW
    return deny('unauthorized')


def can_view_stats(actor):
    return can_list_all_requests(actor)
