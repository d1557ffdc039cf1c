"""Blog content. Any account holder may draft; only admins moderate."""

import logging

from . import policy
from .errors import NotFoundError, ValidationError
from .models import (
    BLOG_PREFIX, BLOG_PUBLISHED, BLOG_REQUIRED_FIELDS, BLOG_STATUSES,
    check_choice, new_blog, now, validate_id,
)
from .storage import newest_first

logger = logging.getLogger(__name__)


class BlogService:

    def __init__(self, table):
        self.table = table

    def get(self, blog_id):
        validate_id(blog_id, BLOG_PREFIX, 'blog')
        blog = self.table.get(blog_id)
        if not blog:
            raise NotFoundError('Blog not found')
        return blog

    def create(self, author, data):
        blog = new_blog(data, author)
        blog_id = self.table.put(blog)
        logger.info('Blog %s drafted by %s', blog_id, author['email'])
        return blog_id

    def list(self, status=None):
        filters = {}
        if status:
            filters['status'] = check_choice(status, BLOG_STATUSES, 'Invalid status')
        return newest_first(self.table.scan(filters))

    def _write(self, blog_id, fields):
        fields['updated_at'] = now()
        if not self.table.update(blog_id, fields):
            raise NotFoundError('Blog not found')

    def edit(self, actor, blog_id, data):
        policy.can_moderate_blogs(actor).raise_for_denial()
        self.get(blog_id)
        fields = {f: data[f] for f in BLOG_REQUIRED_FIELDS if isinstance(data, dict) and data.get(f)}
        if not fields:
            raise ValidationError('Nothing to update')
        self._write(blog_id, fields)
        logger.info('Blog %s edited by %s', blog_id, actor['email'])

    def set_status(self, actor, blog_id, status):
        policy.can_moderate_blogs(actor).raise_for_denial()
        validate_id(blog_id, BLOG_PREFIX, 'blog')
        check_choice(status, BLOG_STATUSES, 'Invalid status')
        self.get(blog_id)
        self._write(blog_id, {'status': status})
        logger.info('Blog %s set to %s by %s', blog_id, status, actor['email'])
        return 'published' if status == BLOG_PUBLISHED else 'unpublished'

    def delete(self, actor, blog_id):
        policy.can_moderate_blogs(actor).raise_for_denial()
        self.get(blog_id)
        if not self.table.delete(blog_id):
            raise NotFoundError('Blog not found')
        logger.info('Blog %s deleted by %s', blog_id, actor['email'])
