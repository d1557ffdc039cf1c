"""
In-memory storage backend with optional JSON file persistence.

Each table is a dict of records keyed by the table's key field. All writes
go through one lock per table so the conditional update used for status
changes is a real compare-and-swap.
"""

import copy
import json
import logging
import math
import os
import threading

from .errors import DependencyError

logger = logging.getLogger(__name__)

TABLE_KEYS = {
    'users': 'user_id',
    'requests': 'request_id',
    'blogs': 'blog_id',
}

# secondary attributes no two items of a table may share
UNIQUE_FIELDS = {
    'users': 'email',
}

# ============== PERSISTENCE HELPERS ==============


def load_json_file(file_path, default_value=None):
    """Load data from JSON file"""
    if not os.path.exists(file_path):
        return default_value if default_value is not None else {}
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.exception('Error loading %s', file_path)
        raise DependencyError('Server error') from e


def save_json_file(file_path, data):
    """Save data to JSON file"""
    try:
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
    except OSError as e:
        logger.exception('Error saving %s', file_path)
        raise DependencyError('Server error') from e


def matches(item, filters):
    return all(item.get(k) == v for k, v in (filters or {}).items())


# ============== TABLE ==============


class MemoryTable:
    """
    Dict-backed table; optional file_path makes every write persistent.

    unique_field names a secondary attribute that no two items may share
    (users are unique by email). It is indexed in memory so lookups and the
    put_unique check run under the same lock as every write.
    """

    def __init__(self, key_name, file_path=None, unique_field=None):
        self.key_name = key_name
        self.file_path = file_path
        self.unique_field = unique_field
        self._lock = threading.Lock()
        self._items = {}
        self._index = {}
        if file_path:
            self._items = load_json_file(file_path, {})
        for key, item in self._items.items():
            self._index_item(key, item)

    def _persist(self):
        if self.file_path:
            save_json_file(self.file_path, self._items)

    def _index_item(self, key, item):
        if self.unique_field and item.get(self.unique_field):
            self._index[item[self.unique_field]] = key

    def _unindex_item(self, item):
        if self.unique_field:
            self._index.pop(item.get(self.unique_field), None)

    def get(self, key):
        with self._lock:
            item = self._items.get(key)
            return copy.deepcopy(item) if item is not None else None

    def find_unique(self, value):
        """The item whose unique_field equals value, or None"""
        with self._lock:
            item = self._items.get(self._index.get(value))
            return copy.deepcopy(item) if item is not None else None

    def put(self, item):
        key = item[self.key_name]
        with self._lock:
            if key in self._items:
                self._unindex_item(self._items[key])
            self._items[key] = copy.deepcopy(item)
            self._index_item(key, item)
            self._persist()
        return key

    def put_unique(self, item):
        """
        Insert a new item unless its key or unique_field value is taken.

        Returns False without writing when either is already present.
        """
        key = item[self.key_name]
        with self._lock:
            if key in self._items or item.get(self.unique_field) in self._index:
                return False
            self._items[key] = copy.deepcopy(item)
            self._index_item(key, item)
            self._persist()
        return True

    def update(self, key, fields, expected=None):
        """
        Set fields on an existing item.

        If expected is given, every (field, value) pair must still hold on the
        stored item or nothing is written. Returns True when the write happened.
        """
        with self._lock:
            item = self._items.get(key)
            if item is None or not matches(item, expected):
                return False
            self._unindex_item(item)
            item.update(copy.deepcopy(fields))
            self._index_item(key, item)
            self._persist()
            return True

    def delete(self, key):
        with self._lock:
            removed = self._items.pop(key, None)
            if removed is not None:
                self._unindex_item(removed)
                self._persist()
            return removed is not None

    def scan(self, filters=None):
        with self._lock:
            return [copy.deepcopy(i) for i in self._items.values() if matches(i, filters)]

    def count(self, filters=None):
        with self._lock:
            return sum(1 for i in self._items.values() if matches(i, filters))


class MemoryStore:
    """The three tables the API needs"""

    def __init__(self, data_dir=None):
        if data_dir:
            os.makedirs(data_dir, exist_ok=True)
        self.users = self._table('users', data_dir)
        self.requests = self._table('requests', data_dir)
        self.blogs = self._table('blogs', data_dir)

    @staticmethod
    def _table(name, data_dir):
        file_path = os.path.join(data_dir, f'{name}.json') if data_dir else None
        return MemoryTable(TABLE_KEYS[name], file_path, UNIQUE_FIELDS.get(name))


# ============== PAGINATION ==============

DEFAULT_PAGE = 1
MAX_LIMIT = 100


def parse_page_args(args, default_limit):
    """Read page/limit query args, falling back to defaults on bad input"""
    try:
        page = int(args.get('page', DEFAULT_PAGE))
    except (TypeError, ValueError):
        page = DEFAULT_PAGE
    try:
        limit = int(args.get('limit', default_limit))
    except (TypeError, ValueError):
        limit = default_limit
    if page < 1:
        page = DEFAULT_PAGE
    if limit < 1:
        limit = default_limit
    return page, min(limit, MAX_LIMIT)


def newest_first(items):
    return sorted(items, key=lambda x: x.get('created_at') or '', reverse=True)


def paginate(items, page, limit):
    """Slice newest-first items; returns (page_items, total_pages)"""
    ordered = newest_first(items)
    total_pages = math.ceil(len(ordered) / limit)
    start = (page - 1) * limit
    return ordered[start:start + limit], total_pages
