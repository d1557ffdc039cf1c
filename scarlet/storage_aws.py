"""
DynamoDB storage backend.

Tables: Users, UserEmails, DonationRequests, Blogs (optionally prefixed).
Each table is keyed by a single string attribute matching the in-memory
backend, and the conditional update is expressed as a DynamoDB
ConditionExpression so two concurrent status changes cannot both succeed.
"""

import logging
from decimal import Decimal

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from .errors import DependencyError
from .storage import TABLE_KEYS, UNIQUE_FIELDS

logger = logging.getLogger(__name__)

TABLE_NAMES = {
    'users': 'Users',
    'requests': 'DonationRequests',
    'blogs': 'Blogs',
}

# lookup tables enforcing storage.UNIQUE_FIELDS
UNIQUE_TABLE_NAMES = {
    'users': 'UserEmails',
}


def _convert_floats_to_decimal(obj):
    # DynamoDB does not accept Python floats
    if isinstance(obj, dict):
        return {k: _convert_floats_to_decimal(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_floats_to_decimal(v) for v in obj]
    if isinstance(obj, float):
        return Decimal(str(obj))
    return obj


def _all_of(filters):
    condition = None
    for field, value in (filters or {}).items():
        clause = Attr(field).eq(value)
        condition = clause if condition is None else condition & clause
    return condition


class DynamoTable:
    """
    Same interface as storage.MemoryTable, backed by a boto3 Table.

    A unique_field is kept unique through a lookup table keyed by that field
    (UserEmails for Users). put_unique writes the lookup entry and the item in
    one transaction, each guarded by attribute_not_exists.
    """

    def __init__(self, table, key_name, unique_table=None, unique_field=None):
        self.table = table
        self.key_name = key_name
        self.unique_table = unique_table
        self.unique_field = unique_field

    def _fail(self, action, error):
        logger.error('DynamoDB %s on %s failed: %s', action, self.table.name, error, exc_info=True)
        return DependencyError('Server error')

    def get(self, key):
        try:
            resp = self.table.get_item(Key={self.key_name: key})
        except (ClientError, BotoCoreError) as e:
            raise self._fail('get_item', e) from e
        return resp.get('Item')

    def find_unique(self, value):
        try:
            resp = self.unique_table.get_item(Key={self.unique_field: value})
        except (ClientError, BotoCoreError) as e:
            raise self._fail('get_item', e) from e
        entry = resp.get('Item')
        return self.get(entry[self.key_name]) if entry else None

    def put(self, item):
        try:
            self.table.put_item(Item=_convert_floats_to_decimal(item))
        except (ClientError, BotoCoreError) as e:
            raise self._fail('put_item', e) from e
        return item[self.key_name]

    def put_unique(self, item):
        key = item[self.key_name]
        value = item[self.unique_field]
        try:
            self.table.meta.client.transact_write_items(TransactItems=[
                {'Put': {
                    'TableName': self.unique_table.name,
                    'Item': {self.unique_field: value, self.key_name: key},
                    'ConditionExpression': 'attribute_not_exists(#u)',
                    'ExpressionAttributeNames': {'#u': self.unique_field},
                }},
                {'Put': {
                    'TableName': self.table.name,
                    'Item': _convert_floats_to_decimal(item),
                    'ConditionExpression': 'attribute_not_exists(#k)',
                    'ExpressionAttributeNames': {'#k': self.key_name},
                }},
            ])
        except ClientError as e:
            reasons = e.response.get('CancellationReasons') or []
            if any(r.get('Code') == 'ConditionalCheckFailed' for r in reasons):
                return False
            raise self._fail('transact_write_items', e) from e
        except BotoCoreError as e:
            raise self._fail('transact_write_items', e) from e
        return True

    def update(self, key, fields, expected=None):
        names = {}
        values = {}
        assignments = []
        for i, (field, value) in enumerate(fields.items()):
            names[f'#f{i}'] = field
            values[f':f{i}'] = value
            assignments.append(f'#f{i} = :f{i}')

        condition = Attr(self.key_name).exists()
        guard = _all_of(expected)
        if guard is not None:
            condition = condition & guard

        try:
            self.table.update_item(
                Key={self.key_name: key},
                UpdateExpression='SET ' + ', '.join(assignments),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=_convert_floats_to_decimal(values),
                ConditionExpression=condition,
            )
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException':
                return False
            raise self._fail('update_item', e) from e
        except BotoCoreError as e:
            raise self._fail('update_item', e) from e
        return True

    def delete(self, key):
        try:
            resp = self.table.delete_item(Key={self.key_name: key}, ReturnValues='ALL_OLD')
        except (ClientError, BotoCoreError) as e:
            raise self._fail('delete_item', e) from e
        return bool(resp.get('Attributes'))

    def _scan_pages(self, filters, **extra):
        kwargs = dict(extra)
        condition = _all_of(filters)
        if condition is not None:
            kwargs['FilterExpression'] = condition
        while True:
            try:
                resp = self.table.scan(**kwargs)
            except (ClientError, BotoCoreError) as e:
                raise self._fail('scan', e) from e
            yield resp
            last_key = resp.get('LastEvaluatedKey')
            if not last_key:
                break
            kwargs['ExclusiveStartKey'] = last_key

    def scan(self, filters=None):
        items = []
        for page in self._scan_pages(filters):
            items.extend(page.get('Items', []))
        return items

    def count(self, filters=None):
        return sum(page.get('Count', 0) for page in self._scan_pages(filters, Select='COUNT'))


class DynamoStore:

    def __init__(self, region='us-east-1', table_prefix='', resource=None):
        self.resource = resource or boto3.resource('dynamodb', region_name=region)
        self.users = self._table('users', table_prefix)
        self.requests = self._table('requests', table_prefix)
        self.blogs = self._table('blogs', table_prefix)

    def _table(self, name, prefix):
        unique_table = None
        if name in UNIQUE_TABLE_NAMES:
            unique_table = self.resource.Table(f'{prefix}{UNIQUE_TABLE_NAMES[name]}')
        return DynamoTable(
            self.resource.Table(f'{prefix}{TABLE_NAMES[name]}'),
            TABLE_KEYS[name],
            unique_table,
            UNIQUE_FIELDS.get(name),
        )
