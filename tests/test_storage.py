import threading

import pytest

from scarlet.directory import UserDirectory
from scarlet.donations import DonationRequestService
from scarlet.errors import ConflictError
from scarlet.models import new_donation_request
from scarlet.storage import MemoryStore, MemoryTable, paginate, parse_page_args
from tests.conftest import REQUEST_PAYLOAD, make_user


class TestMemoryTable:

    def test_get_returns_a_copy(self):
        table = MemoryTable('request_id')
        table.put({'request_id': 'DR-1', 'status': 'pending'})
        item = table.get('DR-1')
        item['status'] = 'done'
        assert table.get('DR-1')['status'] == 'pending'

    def test_conditional_update_applies_when_expectation_holds(self):
        table = MemoryTable('request_id')
        table.put({'request_id': 'DR-1', 'status': 'pending'})
        assert table.update('DR-1', {'status': 'inprogress'}, expected={'status': 'pending'})
        assert table.get('DR-1')['status'] == 'inprogress'

    def test_conditional_update_refused_when_expectation_stale(self):
        table = MemoryTable('request_id')
        table.put({'request_id': 'DR-1', 'status': 'done'})
        assert not table.update('DR-1', {'status': 'inprogress'}, expected={'status': 'pending'})
        assert table.get('DR-1')['status'] == 'done'

    def test_update_missing_item(self):
        assert not MemoryTable('request_id').update('DR-404', {'status': 'done'})

    def test_scan_and_count_filters(self):
        table = MemoryTable('user_id')
        table.put({'user_id': 'U1', 'role': 'donor'})
        table.put({'user_id': 'U2', 'role': 'admin'})
        assert [u['user_id'] for u in table.scan({'role': 'donor'})] == ['U1']
        assert table.count() == 2
        assert table.count({'role': 'admin'}) == 1

    def test_delete(self):
        table = MemoryTable('blog_id')
        table.put({'blog_id': 'B1'})
        assert table.delete('B1')
        assert not table.delete('B1')


class TestUniqueField:

    def test_put_unique_refuses_a_taken_value(self):
        table = MemoryTable('user_id', unique_field='email')
        assert table.put_unique({'user_id': 'U1', 'email': 'a@example.com'})
        assert not table.put_unique({'user_id': 'U2', 'email': 'a@example.com'})
        assert table.count() == 1

    def test_find_unique_follows_updates_and_deletes(self):
        table = MemoryTable('user_id', unique_field='email')
        table.put({'user_id': 'U1', 'email': 'a@example.com'})
        assert table.find_unique('a@example.com')['user_id'] == 'U1'
        table.update('U1', {'email': 'b@example.com'})
        assert table.find_unique('a@example.com') is None
        assert table.find_unique('b@example.com')['user_id'] == 'U1'
        table.delete('U1')
        assert table.find_unique('b@example.com') is None

    def test_index_is_rebuilt_on_reload(self, tmp_path):
        MemoryStore(str(tmp_path)).users.put({'user_id': 'U1', 'email': 'a@example.com'})
        reloaded = MemoryStore(str(tmp_path)).users
        assert reloaded.find_unique('a@example.com')['user_id'] == 'U1'
        assert not reloaded.put_unique({'user_id': 'U2', 'email': 'a@example.com'})


class TestPersistence:

    def test_store_reloads_from_data_dir(self, tmp_path):
        first = MemoryStore(str(tmp_path))
        first.users.put({'user_id': 'USR-00000001', 'email': 'a@example.com'})
        first.requests.put({'request_id': 'DR-00000001', 'status': 'pending'})

        second = MemoryStore(str(tmp_path))
        assert second.users.get('USR-00000001')['email'] == 'a@example.com'
        assert second.requests.count({'status': 'pending'}) == 1
        assert (tmp_path / 'blogs.json').exists() is False


class TestPagination:

    def test_newest_first_and_total_pages(self):
        items = [{'created_at': f'2026-01-0{i}'} for i in range(1, 8)]
        page, total_pages = paginate(items, 1, 3)
        assert total_pages == 3
        assert [i['created_at'] for i in page] == ['2026-01-07', '2026-01-06', '2026-01-05']
        last, _ = paginate(items, 3, 3)
        assert [i['created_at'] for i in last] == ['2026-01-01']

    def test_empty(self):
        assert paginate([], 1, 10) == ([], 0)

    @pytest.mark.parametrize('args,expected', [
        ({}, (1, 10)),
        ({'page': '2', 'limit': '5'}, (2, 5)),
        ({'page': 'abc', 'limit': 'x'}, (1, 10)),
        ({'page': '0', 'limit': '-3'}, (1, 10)),
        ({'limit': '5000'}, (1, 100)),
    ])
    def test_parse_page_args(self, args, expected):
        assert parse_page_args(args, 10) == expected


class GatedTable(MemoryTable):
    """Holds every reader until `parties` readers have seen the item"""

    def __init__(self, key_name, parties):
        super().__init__(key_name)
        self.barrier = threading.Barrier(parties, timeout=5)

    def get(self, key):
        item = super().get(key)
        self.barrier.wait()
        return item


class TestConcurrentCommitment:

    def test_exactly_one_of_two_racing_donors_wins(self):
        table = GatedTable('request_id', parties=2)
        owner = make_user('alice')
        table.put(new_donation_request(REQUEST_PAYLOAD, owner))
        request_id = table.scan()[0]['request_id']
        service = DonationRequestService(table)

        outcomes = {}

        def claim(name):
            try:
                service.commit(make_user(name), request_id)
                outcomes[name] = 'ok'
            except ConflictError:
                outcomes[name] = 'conflict'

        threads = [threading.Thread(target=claim, args=(n,)) for n in ('bob', 'carol')]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes.values()) == ['conflict', 'ok']
        winner = next(n for n, o in outcomes.items() if o == 'ok')
        stored = MemoryTable.get(table, request_id)
        assert stored['status'] == 'inprogress'
        assert stored['donor_email'] == f'{winner}@example.com'


class TestConcurrentTransition:

    def test_second_of_two_racing_transitions_is_refused(self):
        table = GatedTable('request_id', parties=2)
        table.put(new_donation_request(REQUEST_PAYLOAD, make_user('alice')))
        request_id = table.scan()[0]['request_id']
        service = DonationRequestService(table)
        admin = make_user('adam', role='admin')

        outcomes = {}

        def move(target):
            try:
                service.transition(admin, request_id, target)
                outcomes[target] = 'ok'
            except ConflictError as e:
                outcomes[target] = e.message

        threads = [threading.Thread(target=move, args=(s,)) for s in ('done', 'canceled')]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes.values()) == ['Request status changed concurrently', 'ok']
        winner = next(s for s, o in outcomes.items() if o == 'ok')
        assert MemoryTable.get(table, request_id)['status'] == winner


class GatedRegistrationTable(MemoryTable):
    """Holds every registration until `parties` of them are about to write"""

    def __init__(self, parties):
        super().__init__('user_id', unique_field='email')
        self.barrier = threading.Barrier(parties, timeout=5)

    def put_unique(self, item):
        self.barrier.wait()
        return super().put_unique(item)


class TestConcurrentRegistration:

    def test_one_email_registers_once(self):
        table = GatedRegistrationTable(parties=2)
        directory = UserDirectory(table)

        results = []

        def register():
            try:
                directory.create(make_user('dana'))
                results.append('ok')
            except ConflictError:
                results.append('conflict')

        threads = [threading.Thread(target=register) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(results) == ['conflict', 'ok']
        assert table.count({'email': 'dana@example.com'}) == 1
