import asyncio

import pytest

from kvstore_lib.client.models import KeyListItem, KeyListPage
from kvstore_lib.errors import ParameterError, ServiceError
from kvstore_lib.storage.remote_backend import RemoteKeyValueStore, with_charset
from tests.helpers import FakeRecordClient


def run(coro):
    return asyncio.run(coro)


def test_set_get_delete_drop():
    client = FakeRecordClient()
    store = RemoteKeyValueStore('some-id-1', client)
    record = {'foo': 'bar'}

    async def scenario():
        await store.set_value('key-1', record)
        got = await store.get_value('key-1')
        await store.set_value('key-1', None)
        missing = await store.get_value('key-1')
        await store.drop()
        return got, missing

    got, missing = run(scenario())
    assert got == record
    assert missing is None
    assert client.calls == [
        ('put_record', 'some-id-1', 'key-1', '{\n  "foo": "bar"\n}', 'application/json; charset=utf-8'),
        ('get_record', 'some-id-1', 'key-1'),
        ('delete_record', 'some-id-1', 'key-1'),
        ('get_record', 'some-id-1', 'key-1'),
        ('delete_store', 'some-id-1'),
    ]


@pytest.mark.parametrize('value, content_type, expected', [
    ('xxxx', 'text/plain', 'text/plain; charset=utf-8'),
    ('xxxx', 'text/plain; charset=utf-8', 'text/plain; charset=utf-8'),
    (b'some text value', 'image/jpeg; charset=something', 'image/jpeg; charset=something'),
])
def test_content_type_charset_normalization(value, content_type, expected):
    client = FakeRecordClient()
    store = RemoteKeyValueStore('some-id-1', client, name='some-name-1')
    run(store.set_value('key-1', value, content_type=content_type))
    assert client.calls == [('put_record', 'some-id-1', 'key-1', value, expected)]
    assert expected.count('charset=') == 1


def test_with_charset():
    assert with_charset('application/json') == 'application/json; charset=utf-8'
    assert with_charset('text/html; Charset=ISO-8859-1') == 'text/html; Charset=ISO-8859-1'
    assert with_charset('text/plain', 'latin-1') == 'text/plain; charset=latin-1'


def test_get_value_decodes_by_reported_content_type():
    client = FakeRecordClient()
    store = RemoteKeyValueStore('s', client)

    async def scenario():
        await store.set_value('text', 'xxxx', content_type='text/plain')
        await store.set_value('bin', b'\x00\x01', content_type='application/octet-stream')
        return await store.get_value('text'), await store.get_value('bin')

    assert run(scenario()) == ('xxxx', b'\x00\x01')


def test_null_value_with_content_type_is_rejected():
    client = FakeRecordClient()
    store = RemoteKeyValueStore('s', client)
    with pytest.raises(ParameterError, match='must not be used when removing the record'):
        run(store.set_value('key', None, content_type='image/png'))
    assert client.calls == []


def test_for_each_key_follows_pages():
    class PagedClient(FakeRecordClient):
        pages = {
            'key0': KeyListPage(is_truncated=True, next_exclusive_start_key='key2',
                                items=[KeyListItem(key='key1', size=1), KeyListItem(key='key2', size=2)]),
            'key2': KeyListPage(is_truncated=True, next_exclusive_start_key='key4',
                                items=[KeyListItem(key='key3', size=3), KeyListItem(key='key4', size=4)]),
            'key4': KeyListPage(is_truncated=False, next_exclusive_start_key=None,
                                items=[KeyListItem(key='key5', size=5)]),
        }

        async def list_keys(self, store_id, exclusive_start_key=None, limit=None):
            self.calls.append(('list_keys', store_id, exclusive_start_key))
            return self.pages[exclusive_start_key]

    client = PagedClient()
    store = RemoteKeyValueStore('some-id-1', client, name='some-name-1')
    results = []

    async def visitor(key, index, info):
        results.append((key, index, info))

    run(store.for_each_key(visitor, exclusive_start_key='key0'))

    assert len(results) == 5
    for i, (key, index, info) in enumerate(results):
        assert info == {'size': i + 1}
        assert index == i
        assert key == f'key{i + 1}'
    assert client.calls == [
        ('list_keys', 'some-id-1', 'key0'),
        ('list_keys', 'some-id-1', 'key2'),
        ('list_keys', 'some-id-1', 'key4'),
    ]


def test_for_each_key_matches_local_semantics():
    client = FakeRecordClient(page_size=4)
    store = RemoteKeyValueStore('s', client)
    results = []

    async def scenario():
        for i in range(10):
            await store.set_value(f'key{i}', {})
        await store.for_each_key(lambda *args: results.append(args), exclusive_start_key='key3')

    run(scenario())
    assert results == [(f'key{i + 4}', i, {'size': 2}) for i in range(6)]
    assert [c for c in client.calls if c[0] == 'list_keys'] == [
        ('list_keys', 's', 'key3'),
        ('list_keys', 's', 'key7'),
    ]


def test_drop_propagates_service_errors():
    client = FakeRecordClient()
    dropped = []
    store = RemoteKeyValueStore('missing', client, on_drop=dropped.append)
    with pytest.raises(ServiceError) as exc:
        run(store.drop())
    assert exc.value.status_code == 404
    assert dropped == []


def test_deprecated_delete_calls_delete_store():
    client = FakeRecordClient()
    client.stores['some-id'] = {}
    store = RemoteKeyValueStore('some-id', client, name='some-name')
    with pytest.warns(DeprecationWarning):
        run(store.delete())
    assert client.calls == [('delete_store', 'some-id')]


def test_get_public_url():
    store = RemoteKeyValueStore('my-store-id', FakeRecordClient())
    assert store.get_public_url('file') == 'https://api.apify.com/v2/key-value-stores/my-store-id/records/file'
    other = RemoteKeyValueStore('my-store-id', FakeRecordClient(), api_base_url='http://localhost:8080/')
    assert other.get_public_url('file') == 'http://localhost:8080/v2/key-value-stores/my-store-id/records/file'
