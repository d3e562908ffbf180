import re
import uuid

import pytest
from tortoise.exceptions import OperationalError

from apps.blog.exceptions import NotFound, StorageFailure
from apps.blog.models import Blob, Post
from apps.blog.storage import BlobStore, PostRepository


def test_blob_put_get_roundtrip(run_db):
    store = BlobStore()

    async def scenario():
        blob_id = await store.put('image/gif', b'GIF89a\x00\x01')
        return await store.get(blob_id)

    assert run_db(scenario) == ('image/gif', b'GIF89a\x00\x01')


def test_blob_ids_are_unique_and_time_ordered(run_db):
    store = BlobStore()

    async def scenario():
        first = await store.put('text/plain', b'same')
        second = await store.put('text/plain', b'same')
        return first, second

    first, second = run_db(scenario)
    assert first != second
    assert first.version == 7
    assert first < second


def test_blob_get_unknown_id(run_db):
    store = BlobStore()

    async def scenario():
        with pytest.raises(NotFound):
            await store.get(uuid.uuid4())

    run_db(scenario)


def test_blob_put_rejects_empty_content(run_db):
    store = BlobStore()

    async def scenario():
        with pytest.raises(ValueError):
            await store.put('image/png', b'')
        return await Blob.all().count()

    assert run_db(scenario) == 0


def test_blob_put_wraps_database_errors(run_db, monkeypatch):
    async def broken_create(*args, **kwargs):
        raise OperationalError('disk I/O error')

    monkeypatch.setattr(Blob, 'create', broken_create)
    store = BlobStore()

    async def scenario():
        with pytest.raises(StorageFailure):
            await store.put('image/png', b'data')

    run_db(scenario)


def test_post_insert_and_list_in_insertion_order(run_db):
    posts = PostRepository()
    avatar = uuid.uuid4()

    async def scenario():
        await posts.insert('alice', avatar, 'first', None)
        await posts.insert('bob', None, 'second', None)
        return await posts.list_all()

    listed = run_db(scenario)
    assert [p.username for p in listed] == ['alice', 'bob']
    assert [p.content for p in listed] == ['first', 'second']
    assert listed[0].avatar_ref == avatar
    assert listed[0].image_ref is None
    assert listed[1].avatar_ref is None
    assert re.fullmatch(r'\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z', listed[0].date)


def test_post_listing_is_repeatable(run_db):
    posts = PostRepository()

    async def scenario():
        await posts.insert('alice', None, 'one', None)
        await posts.insert('alice', None, 'two', None)
        return await posts.list_all(), await posts.list_all()

    first, second = run_db(scenario)
    assert first == second


def test_post_insert_rejects_empty_fields(run_db):
    posts = PostRepository()

    async def scenario():
        with pytest.raises(ValueError):
            await posts.insert('', None, 'content', None)
        with pytest.raises(ValueError):
            await posts.insert('alice', None, '', None)
        return await Post.all().count()

    assert run_db(scenario) == 0


def test_post_list_degrades_to_empty_on_read_error(run_db, monkeypatch):
    posts = PostRepository()

    async def scenario():
        await posts.insert('alice', None, 'hello', None)

        def broken_all(*args, **kwargs):
            raise OperationalError('database is locked')

        monkeypatch.setattr(Post, 'all', broken_all)
        return await posts.list_all()

    assert run_db(scenario) == []


def test_post_insert_wraps_database_errors(run_db, monkeypatch):
    async def broken_create(*args, **kwargs):
        raise OperationalError('disk full')

    monkeypatch.setattr(Post, 'create', broken_create)
    posts = PostRepository()

    async def scenario():
        with pytest.raises(StorageFailure):
            await posts.insert('alice', None, 'hello', None)

    run_db(scenario)


def test_post_list_degrades_to_empty_on_unreadable_row(run_db):
    posts = PostRepository()

    async def scenario():
        # written around the repository, so the empty username is not rejected
        await Post.create(username='', date='2024-01-01T00:00:00Z', content='hello')
        return await posts.list_all()

    assert run_db(scenario) == []
