"""Tests for the final commit call."""

import pytest

from common.types import CommitEntry, FileDescriptor, NegotiationResult
from drive.exceptions import ProtocolError
from drive.finalizer import existing_storage, finalize, uploaded_storage
from fakes import NODE_URL, parse_form


@pytest.fixture
def descriptor():
    return FileDescriptor(path='/tmp/a.bin', name='a.bin', size=250, sha1='s' * 40, md5='m' * 32)


@pytest.fixture
def negotiation():
    return NegotiationResult(
        exists=False,
        upload_id='upload-xyz',
        node_urls=[NODE_URL],
        file_meta='file-meta-token',
        secure_key='secure-key-value',
        content_cache_key='cache-key-value',
    )


def test_existing_storage_payload():
    assert existing_storage('upload-1') == {'uploadId': 'upload-1', 'exists': True}


def test_uploaded_storage_payload(descriptor, negotiation):
    commits = [CommitEntry('c0'), CommitEntry('c1'), CommitEntry('c2')]

    storage = uploaded_storage(descriptor, negotiation, commits)

    assert storage == {
        'size': 250,
        'sha1': 's' * 40,
        'kss': {
            'stat': 'OK',
            'node_urls': [NODE_URL],
            'secure_key': 'secure-key-value',
            'contentCacheKey': 'cache-key-value',
            'file_meta': 'file-meta-token',
            'commit_metas': [{'commit_meta': 'c0'}, {'commit_meta': 'c1'}, {'commit_meta': 'c2'}],
        },
        'uploadId': 'upload-xyz',
        'exists': False,
    }


def test_finalize_returns_file_id(session, drive_server):
    drive_server.commit_reply = {'result': 'ok', 'data': {'id': 'new-file-7'}}

    file_id = finalize(session, 'a.bin', existing_storage('upload-1'), 'folder-9')

    assert file_id == 'new-file-7'
    request = drive_server.commit_requests[0]
    form = parse_form(request)
    assert form['parentId'] == 'folder-9'
    assert form['serviceToken'] == 'token-abc'
    assert request.headers['Content-Type'] == 'application/x-www-form-urlencoded'
    assert request.headers['Origin'] == 'https://i.mi.com'
    assert drive_server.commit_payload() == {
        'content': {'name': 'a.bin', 'storage': {'uploadId': 'upload-1', 'exists': True}}
    }


def test_finalize_numeric_id_is_string(session, drive_server):
    drive_server.commit_reply = {'result': 'ok', 'data': {'id': 123456789}}

    assert finalize(session, 'a.bin', existing_storage('upload-1'), '0') == '123456789'


def test_finalize_failure_surfaces_description(session, drive_server):
    drive_server.commit_reply = {'result': 'error', 'description': 'parent folder not found'}

    with pytest.raises(ProtocolError) as exc_info:
        finalize(session, 'a.bin', existing_storage('upload-1'), 'missing-folder')

    assert exc_info.value.stage == 'commit_file'
    assert exc_info.value.description == 'parent folder not found'


def test_finalize_missing_id(session, drive_server):
    drive_server.commit_reply = {'result': 'ok', 'data': {}}

    with pytest.raises(ProtocolError, match='data.id'):
        finalize(session, 'a.bin', existing_storage('upload-1'), '0')
