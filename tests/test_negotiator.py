"""Tests for create-file negotiation."""

import json

import httpx
import pytest

from common.types import BlockNegotiation
from drive.chunker import build_blocks, describe_file
from drive.exceptions import ProtocolError
from drive.negotiator import build_create_payload, negotiate
from fakes import NODE_URL, negotiation_reply, parse_form


@pytest.fixture
def described(make_file):
    """Descriptor and three blocks for a 250-byte file split at 100 bytes."""
    descriptor = describe_file(str(make_file('doc.bin', 250)))
    return descriptor, build_blocks(descriptor, chunk_size=100)


def test_create_payload_shape(described):
    descriptor, blocks = described
    payload = build_create_payload(descriptor, blocks)

    storage = payload['content']['storage']
    assert payload['content']['name'] == 'doc.bin'
    assert storage['size'] == 250
    assert storage['sha1'] == descriptor.sha1
    assert [info['size'] for info in storage['kss']['block_infos']] == [100, 100, 50]
    assert all(info['blob'] == {} for info in storage['kss']['block_infos'])
    assert all(set(info) == {'blob', 'sha1', 'md5', 'size'} for info in storage['kss']['block_infos'])


def test_negotiate_sends_form_fields(session, drive_server, described):
    descriptor, blocks = described
    drive_server.create_reply = negotiation_reply(3)

    negotiate(session, descriptor, blocks)

    request = drive_server.create_requests[0]
    form = parse_form(request)
    assert form['serviceToken'] == 'token-abc'
    assert json.loads(form['data']) == build_create_payload(descriptor, blocks)


def test_negotiate_whole_file_exists(session, drive_server, described):
    descriptor, blocks = described
    drive_server.create_reply = {
        'result': 'ok',
        'data': {'storage': {'exists': True, 'uploadId': 'existing-upload'}},
    }

    result = negotiate(session, descriptor, blocks)

    assert result.exists is True
    assert result.upload_id == 'existing-upload'
    assert result.blocks == []


def test_negotiate_missing_file(session, drive_server, described):
    descriptor, blocks = described
    drive_server.create_reply = negotiation_reply(3, existing={1})

    result = negotiate(session, descriptor, blocks)

    assert result.exists is False
    assert result.node_url == NODE_URL
    assert result.file_meta == 'file-meta-token'
    assert result.secure_key == 'secure-key-value'
    assert result.content_cache_key == 'cache-key-value'
    assert result.upload_id == 'upload-xyz'
    assert result.blocks == [
        BlockNegotiation(exists=False, block_meta='block-meta-0'),
        BlockNegotiation(exists=True, commit_meta='stored-commit-1'),
        BlockNegotiation(exists=False, block_meta='block-meta-2'),
    ]


def test_negotiate_failure_surfaces_description(session, drive_server, described):
    descriptor, blocks = described
    drive_server.create_reply = {'result': 'error', 'description': 'quota exceeded'}

    with pytest.raises(ProtocolError) as exc_info:
        negotiate(session, descriptor, blocks)

    assert exc_info.value.stage == 'create_file'
    assert exc_info.value.description == 'quota exceeded'
    assert 'quota exceeded' in str(exc_info.value)


def test_negotiate_no_node_urls(session, drive_server, described):
    descriptor, blocks = described
    reply = negotiation_reply(3)
    reply['data']['storage']['kss']['node_urls'] = []
    drive_server.create_reply = reply

    with pytest.raises(ProtocolError, match='no available upload node'):
        negotiate(session, descriptor, blocks)


def test_negotiate_empty_first_node_url(session, drive_server, described):
    descriptor, blocks = described
    reply = negotiation_reply(3)
    reply['data']['storage']['kss']['node_urls'] = ['', NODE_URL]
    drive_server.create_reply = reply

    with pytest.raises(ProtocolError, match='no available upload node'):
        negotiate(session, descriptor, blocks)


def test_negotiate_missing_required_field(session, drive_server, described):
    descriptor, blocks = described
    reply = negotiation_reply(3)
    del reply['data']['storage']['kss']['file_meta']
    drive_server.create_reply = reply

    with pytest.raises(ProtocolError, match='file_meta'):
        negotiate(session, descriptor, blocks)


def test_negotiate_block_count_mismatch(session, drive_server, described):
    descriptor, blocks = described
    drive_server.create_reply = negotiation_reply(2)

    with pytest.raises(ProtocolError, match='2 block entries for 3 blocks'):
        negotiate(session, descriptor, blocks)


def test_negotiate_missing_block_meta(session, drive_server, described):
    descriptor, blocks = described
    reply = negotiation_reply(3)
    reply['data']['storage']['kss']['block_metas'][2] = {'is_existed': 0}
    drive_server.create_reply = reply

    with pytest.raises(ProtocolError) as exc_info:
        negotiate(session, descriptor, blocks)

    assert exc_info.value.block_index == 2


def test_negotiate_non_json_reply(session, drive_server, described):
    descriptor, blocks = described
    drive_server.routes['/drive/user/files/create'] = lambda request: httpx.Response(502, text='<html>Bad gateway</html>')

    with pytest.raises(ProtocolError, match='not JSON'):
        negotiate(session, descriptor, blocks)


def test_negotiate_propagates_transport_error(described):
    from drive.session import DriveSession

    def refuse(request):
        raise httpx.ConnectError('Connection refused')

    descriptor, blocks = described
    with DriveSession('user-42', 'token-abc', transport=httpx.MockTransport(refuse)) as session:
        with pytest.raises(httpx.ConnectError):
            negotiate(session, descriptor, blocks)
