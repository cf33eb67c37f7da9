"""Tests for CLI command handlers."""

import httpx
import pytest
from unittest.mock import Mock

import cli.commands
from cli.commands import (
    get_api,
    handle_download,
    handle_info,
    handle_list,
    handle_token,
    handle_upload,
    handle_url,
)
from cli.models import (
    DownloadCommand,
    InfoCommand,
    ListCommand,
    TokenCommand,
    UploadCommand,
    UrlCommand,
)
from common.types import RemoteFile, UploadResult
from drive.exceptions import LocalFileError, ProtocolError
from drive.file_api import FileApi
from drive.schemas import FileInfoData


@pytest.fixture
def mock_api():
    return Mock(spec=FileApi)


@pytest.fixture(autouse=True)
def isolated_globals(monkeypatch, temp_config):
    """Keep handlers away from ~/.micloud and the cached FileApi."""
    monkeypatch.setattr(cli.commands, '_config', temp_config)
    monkeypatch.setattr(cli.commands, '_api', None)


def test_handle_token_saves_credentials(temp_config):
    result = handle_token(TokenCommand(user_id='1234', service_token='V1:abc'), config=temp_config)

    assert 'Service token saved' in result
    assert temp_config.get_credentials() == ('1234', 'V1:abc')


def test_get_api_without_credentials():
    with pytest.raises(ValueError, match='No service token'):
        get_api()


def test_get_api_builds_session_from_config(temp_config):
    temp_config.set_credentials('1234', 'V1:abc')
    temp_config.data['upload_workers'] = 3

    api = get_api()

    assert api.session.user_id == '1234'
    assert api.session.service_token == 'V1:abc'
    assert api.uploader.workers == 3
    assert get_api() is api
    api.session.close()


def test_handle_list_without_credentials():
    result = handle_list(ListCommand())
    assert 'No service token' in result


def test_handle_list(mock_api):
    mock_api.list_folder.return_value = [
        RemoteFile(file_id='d1', name='Photos', type='folder', size=0),
        RemoteFile(file_id='f1', name='a.txt', type='file', size=2048, modify_time=1600000000000),
    ]

    result = handle_list(ListCommand(), api=mock_api)

    mock_api.list_folder.assert_called_once_with('0')
    assert 'Found 2 item(s)' in result
    assert '[dir]  Photos' in result
    assert 'a.txt (ID: f1)' in result
    assert '2.00 KiB' in result


def test_handle_list_empty(mock_api):
    mock_api.list_folder.return_value = []

    assert handle_list(ListCommand(folder_id='9'), api=mock_api) == 'Folder 9 is empty.'


def test_handle_info(mock_api):
    mock_api.get_file_info.return_value = FileInfoData(id='f1', name='a.txt', size=10, sha1='ab')

    result = handle_info(InfoCommand(file_id='f1'), api=mock_api)

    assert 'Name: a.txt' in result
    assert 'Size: 10 B' in result


def test_handle_url(mock_api):
    mock_api.get_download_url.return_value = 'https://dl.test/a.txt'

    assert handle_url(UrlCommand(file_id='f1'), api=mock_api) == 'https://dl.test/a.txt'


def test_handle_url_protocol_error(mock_api):
    mock_api.get_download_url.side_effect = ProtocolError('no link', stage='download_url')

    result = handle_url(UrlCommand(file_id='f1'), api=mock_api)

    assert result.startswith('Error resolving download link')
    assert 'no link' in result


def test_handle_download_writes_file(mock_api, tmp_path):
    mock_api.get_file.return_value = b'payload'
    target = tmp_path / 'out' / 'a.bin'

    result = handle_download(DownloadCommand(file_id='f1', output_path=str(target)), api=mock_api)

    assert target.read_bytes() == b'payload'
    assert 'Downloaded: f1' in result
    mock_api.get_file_info.assert_not_called()


def test_handle_download_defaults_to_remote_name(mock_api, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    mock_api.get_file_info.return_value = FileInfoData(id='f1', name='remote.txt')
    mock_api.get_file.return_value = b'hello'

    handle_download(DownloadCommand(file_id='f1'), api=mock_api)

    assert (tmp_path / 'remote.txt').read_bytes() == b'hello'


@pytest.mark.parametrize('remote_name, expected', [
    ('../escaped.txt', 'escaped.txt'),
    ('/etc/absolute.txt', 'absolute.txt'),
    ('..', 'f1'),
    ('', 'f1'),
])
def test_handle_download_keeps_remote_name_in_cwd(mock_api, tmp_path, monkeypatch, remote_name, expected):
    workdir = tmp_path / 'work'
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    mock_api.get_file_info.return_value = FileInfoData(id='f1', name=remote_name)
    mock_api.get_file.return_value = b'hello'

    result = handle_download(DownloadCommand(file_id='f1'), api=mock_api)

    assert (workdir / expected).read_bytes() == b'hello'
    assert list(tmp_path.iterdir()) == [workdir]
    assert f"Saved to: {(workdir / expected).absolute()}" in result


def test_handle_upload(mock_api, temp_config, sample_file):
    mock_api.upload_file.return_value = UploadResult(
        file_id='new-1', name='test.txt', size=26, deduplicated=False, uploaded_blocks=1, reused_blocks=0
    )

    result = handle_upload(UploadCommand(path=str(sample_file)), api=mock_api, config=temp_config)

    assert 'Uploaded: test.txt (ID: new-1' in result
    assert '1 block(s) sent' in result
    args, kwargs = mock_api.upload_file.call_args
    assert args == (str(sample_file), '0')
    assert callable(kwargs['progress'])


def test_handle_upload_deduplicated(mock_api, temp_config, sample_file):
    mock_api.upload_file.return_value = UploadResult(
        file_id='new-2', name='test.txt', size=26, deduplicated=True, uploaded_blocks=0, reused_blocks=1
    )

    result = handle_upload(UploadCommand(path=str(sample_file), parent_id='77'), api=mock_api, config=temp_config)

    assert 'already stored' in result
    assert mock_api.upload_file.call_args[0][1] == '77'


def test_handle_upload_local_error(mock_api, temp_config):
    mock_api.upload_file.side_effect = LocalFileError('File not found: nope.txt', stage='prepare')

    result = handle_upload(UploadCommand(path='nope.txt'), api=mock_api, config=temp_config)

    assert 'Error uploading nope.txt' in result
    assert 'File not found' in result


def test_handle_upload_connection_error(mock_api, temp_config, sample_file):
    mock_api.upload_file.side_effect = httpx.ConnectError('Connection refused')

    result = handle_upload(UploadCommand(path=str(sample_file)), api=mock_api, config=temp_config)

    assert 'Cannot connect to drive service' in result
