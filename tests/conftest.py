"""Shared pytest fixtures for all tests."""

import httpx
import pytest

from cli.config import Config
from drive.session import DriveSession
from fakes import FakeDriveServer


@pytest.fixture
def drive_server():
    """Fresh fake drive service."""
    return FakeDriveServer()


@pytest.fixture
def session(drive_server):
    """DriveSession wired to the fake drive service."""
    drive_session = DriveSession(
        'user-42',
        'token-abc',
        transport=httpx.MockTransport(drive_server.handler),
    )
    yield drive_session
    drive_session.close()


@pytest.fixture
def temp_config_dir(tmp_path_factory):
    """
    Create temporary config directory.

    Args:
        tmp_path_factory: pytest tmp_path_factory fixture

    Returns:
        Path to temporary .micloud directory
    """
    config_dir = tmp_path_factory.mktemp('config') / '.micloud'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing file uploads.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'test.txt'
    file_path.write_text('Sample content for testing')
    return file_path


@pytest.fixture
def make_file(tmp_path):
    """
    Factory for files of a given size with position-dependent content.

    Returns:
        Callable (name, size) -> Path
    """
    def _make(name: str, size: int):
        pattern = bytes(range(251))
        repeats = size // len(pattern) + 1
        path = tmp_path / name
        path.write_bytes((pattern * repeats)[:size])
        return path

    return _make
