"""Client library for the Xiaomi cloud drive file API."""

from drive.exceptions import ChunkingError, DriveError, HashingError, LocalFileError, ProtocolError
from drive.file_api import FileApi
from drive.session import DriveSession
from drive.uploader import FileUploader

__all__ = [
    'DriveSession',
    'FileApi',
    'FileUploader',
    'DriveError',
    'LocalFileError',
    'HashingError',
    'ChunkingError',
    'ProtocolError',
]
