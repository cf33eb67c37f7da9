"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class TokenCommand:
    """Store account id and service token."""

    user_id: str
    service_token: str
    command: Literal["token"] = "token"


@dataclass(frozen=True)
class ListCommand:
    """List a remote folder."""

    folder_id: str | None = None
    command: Literal["ls"] = "ls"


@dataclass(frozen=True)
class InfoCommand:
    """Show remote file metadata."""

    file_id: str
    command: Literal["info"] = "info"


@dataclass(frozen=True)
class UrlCommand:
    """Resolve a public download link."""

    file_id: str
    command: Literal["url"] = "url"


@dataclass(frozen=True)
class DownloadCommand:
    """Download file content by id."""

    file_id: str
    output_path: str | None = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class UploadCommand:
    """Upload a local file."""

    path: str
    parent_id: str | None = None
    command: Literal["upload"] = "upload"


CommandRequest = (
    TokenCommand
    | ListCommand
    | InfoCommand
    | UrlCommand
    | DownloadCommand
    | UploadCommand
)
