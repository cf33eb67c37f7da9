"""Command handler functions for CLI operations."""

import os
from pathlib import Path
from typing import Optional

import httpx

from common.constants import ROOT_FOLDER_ID
from common.logging_config import get_logger
from cli.config import Config
from cli.models import (
    DownloadCommand,
    InfoCommand,
    ListCommand,
    TokenCommand,
    UploadCommand,
    UrlCommand,
)
from cli.utils import BlockProgress, format_file_size, format_timestamp
from drive.exceptions import DriveError
from drive.file_api import FileApi
from drive.session import DriveSession

logger = get_logger(__name__)


_config: Optional[Config] = None
_api: Optional[FileApi] = None


def get_config() -> Config:
    """
    Get or create global Config instance.

    Returns:
        Config instance backed by ~/.micloud/config.json
    """
    global _config
    if _config is None:
        _config = Config(Path.home() / '.micloud' / 'config.json')
    return _config


def get_api() -> FileApi:
    """
    Get or create global FileApi instance.

    Returns:
        FileApi bound to a DriveSession built from the stored credentials

    Raises:
        ValueError: If no credentials are configured
    """
    global _api
    if _api is None:
        config = get_config()
        credentials = config.get_credentials()
        if credentials is None:
            raise ValueError("No service token. Please run: token <user_id> <service_token>")
        user_id, service_token = credentials
        logger.debug("Creating new DriveSession instance")
        session = DriveSession(
            user_id,
            service_token,
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
        )
        _api = FileApi(session, workers=config.get_upload_workers())
    return _api


def reset_api() -> None:
    """Drop the cached FileApi so the next command picks up new credentials."""
    global _api
    if _api is not None:
        _api.session.close()
    _api = None


def _format_failure(action: str, error: Exception) -> str:
    """
    Map drive and transport errors to user-facing messages.
    """
    if isinstance(error, ValueError):
        return f"Error: {error}"
    if isinstance(error, DriveError):
        return f"Error {action}: {error}"
    if isinstance(error, httpx.ConnectError):
        return f"Error {action}: Cannot connect to drive service"
    if isinstance(error, httpx.TimeoutException):
        return f"Error {action}: Request timed out"
    return f"Error {action}: {type(error).__name__}: {error}"


def _local_name(remote_name: Optional[str], file_id: str) -> str:
    """Base name of a remote file, safe to write in the working directory."""
    name = Path(remote_name or '').name
    if name in ('', '.', '..'):
        return file_id
    return name


def handle_token(cmd: TokenCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'token' command.

    Args:
        cmd: TokenCommand with user_id and service_token
        config: Optional Config for dependency injection (testing)

    Returns:
        Confirmation message
    """
    if config is None:
        config = get_config()
    config.set_credentials(cmd.user_id, cmd.service_token)
    reset_api()
    logger.info(f"Stored credentials for user {cmd.user_id}")
    return f"Service token saved for user {cmd.user_id}."


def handle_list(cmd: ListCommand, api: Optional[FileApi] = None) -> str:
    """
    Handle 'ls' command.

    Args:
        cmd: ListCommand with optional folder_id
        api: Optional FileApi for dependency injection (testing)

    Returns:
        Formatted folder listing or error message
    """
    folder_id = cmd.folder_id or ROOT_FOLDER_ID
    try:
        if api is None:
            api = get_api()
        files = api.list_folder(folder_id)
    except (ValueError, DriveError, httpx.HTTPError) as e:
        logger.error(f"List of folder {folder_id} failed: {e}")
        return _format_failure("listing folder", e)

    if not files:
        return f"Folder {folder_id} is empty."

    output = [f"Found {len(files)} item(s) in folder {folder_id}:\n"]
    for entry in files:
        if entry.is_folder:
            output.append(f"  [dir]  {entry.name} (ID: {entry.file_id})")
        else:
            output.append(
                f"  [file] {entry.name} (ID: {entry.file_id})\n"
                f"         Size: {format_file_size(entry.size)}  "
                f"Modified: {format_timestamp(entry.modify_time)}"
            )
    return '\n'.join(output)


def handle_info(cmd: InfoCommand, api: Optional[FileApi] = None) -> str:
    """
    Handle 'info' command.

    Args:
        cmd: InfoCommand with file_id
        api: Optional FileApi for dependency injection (testing)

    Returns:
        Formatted metadata or error message
    """
    try:
        if api is None:
            api = get_api()
        info = api.get_file_info(cmd.file_id)
    except (ValueError, DriveError, httpx.HTTPError) as e:
        logger.error(f"Info for {cmd.file_id} failed: {e}")
        return _format_failure("fetching file info", e)

    size = format_file_size(info.size) if info.size is not None else "-"
    return (
        f"Name: {info.name or '-'}\n"
        f"ID: {info.id or cmd.file_id}\n"
        f"Size: {size}\n"
        f"SHA-1: {info.sha1 or '-'}"
    )


def handle_url(cmd: UrlCommand, api: Optional[FileApi] = None) -> str:
    """
    Handle 'url' command.

    Args:
        cmd: UrlCommand with file_id
        api: Optional FileApi for dependency injection (testing)

    Returns:
        Download link or error message
    """
    try:
        if api is None:
            api = get_api()
        return api.get_download_url(cmd.file_id)
    except (ValueError, DriveError, httpx.HTTPError) as e:
        logger.error(f"Download link for {cmd.file_id} failed: {e}")
        return _format_failure("resolving download link", e)


def handle_download(cmd: DownloadCommand, api: Optional[FileApi] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with file_id and optional output_path
        api: Optional FileApi for dependency injection (testing)

    Returns:
        Success or error message with download details
    """
    logger.info(f"Executing download command: file_id={cmd.file_id} output_path={cmd.output_path}")
    try:
        if api is None:
            api = get_api()
        if cmd.output_path:
            output_file = Path(os.path.expanduser(cmd.output_path))
        else:
            info = api.get_file_info(cmd.file_id)
            output_file = Path(_local_name(info.name, cmd.file_id))
        content = api.get_file(cmd.file_id)
    except (ValueError, DriveError, httpx.HTTPError) as e:
        logger.error(f"Download of {cmd.file_id} failed: {e}")
        return _format_failure("downloading file", e)

    if output_file.is_dir():
        output_file = output_file / cmd.file_id
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_bytes(content)
    except IOError as e:
        return f"Error writing file: {e}"

    return f"Downloaded: {cmd.file_id} ({format_file_size(len(content))})\nSaved to: {output_file.absolute()}"


def handle_upload(cmd: UploadCommand, api: Optional[FileApi] = None, config: Optional[Config] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with path and optional parent_id
        api: Optional FileApi for dependency injection (testing)
        config: Optional Config for dependency injection (testing)

    Returns:
        Success or error message with upload results
    """
    if config is None:
        config = get_config()
    parent_id = cmd.parent_id or config.get_default_parent_id()
    path = os.path.expanduser(cmd.path)
    logger.info(f"Executing upload command: path={path} parent_id={parent_id}")

    progress = BlockProgress(os.path.basename(path))
    try:
        if api is None:
            api = get_api()
        result = api.upload_file(path, parent_id, progress=progress)
    except (ValueError, DriveError, httpx.HTTPError) as e:
        progress.finish()
        logger.error(f"Upload of {path} failed: {e}")
        return _format_failure(f"uploading {cmd.path}", e)

    if result.deduplicated:
        detail = "already stored, no data sent"
    else:
        detail = f"{result.uploaded_blocks} block(s) sent, {result.reused_blocks} reused"
    return (
        f"Uploaded: {result.name} (ID: {result.file_id}, "
        f"Size: {format_file_size(result.size)}, {detail})"
    )
