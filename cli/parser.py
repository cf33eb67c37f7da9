"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    DownloadCommand,
    InfoCommand,
    ListCommand,
    TokenCommand,
    UploadCommand,
    UrlCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Token/List/Info/Url/Download/Upload)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "token":
        return _parse_token(tokens[1:])
    elif command_name == "ls":
        return _parse_list(tokens[1:])
    elif command_name == "info":
        return InfoCommand(file_id=_single_id("info", tokens[1:]))
    elif command_name == "url":
        return UrlCommand(file_id=_single_id("url", tokens[1:]))
    elif command_name == "download":
        return _parse_download(tokens[1:])
    elif command_name == "upload":
        return _parse_upload(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_token(args: list[str]) -> TokenCommand:
    """Parse 'token <user_id> <service_token>' command."""
    if len(args) != 2:
        raise ParseError("token requires exactly 2 arguments: <user_id> <service_token>")

    user_id, service_token = args
    return TokenCommand(user_id=user_id, service_token=service_token)


def _parse_list(args: list[str]) -> ListCommand:
    """Parse 'ls [folder_id]' command."""
    if len(args) > 1:
        raise ParseError("ls takes at most 1 argument: [folder_id]")

    return ListCommand(folder_id=args[0] if args else None)


def _single_id(command_name: str, args: list[str]) -> str:
    """Parse '<command> <file_id>' commands."""
    if len(args) != 1:
        raise ParseError(f"{command_name} requires exactly 1 argument: <file_id>")
    return args[0]


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <file_id> [output_path]' command."""
    if len(args) < 1 or len(args) > 2:
        raise ParseError("download requires 1 or 2 arguments: <file_id> [output_path]")

    file_id = args[0]
    output_path = args[1] if len(args) > 1 else None

    return DownloadCommand(file_id=file_id, output_path=output_path)


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <path> [parent_id]' command."""
    if len(args) < 1 or len(args) > 2:
        raise ParseError("upload requires 1 or 2 arguments: <path> [parent_id]")

    path = args[0]
    parent_id = args[1] if len(args) > 1 else None

    return UploadCommand(path=path, parent_id=parent_id)
