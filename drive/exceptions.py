"""Exception classes for the drive client.

Transport failures are not wrapped: httpx exceptions reach the caller
unchanged.
"""

from typing import Optional


class DriveError(Exception):
    """
    Base exception class for all drive-client errors.

    Carries the pipeline stage, the block index (for per-block failures) and
    the server-supplied description when one was returned.
    """

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        block_index: Optional[int] = None,
        description: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.block_index = block_index
        self.description = description

    def __str__(self) -> str:
        parts = []
        if self.stage:
            parts.append(f"[{self.stage}]")
        if self.block_index is not None:
            parts.append(f"block {self.block_index}:")
        parts.append(self.message)
        if self.description:
            parts.append(f"(server: {self.description})")
        return " ".join(parts)


class LocalFileError(DriveError):
    """
    Raised when the local file is missing, unreadable, empty or too large.
    """
    pass


class HashingError(DriveError):
    """
    Raised when a digest could not be computed from its source.
    """
    pass


class ChunkingError(DriveError):
    """
    Raised when a block's byte range cannot be read in full.
    """
    pass


class ProtocolError(DriveError):
    """
    Raised when the server reports failure or omits a required field.
    """
    pass
