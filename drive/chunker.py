"""Splitting a local file into fixed-size blocks for upload.

Files up to ``CHUNK_SIZE`` travel as a single block; larger files are cut
into ``ceil(size / chunk_size)`` blocks where only the last may be short.
Block bytes are never held together in memory: each block is read at its
offset, hashed and dropped.
"""

import os
from typing import BinaryIO, Iterator, List

from common.constants import CHUNK_SIZE, MAX_FILE_SIZE, MIN_FILE_SIZE
from common.logging_config import get_logger
from common.types import BlockDescriptor, FileDescriptor
from drive.exceptions import ChunkingError, LocalFileError
from drive.hasher import MD5, SHA1, file_digests, hash_bytes, require_digest

logger = get_logger(__name__)

STAGE = "chunk"


def describe_file(path: str) -> FileDescriptor:
    """
    Validate a local file and compute its whole-file digests.

    Args:
        path: Path of the file to upload

    Returns:
        FileDescriptor with size, SHA-1 and MD5

    Raises:
        LocalFileError: If the file is missing, not a regular file, empty or
            at/above the 4 GiB cap
        HashingError: If the file could not be read for hashing
    """
    if not os.path.exists(path):
        raise LocalFileError(f"File not found: {path}", stage="prepare")
    if not os.path.isfile(path):
        raise LocalFileError(f"Not a file: {path}", stage="prepare")

    size = os.path.getsize(path)
    if size < MIN_FILE_SIZE or size >= MAX_FILE_SIZE:
        raise LocalFileError(
            f"Can not upload empty file or file of 4 GiB or more: {path} ({size} bytes)",
            stage="prepare",
        )

    sha1, md5 = file_digests(path)
    descriptor = FileDescriptor(
        path=path,
        name=os.path.basename(path),
        size=size,
        sha1=require_digest(sha1, "prepare"),
        md5=require_digest(md5, "prepare"),
    )
    logger.debug(f"Described {descriptor.name}: size={size} sha1={sha1}")
    return descriptor


def block_layout(size: int, chunk_size: int = CHUNK_SIZE) -> Iterator[tuple[int, int, int]]:
    """
    Yield ``(index, offset, length)`` for each block of a file of ``size`` bytes.
    """
    if chunk_size <= 0:
        raise ValueError("Chunk size must be a positive integer")
    for index, offset in enumerate(range(0, size, chunk_size)):
        yield index, offset, min(chunk_size, size - offset)


def read_block(handle: BinaryIO, block: BlockDescriptor) -> bytes:
    """
    Read exactly the byte range of ``block`` from an open binary handle.

    Raises:
        ChunkingError: If the range cannot be read in full
    """
    return _read_range(handle, block.index, block.offset, block.size)


def _read_range(handle: BinaryIO, index: int, offset: int, length: int) -> bytes:
    try:
        handle.seek(offset)
        parts = []
        remaining = length
        while remaining > 0:
            data = handle.read(remaining)
            if not data:
                break
            parts.append(data)
            remaining -= len(data)
    except OSError as e:
        raise ChunkingError(f"read failed at offset {offset}: {e}", stage=STAGE, block_index=index) from e

    if remaining:
        raise ChunkingError(
            f"short read at offset {offset}: expected {length} bytes, got {length - remaining}",
            stage=STAGE,
            block_index=index,
        )
    return b"".join(parts)


def build_blocks(descriptor: FileDescriptor, chunk_size: int = CHUNK_SIZE) -> List[BlockDescriptor]:
    """
    Produce the block descriptors for a described file.

    A file that fits in one chunk reuses the whole-file digests. Otherwise
    every block is read from its offset through one open handle and hashed
    with both algorithms.

    Raises:
        ChunkingError: If any block cannot be read in full
        LocalFileError: If the file cannot be opened
    """
    if descriptor.size <= chunk_size:
        return [
            BlockDescriptor(
                index=0,
                offset=0,
                size=descriptor.size,
                sha1=descriptor.sha1,
                md5=descriptor.md5,
            )
        ]

    blocks = []
    try:
        handle = open(descriptor.path, 'rb')
    except OSError as e:
        raise LocalFileError(f"Cannot open {descriptor.path}: {e}", stage=STAGE) from e

    with handle:
        for index, offset, length in block_layout(descriptor.size, chunk_size):
            data = _read_range(handle, index, offset, length)
            blocks.append(
                BlockDescriptor(
                    index=index,
                    offset=offset,
                    size=length,
                    sha1=hash_bytes(data, SHA1),
                    md5=hash_bytes(data, MD5),
                )
            )

    logger.info(
        f"Split {descriptor.name} ({descriptor.size} bytes) into {len(blocks)} blocks "
        f"(chunk_size={chunk_size})"
    )
    return blocks
