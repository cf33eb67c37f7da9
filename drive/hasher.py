"""Content digests for files and blocks.

SHA-1 is the content-identity key the service deduplicates on; MD5 travels
alongside it as an integrity check. Both are reported as lowercase hex.
"""

import hashlib
from typing import BinaryIO, Optional

from common.logging_config import get_logger
from drive.exceptions import HashingError

logger = get_logger(__name__)

SHA1 = "sha1"
MD5 = "md5"
ALGORITHMS = (SHA1, MD5)

EMPTY_DIGEST = ""

READ_SIZE = 1024 * 1024


def _new_hash(algorithm: str):
    if algorithm not in ALGORITHMS:
        raise ValueError(f"Unsupported digest algorithm: {algorithm}")
    return hashlib.new(algorithm)


def hash_bytes(data: bytes, algorithm: str = SHA1) -> str:
    """
    Compute the digest of an in-memory buffer.

    Args:
        data: Raw bytes to hash.
        algorithm: ``sha1`` or ``md5``.

    Returns:
        Lowercase hexadecimal digest.
    """
    h = _new_hash(algorithm)
    h.update(data)
    return h.hexdigest()


def digest_pair(stream: BinaryIO) -> tuple[str, str]:
    """
    Compute SHA-1 and MD5 of a stream in a single pass.

    Returns:
        Tuple of (sha1, md5) hex digests.
    """
    sha1 = hashlib.sha1()
    md5 = hashlib.md5()
    for chunk in iter(lambda: stream.read(READ_SIZE), b""):
        sha1.update(chunk)
        md5.update(chunk)
    return sha1.hexdigest(), md5.hexdigest()


def file_digests(path: str) -> tuple[str, str]:
    """
    Compute (sha1, md5) of a file in one read.

    Returns:
        Lowercase hexadecimal digests, or a pair of ``EMPTY_DIGEST`` markers if
        the file could not be read. Callers must pass each result through
        ``require_digest``.
    """
    try:
        with open(path, 'rb') as f:
            return digest_pair(f)
    except OSError as e:
        logger.warning(f"Cannot read {path} for digests: {e}")
        return EMPTY_DIGEST, EMPTY_DIGEST


def require_digest(digest: str, stage: str, block_index: Optional[int] = None) -> str:
    """
    Reject the empty digest marker.

    Raises:
        HashingError: If ``digest`` is empty.
    """
    if not digest:
        raise HashingError("digest could not be computed", stage=stage, block_index=block_index)
    return digest
