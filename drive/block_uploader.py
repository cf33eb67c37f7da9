"""Streaming missing blocks to the assigned upload node."""

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import BinaryIO, Callable, List, Optional
from urllib.parse import urlencode

from common.constants import BLOCK_COMPLETED, UPLOAD_BLOCK_PATH, WEB_CLIENT_HEADERS
from common.logging_config import get_logger
from common.types import BlockDescriptor, BlockNegotiation, CommitEntry, NegotiationResult
from drive.chunker import read_block
from drive.exceptions import LocalFileError, ProtocolError
from drive.schemas import BlockUploadResponse, load_json, parse_model
from drive.session import DriveSession

logger = get_logger(__name__)

STAGE = "upload_block"

ProgressCallback = Callable[[int, int], None]


def block_upload_url(node_url: str, file_meta: str, block_meta: str) -> str:
    query = urlencode({"chunk_pos": 0, "file_meta": file_meta, "block_meta": block_meta})
    return f"{node_url.rstrip('/')}{UPLOAD_BLOCK_PATH}?{query}"


def upload_block(
    session: DriveSession,
    handle: BinaryIO,
    block: BlockDescriptor,
    negotiation: NegotiationResult,
    entry: BlockNegotiation,
) -> CommitEntry:
    """
    Upload one block, or reuse its commit token if the server already has it.

    Args:
        session: Authenticated drive session
        handle: Open binary handle on the source file
        block: Block to send
        negotiation: Result of the create-file call
        entry: Negotiation entry for this block

    Returns:
        CommitEntry for the block

    Raises:
        ChunkingError: If the block's byte range cannot be read in full
        ProtocolError: If the node does not report the block as completed
    """
    if entry.exists:
        logger.debug(f"Block {block.index} already stored, skipping")
        return CommitEntry(commit_meta=entry.commit_meta)

    data = read_block(handle, block)
    headers = dict(WEB_CLIENT_HEADERS)
    headers["Content-Type"] = "application/octet-stream"

    response = session.post_raw(
        block_upload_url(negotiation.node_url, negotiation.file_meta, entry.block_meta),
        data,
        headers,
    )
    parsed = parse_model(
        BlockUploadResponse,
        load_json(response.text, STAGE, block.index),
        STAGE,
        block.index,
    )
    if parsed.stat != BLOCK_COMPLETED:
        raise ProtocolError(
            f"block not completed, stat={parsed.stat!r}",
            stage=STAGE,
            block_index=block.index,
        )
    if not parsed.commit_meta:
        raise ProtocolError("completed block without commit_meta", stage=STAGE, block_index=block.index)

    logger.debug(f"Uploaded block {block.index} ({block.size} bytes)")
    return CommitEntry(commit_meta=parsed.commit_meta)


def upload_blocks(
    session: DriveSession,
    path: str,
    blocks: List[BlockDescriptor],
    negotiation: NegotiationResult,
    workers: int = 1,
    progress: Optional[ProgressCallback] = None,
) -> List[CommitEntry]:
    """
    Upload every missing block and collect commit entries in block order.

    With ``workers > 1`` blocks go out on a bounded thread pool; each worker
    reads through its own file handle and results are stored by block index.

    Returns:
        Commit entries, one per block, in ordinal order

    Raises:
        DriveError: The first failure encountered; remaining blocks are not sent
    """
    if len(negotiation.blocks) != len(blocks):
        raise ProtocolError(
            f"{len(negotiation.blocks)} negotiation entries for {len(blocks)} blocks",
            stage=STAGE,
        )

    total = len(blocks)
    if workers <= 1 or total <= 1:
        commits = []
        with _open_source(path) as handle:
            for block, entry in zip(blocks, negotiation.blocks):
                commits.append(upload_block(session, handle, block, negotiation, entry))
                if progress:
                    progress(len(commits), total)
        return commits

    return _upload_parallel(session, path, blocks, negotiation, workers, progress)


def _upload_parallel(
    session: DriveSession,
    path: str,
    blocks: List[BlockDescriptor],
    negotiation: NegotiationResult,
    workers: int,
    progress: Optional[ProgressCallback],
) -> List[CommitEntry]:
    total = len(blocks)
    commits: List[Optional[CommitEntry]] = [None] * total

    def send(block: BlockDescriptor, entry: BlockNegotiation) -> None:
        if entry.exists:
            commits[block.index] = upload_block(session, None, block, negotiation, entry)
            return
        with _open_source(path) as handle:
            commits[block.index] = upload_block(session, handle, block, negotiation, entry)

    logger.info(f"Uploading {total} blocks with {workers} workers")
    done = 0
    with ThreadPoolExecutor(max_workers=workers) as pool:
        pending = {pool.submit(send, block, entry) for block, entry in zip(blocks, negotiation.blocks)}
        while pending:
            finished, pending = wait(pending, return_when=FIRST_EXCEPTION)
            for future in finished:
                error = future.exception()
                if error is not None:
                    for other in pending:
                        other.cancel()
                    raise error
                done += 1
                if progress:
                    progress(done, total)

    return commits


def _open_source(path: str) -> BinaryIO:
    try:
        return open(path, 'rb')
    except OSError as e:
        raise LocalFileError(f"Cannot open {path}: {e}", stage=STAGE) from e
