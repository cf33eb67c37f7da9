"""Upload pipeline: describe, chunk, negotiate, upload missing blocks, commit."""

from typing import Optional

from common.constants import CHUNK_SIZE, ROOT_FOLDER_ID
from common.logging_config import get_logger
from common.types import UploadResult
from drive.block_uploader import ProgressCallback, upload_blocks
from drive.chunker import build_blocks, describe_file
from drive.finalizer import existing_storage, finalize, uploaded_storage
from drive.negotiator import negotiate
from drive.session import DriveSession

logger = get_logger(__name__)


class FileUploader:
    """Uploads a single local file with content-addressed deduplication."""

    def __init__(self, session: DriveSession, chunk_size: int = CHUNK_SIZE, workers: int = 1):
        """
        Initialize the uploader.

        Args:
            session: Authenticated drive session (borrowed, not closed here)
            chunk_size: Block size in bytes
            workers: Number of concurrent block uploads (1 = sequential)
        """
        if chunk_size <= 0:
            raise ValueError("Chunk size must be a positive integer")
        self.session = session
        self.chunk_size = chunk_size
        self.workers = max(1, workers)

    def upload(
        self,
        path: str,
        parent_id: str = ROOT_FOLDER_ID,
        progress: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """
        Upload ``path`` into the folder ``parent_id``.

        Local preconditions are checked before any request is made. Any
        failure aborts the upload; blocks already sent are not cleaned up.

        Args:
            path: Local file path
            parent_id: Remote folder id
            progress: Optional ``(done, total)`` callback per block

        Returns:
            UploadResult with the new file id

        Raises:
            DriveError: Local, hashing, chunking or protocol failure
            httpx.HTTPError: Transport failure
        """
        descriptor = describe_file(path)
        blocks = build_blocks(descriptor, self.chunk_size)

        negotiation = negotiate(self.session, descriptor, blocks)

        if negotiation.exists:
            file_id = finalize(
                self.session,
                descriptor.name,
                existing_storage(negotiation.upload_id),
                parent_id,
            )
            logger.info(f"Upload of {descriptor.name} deduplicated [file_id={file_id}]")
            return UploadResult(
                file_id=file_id,
                name=descriptor.name,
                size=descriptor.size,
                deduplicated=True,
                uploaded_blocks=0,
                reused_blocks=len(blocks),
            )

        commits = upload_blocks(
            self.session,
            descriptor.path,
            blocks,
            negotiation,
            workers=self.workers,
            progress=progress,
        )
        file_id = finalize(
            self.session,
            descriptor.name,
            uploaded_storage(descriptor, negotiation, commits),
            parent_id,
        )

        reused = sum(1 for entry in negotiation.blocks if entry.exists)
        logger.info(
            f"Uploaded {descriptor.name}: {len(blocks) - reused} blocks sent, "
            f"{reused} reused [file_id={file_id}]"
        )
        return UploadResult(
            file_id=file_id,
            name=descriptor.name,
            size=descriptor.size,
            deduplicated=False,
            uploaded_blocks=len(blocks) - reused,
            reused_blocks=reused,
        )
