"""Shared data type definitions (FileDescriptor, BlockDescriptor, negotiation results, etc.)."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class FileDescriptor:
    """
    Local file selected for upload, with its whole-file digests.
    """
    path: str
    name: str
    size: int
    sha1: str
    md5: str


@dataclass(frozen=True)
class BlockDescriptor:
    """
    Metadata for a single block of a file. No block bytes are held here.
    """
    index: int
    offset: int
    size: int
    sha1: str
    md5: str

    def to_block_info(self) -> dict:
        """Wire form used in the create-file request; ``blob`` must be present and empty."""
        return {"blob": {}, "sha1": self.sha1, "md5": self.md5, "size": self.size}


@dataclass(frozen=True)
class BlockNegotiation:
    """
    Server verdict for one block: either a commit token (already stored) or
    a block-metadata token to upload against.
    """
    exists: bool
    commit_meta: Optional[str] = None
    block_meta: Optional[str] = None


@dataclass(frozen=True)
class NegotiationResult:
    """
    Outcome of the create-file call.
    """
    exists: bool
    upload_id: Optional[str] = None
    node_urls: List[str] = field(default_factory=list)
    file_meta: Optional[str] = None
    secure_key: Optional[str] = None
    content_cache_key: Optional[str] = None
    blocks: List[BlockNegotiation] = field(default_factory=list)

    @property
    def node_url(self) -> str:
        return self.node_urls[0]


@dataclass(frozen=True)
class CommitEntry:
    """
    Proof that a block is stored server-side.
    """
    commit_meta: str

    def to_dict(self) -> dict:
        return {"commit_meta": self.commit_meta}


@dataclass(frozen=True)
class UploadResult:
    """
    Result of a finished upload.
    """
    file_id: str
    name: str
    size: int
    deduplicated: bool
    uploaded_blocks: int
    reused_blocks: int


@dataclass(frozen=True)
class RemoteFile:
    """
    Entry of a remote folder listing.
    """
    file_id: str
    name: str
    type: str
    size: int
    sha1: Optional[str] = None
    parent_id: Optional[str] = None
    create_time: Optional[int] = None
    modify_time: Optional[int] = None

    @property
    def is_folder(self) -> bool:
        return self.type == "folder"
