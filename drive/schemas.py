"""Pydantic schemas for drive API responses.

Each endpoint's reply is validated into an explicit model; a missing or
mistyped required field becomes a ProtocolError instead of an empty value.
"""

import json
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from common.constants import RESULT_OK
from drive.exceptions import ProtocolError

ModelT = TypeVar("ModelT", bound=BaseModel)


class DriveModel(BaseModel):
    """Base model: unknown fields are ignored, numeric ids are read as strings."""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class StatusResponse(DriveModel):
    """Envelope shared by the create-file, commit and metadata endpoints."""
    result: str
    description: Optional[str] = None


class BlockMeta(DriveModel):
    """Per-block negotiation entry."""
    is_existed: int = 0
    commit_meta: Optional[str] = None
    block_meta: Optional[str] = None


class KssInfo(DriveModel):
    """Upload session details for a file the server does not have yet."""
    node_urls: List[str]
    file_meta: str
    block_metas: List[BlockMeta]
    secure_key: Optional[str] = None
    content_cache_key: Optional[str] = Field(default=None, alias="contentCacheKey")


class CreateStorage(DriveModel):
    exists: bool = False
    upload_id: Optional[str] = Field(default=None, alias="uploadId")
    kss: Optional[KssInfo] = None


class CreateFileData(DriveModel):
    storage: CreateStorage


class CreateFileResponse(StatusResponse):
    """Response model for the create-file (negotiation) call."""
    data: CreateFileData


class BlockUploadResponse(DriveModel):
    """Response model for a block chunk upload."""
    stat: str
    commit_meta: Optional[str] = None


class CommitFileData(DriveModel):
    id: str


class CommitFileResponse(StatusResponse):
    """Response model for the final commit call."""
    data: CommitFileData


class FileStorage(DriveModel):
    jsonp_url: Optional[str] = Field(default=None, alias="jsonpUrl")
    download_url: Optional[str] = Field(default=None, alias="downloadUrl")


class FileInfoData(DriveModel):
    id: Optional[str] = None
    name: Optional[str] = None
    size: Optional[int] = None
    sha1: Optional[str] = None
    type: Optional[str] = None
    parent_id: Optional[str] = Field(default=None, alias="parentId")
    storage: Optional[FileStorage] = None


class FileInfoResponse(StatusResponse):
    """Response model for file metadata."""
    data: FileInfoData


class JsonpDescriptor(DriveModel):
    """Intermediate descriptor pointing at the actual file bytes."""
    url: str
    meta: str


class FolderEntry(DriveModel):
    id: str
    name: str
    type: str = "file"
    size: Optional[int] = None
    sha1: Optional[str] = None
    parent_id: Optional[str] = Field(default=None, alias="parentId")
    create_time: Optional[int] = Field(default=None, alias="createTime")
    modify_time: Optional[int] = Field(default=None, alias="modifyTime")


class FolderListData(DriveModel):
    entries: List[FolderEntry] = Field(default_factory=list, alias="list")


class FolderListResponse(StatusResponse):
    """Response model for folder listing."""
    data: FolderListData


def load_json(text: str, stage: str, block_index: Optional[int] = None) -> Any:
    """
    Decode a response body as JSON.

    Raises:
        ProtocolError: If the body is not valid JSON
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        snippet = (text or "")[:120]
        raise ProtocolError(
            f"response is not JSON: {e} (body: {snippet!r})",
            stage=stage,
            block_index=block_index,
        ) from e


def parse_model(
    model: Type[ModelT],
    payload: Any,
    stage: str,
    block_index: Optional[int] = None,
) -> ModelT:
    """
    Validate a decoded payload into ``model``.

    Raises:
        ProtocolError: If required fields are missing or malformed
    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "<root>" for err in e.errors())
        raise ProtocolError(
            f"malformed response, missing or invalid: {fields}",
            stage=stage,
            block_index=block_index,
        ) from e


def parse_result(model: Type[ModelT], payload: Any, stage: str) -> ModelT:
    """
    Check the ``result`` marker, then validate the full response.

    Raises:
        ProtocolError: If ``result`` is not ``ok`` (with the server
            description) or the response is malformed
    """
    status = parse_model(StatusResponse, payload, stage)
    if status.result != RESULT_OK:
        raise ProtocolError(
            f"server returned result={status.result!r}",
            stage=stage,
            description=status.description,
        )
    return parse_model(model, payload, stage)
