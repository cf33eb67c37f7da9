"""Create-file negotiation: tell the server what we have, learn what it needs."""

import json
from typing import List

from common.constants import CREATE_FILE_PATH
from common.logging_config import get_logger
from common.types import BlockDescriptor, BlockNegotiation, FileDescriptor, NegotiationResult
from drive.exceptions import ProtocolError
from drive.schemas import CreateFileResponse, load_json, parse_result
from drive.session import DriveSession

logger = get_logger(__name__)

STAGE = "create_file"


def build_create_payload(descriptor: FileDescriptor, blocks: List[BlockDescriptor]) -> dict:
    """
    Build the create-file request body. No block bytes are included.
    """
    return {
        "content": {
            "name": descriptor.name,
            "storage": {
                "size": descriptor.size,
                "sha1": descriptor.sha1,
                "kss": {
                    "block_infos": [block.to_block_info() for block in blocks],
                },
            },
        }
    }


def negotiate(
    session: DriveSession,
    descriptor: FileDescriptor,
    blocks: List[BlockDescriptor],
) -> NegotiationResult:
    """
    Call the create-file endpoint and interpret the server's answer.

    Args:
        session: Authenticated drive session
        descriptor: Whole-file descriptor
        blocks: Block descriptors in ordinal order

    Returns:
        NegotiationResult; ``exists`` is True when the whole file is already
        stored and only ``upload_id`` is meaningful

    Raises:
        ProtocolError: On a non-ok result or a response missing required fields
    """
    payload = build_create_payload(descriptor, blocks)
    logger.info(f"Negotiating upload of {descriptor.name} ({descriptor.size} bytes, {len(blocks)} blocks)")

    response = session.post_form(
        session.url(CREATE_FILE_PATH),
        {
            "data": json.dumps(payload),
            "serviceToken": session.service_token,
        },
    )
    parsed = parse_result(CreateFileResponse, load_json(response.text, STAGE), STAGE)
    storage = parsed.data.storage

    if storage.exists:
        if not storage.upload_id:
            raise ProtocolError("file reported as existing without uploadId", stage=STAGE)
        logger.info(f"{descriptor.name} already stored server-side [uploadId={storage.upload_id}]")
        return NegotiationResult(exists=True, upload_id=storage.upload_id)

    kss = storage.kss
    if kss is None:
        raise ProtocolError("missing kss upload details", stage=STAGE)
    if not kss.node_urls or not kss.node_urls[0]:
        raise ProtocolError("no available upload node", stage=STAGE)
    if len(kss.block_metas) != len(blocks):
        raise ProtocolError(
            f"server returned {len(kss.block_metas)} block entries for {len(blocks)} blocks",
            stage=STAGE,
        )

    entries = []
    for index, meta in enumerate(kss.block_metas):
        exists = meta.is_existed == 1
        if exists and not meta.commit_meta:
            raise ProtocolError("existing block without commit_meta", stage=STAGE, block_index=index)
        if not exists and not meta.block_meta:
            raise ProtocolError("missing block without block_meta", stage=STAGE, block_index=index)
        entries.append(
            BlockNegotiation(
                exists=exists,
                commit_meta=meta.commit_meta if exists else None,
                block_meta=None if exists else meta.block_meta,
            )
        )

    result = NegotiationResult(
        exists=False,
        upload_id=storage.upload_id,
        node_urls=list(kss.node_urls),
        file_meta=kss.file_meta,
        secure_key=kss.secure_key,
        content_cache_key=kss.content_cache_key,
        blocks=entries,
    )
    missing = sum(1 for entry in entries if not entry.exists)
    logger.info(
        f"Negotiated {descriptor.name}: {missing}/{len(entries)} blocks to upload [node={result.node_url}]"
    )
    return result
