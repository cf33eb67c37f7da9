"""Final commit call that registers the file under its parent folder."""

import json
from typing import List

from common.constants import COMMIT_FILE_PATH, KSS_STAT_OK, WEB_CLIENT_HEADERS
from common.logging_config import get_logger
from common.types import CommitEntry, FileDescriptor, NegotiationResult
from drive.schemas import CommitFileResponse, load_json, parse_result
from drive.session import DriveSession

logger = get_logger(__name__)

STAGE = "commit_file"


def existing_storage(upload_id: str) -> dict:
    """Storage payload for a file the server already holds."""
    return {"uploadId": upload_id, "exists": True}


def uploaded_storage(
    descriptor: FileDescriptor,
    negotiation: NegotiationResult,
    commits: List[CommitEntry],
) -> dict:
    """
    Storage payload for a file whose blocks were uploaded (or reused).

    ``commits`` must be in block order.
    """
    storage = {
        "size": descriptor.size,
        "sha1": descriptor.sha1,
        "kss": {
            "stat": KSS_STAT_OK,
            "node_urls": list(negotiation.node_urls),
            "secure_key": negotiation.secure_key,
            "contentCacheKey": negotiation.content_cache_key,
            "file_meta": negotiation.file_meta,
            "commit_metas": [commit.to_dict() for commit in commits],
        },
        "exists": False,
    }
    if negotiation.upload_id:
        storage["uploadId"] = negotiation.upload_id
    return storage


def build_commit_payload(name: str, storage: dict) -> dict:
    return {"content": {"name": name, "storage": storage}}


def finalize(session: DriveSession, name: str, storage: dict, parent_id: str) -> str:
    """
    Create the file entry under ``parent_id``.

    Returns:
        Server-assigned file id

    Raises:
        ProtocolError: On a non-ok result (with the server description) or a
            response without ``data.id``
    """
    headers = dict(WEB_CLIENT_HEADERS)
    headers["Content-Type"] = "application/x-www-form-urlencoded"

    response = session.post_form(
        session.url(COMMIT_FILE_PATH),
        {
            "data": json.dumps(build_commit_payload(name, storage)),
            "serviceToken": session.service_token,
            "parentId": parent_id,
        },
        headers=headers,
    )
    parsed = parse_result(CommitFileResponse, load_json(response.text, STAGE), STAGE)
    logger.info(f"Committed {name} under folder {parent_id} [file_id={parsed.data.id}]")
    return parsed.data.id
