"""Read-side drive operations plus the upload entry point."""

from typing import List, Optional

from common.constants import (
    CHUNK_SIZE,
    FILE_INFO_JSONP_PATH,
    FILE_INFO_PATH,
    FOLDER_CHILDREN_PATH,
    JSONP_CALLBACK,
    ROOT_FOLDER_ID,
)
from common.logging_config import get_logger
from common.types import RemoteFile, UploadResult
from drive.block_uploader import ProgressCallback
from drive.exceptions import ProtocolError
from drive.schemas import (
    FileInfoData,
    FileInfoResponse,
    FolderListResponse,
    JsonpDescriptor,
    load_json,
    parse_model,
    parse_result,
)
from drive.session import DriveSession
from drive.uploader import FileUploader

logger = get_logger(__name__)


def strip_jsonp(text: str, callback: str = JSONP_CALLBACK) -> str:
    """
    Remove a ``callback(...)`` wrapper from a JSONP body.

    Bodies that are not wrapped are returned unchanged (minus surrounding
    whitespace).
    """
    body = text.strip()
    prefix = f"{callback}("
    if body.startswith(prefix):
        body = body[len(prefix):]
        body = body.rstrip().rstrip(';').rstrip()
        if body.endswith(')'):
            body = body[:-1]
    return body


class FileApi:
    """Drive file operations on top of an authenticated DriveSession."""

    def __init__(self, session: DriveSession, chunk_size: int = CHUNK_SIZE, workers: int = 1):
        self.session = session
        self.uploader = FileUploader(session, chunk_size=chunk_size, workers=workers)

    def list_folder(self, folder_id: str = ROOT_FOLDER_ID) -> List[RemoteFile]:
        """
        List the direct children of a remote folder.

        Args:
            folder_id: Remote folder id ("0" is the root)

        Returns:
            RemoteFile entries in server order
        """
        stage = "list_folder"
        response = self.session.get(self.session.url(FOLDER_CHILDREN_PATH.format(folder_id=folder_id)))
        parsed = parse_result(FolderListResponse, load_json(response.text, stage), stage)
        files = [
            RemoteFile(
                file_id=entry.id,
                name=entry.name,
                type=entry.type,
                size=entry.size or 0,
                sha1=entry.sha1,
                parent_id=entry.parent_id,
                create_time=entry.create_time,
                modify_time=entry.modify_time,
            )
            for entry in parsed.data.entries
        ]
        logger.info(f"Listed folder {folder_id}: {len(files)} entries")
        return files

    def get_file_info(self, file_id: str) -> FileInfoData:
        """
        Fetch metadata for a remote file.
        """
        stage = "file_info"
        response = self.session.get(self.session.url(FILE_INFO_JSONP_PATH.format(file_id=file_id)))
        parsed = parse_result(FileInfoResponse, load_json(strip_jsonp(response.text), stage), stage)
        return parsed.data

    def get_file(self, file_id: str) -> bytes:
        """
        Download the content of a remote file.

        Metadata points at an intermediate JSONP descriptor whose ``url`` and
        ``meta`` are then POSTed to retrieve the bytes.

        Raises:
            ProtocolError: If the metadata has no ``jsonpUrl`` or the
                descriptor is malformed, or the content request does not
                return HTTP 200
        """
        stage = "get_file"
        info = self.get_file_info(file_id)
        jsonp_url = info.storage.jsonp_url if info.storage else None
        if not jsonp_url:
            raise ProtocolError("get fileUrl failed: no data.storage.jsonpUrl", stage=stage)

        response = self.session.get(jsonp_url)
        descriptor = parse_model(JsonpDescriptor, load_json(strip_jsonp(response.text), stage), stage)

        response = self.session.post_form(descriptor.url, {"meta": descriptor.meta})
        if response.status_code != 200:
            raise ProtocolError(f"file content request returned HTTP {response.status_code}", stage=stage)
        logger.info(f"Downloaded file {file_id} ({len(response.content)} bytes)")
        return response.content

    def get_download_url(self, file_id: str) -> str:
        """
        Resolve the public download link of a remote file.

        Raises:
            ProtocolError: If the response carries no ``data.storage.downloadUrl``
        """
        stage = "download_url"
        response = self.session.get(self.session.url(FILE_INFO_PATH.format(file_id=file_id)))
        parsed = parse_result(FileInfoResponse, load_json(strip_jsonp(response.text), stage), stage)
        download_url = parsed.data.storage.download_url if parsed.data.storage else None
        if not download_url:
            raise ProtocolError("no data.storage.downloadUrl in response", stage=stage)
        return download_url

    def upload_file(
        self,
        path: str,
        parent_id: str = ROOT_FOLDER_ID,
        progress: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """
        Upload a local file into ``parent_id``. See FileUploader.upload.
        """
        return self.uploader.upload(path, parent_id, progress=progress)
