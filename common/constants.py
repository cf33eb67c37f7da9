"""Project-wide constants (service host, endpoints, chunk and size limits)."""

BASE_URI: str = "https://i.mi.com"

FILE_INFO_PATH: str = "/drive/user/files/{file_id}"
FILE_INFO_JSONP_PATH: str = "/drive/user/files/{file_id}?jsonpCallback=callback"
FOLDER_CHILDREN_PATH: str = "/drive/user/folders/{folder_id}/children"
CREATE_FILE_PATH: str = "/drive/user/files/create"
COMMIT_FILE_PATH: str = "/drive/user/files"
UPLOAD_BLOCK_PATH: str = "/upload_block_chunk"

CHUNK_SIZE: int = 4 * 1024 * 1024  # 4 MiB per block
MAX_FILE_SIZE: int = 4 * 1024 * 1024 * 1024  # exclusive upper bound
MIN_FILE_SIZE: int = 1

RESULT_OK: str = "ok"
BLOCK_COMPLETED: str = "BLOCK_COMPLETED"
KSS_STAT_OK: str = "OK"

JSONP_CALLBACK: str = "callback"
ROOT_FOLDER_ID: str = "0"

WEB_CLIENT_HEADERS: dict = {
    "DNT": "1",
    "Origin": BASE_URI,
    "Referer": f"{BASE_URI}/drive",
}
