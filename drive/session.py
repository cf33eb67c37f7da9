"""Authenticated HTTP session for the drive service."""

from typing import Mapping, Optional

import httpx

from common.constants import BASE_URI
from common.logging_config import get_logger
from drive.exceptions import ProtocolError

logger = get_logger(__name__)


class DriveSession:
    """
    httpx-backed session that already holds a valid service token.

    The token is presented as the ``serviceToken`` cookie together with the
    ``userId`` cookie; endpoints that expect it as a form field read it from
    ``service_token``. Transport errors are raised unchanged.
    """

    def __init__(
        self,
        user_id: str,
        service_token: str,
        base_url: str = BASE_URI,
        timeout: float = 30,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the session.

        Args:
            user_id: Account id the token was issued for
            service_token: Service token for the drive service
            base_url: Service base URL
            timeout: Transport timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.user_id = user_id
        self.service_token = service_token
        self.base_url = base_url.rstrip('/')
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            cookies={'userId': user_id, 'serviceToken': service_token},
            follow_redirects=False,
            transport=transport,
        )
        logger.info(f"Initialized DriveSession [base_url={self.base_url}]")

    def url(self, path: str) -> str:
        """Absolute URL for a path on the service host."""
        return f"{self.base_url}{path}"

    def get(self, url: str) -> httpx.Response:
        """
        GET ``url``, following a single 302 redirect.

        Raises:
            ProtocolError: If the redirect carries no Location header
        """
        logger.debug(f"GET {url}")
        response = self.client.get(url)
        if response.status_code == httpx.codes.FOUND:
            location = response.headers.get('Location')
            if not location:
                raise ProtocolError(f"redirect without Location from {url}", stage="get")
            logger.debug(f"Following redirect: {url} -> {location}")
            response = self.client.get(location)
        logger.debug(f"GET {url} status={response.status_code}")
        return response

    def post_form(
        self,
        url: str,
        fields: Mapping[str, str],
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """
        POST form-encoded ``fields`` to ``url``.
        """
        logger.debug(f"POST (form) {url}")
        response = self.client.post(url, data=dict(fields), headers=headers)
        logger.debug(f"POST {url} status={response.status_code}")
        return response

    def post_raw(
        self,
        url: str,
        body: bytes,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """
        POST a raw byte body to ``url``.
        """
        logger.debug(f"POST (raw, {len(body)} bytes) {url.split('?')[0]}")
        response = self.client.post(url, content=body, headers=headers)
        logger.debug(f"POST {url.split('?')[0]} status={response.status_code}")
        return response

    def close(self) -> None:
        """Close the HTTP session."""
        self.client.close()

    def __enter__(self) -> 'DriveSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
