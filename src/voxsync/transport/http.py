"""Multipart HTTP upload transport built on aiohttp."""

import asyncio
import logging
from typing import Optional

import aiohttp
from yarl import URL

from ..utils.common import truncate
from .base import (
    InvalidEndpointError,
    ServerRejected,
    Success,
    TransportFailure,
    UploadOutcome,
    UploadTransport,
)

logger = logging.getLogger(__name__)

AUDIO_FIELD = "audio"
FILENAME_FIELD = "filename"
SUCCESS_CODES = (200, 201)


class HTTPUploadTransport(UploadTransport):
    """Posts recordings as multipart/form-data to a fixed endpoint.

    The request carries two parts: the audio bytes under ``audio`` (with the
    artifact identifier as its file name) and the identifier again as the
    plain ``filename`` field. Only 200 and 201 count as success.
    """

    def __init__(
        self,
        upload_url: str,
        timeout: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize the transport.

        Args:
            upload_url: Full endpoint URL, e.g. http://host:3000/api/recordings
            timeout: Hard limit in seconds for one upload attempt
            session: Optional shared client session (not closed by this transport)
        """
        self.upload_url = upload_url
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    def _validated_url(self) -> URL:
        try:
            url = URL(self.upload_url)
        except (TypeError, ValueError) as e:
            raise InvalidEndpointError(f"Invalid API URL: {self.upload_url}") from e

        if not url.is_absolute() or url.scheme not in ("http", "https") or not url.host:
            raise InvalidEndpointError(f"Invalid API URL: {self.upload_url}")
        return url

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    @staticmethod
    def build_form(artifact_id: str, payload: bytes, mime_type: str) -> aiohttp.FormData:
        """Build the two-part multipart body for one recording."""
        form = aiohttp.FormData()
        form.add_field(AUDIO_FIELD, payload, filename=artifact_id, content_type=mime_type)
        form.add_field(FILENAME_FIELD, artifact_id)
        return form

    async def upload(
        self,
        artifact_id: str,
        payload: bytes,
        mime_type: str,
        format_extension: str,
        credential: Optional[str] = None,
    ) -> UploadOutcome:
        url = self._validated_url()

        headers = {}
        if credential:
            headers["Authorization"] = f"Bearer {credential}"

        form = self.build_form(artifact_id, payload, mime_type)
        session = await self._get_session()

        logger.info(f"Uploading {format_extension.upper()} file {artifact_id} to {url}")

        try:
            async with session.post(
                url,
                data=form,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                body = await response.text(errors="replace")
                status = response.status
        except asyncio.TimeoutError:
            logger.warning(f"Upload of {artifact_id} timed out after {self.timeout}s")
            return TransportFailure("timeout")
        except aiohttp.ClientError as e:
            logger.warning(f"Upload of {artifact_id} failed: {e}")
            return TransportFailure(str(e) or type(e).__name__)

        logger.debug(f"Upload response status for {artifact_id}: {status}")

        if status in SUCCESS_CODES:
            return Success(status)

        logger.debug(f"Rejected upload response for {artifact_id}: {truncate(body)}")
        return ServerRejected(status, body)

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "HTTPUploadTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
