"""Upload delegate: turns staged files into durable attachments.

Without an upload destination, attachments come from local metadata and
previews (offline/demo operation). With one, every staged file goes up in a
single multipart batch and any non-success response fails the whole batch.
"""

import logging
from collections.abc import Sequence

import httpx
from pydantic import TypeAdapter

from chat_widget.attachments.intake import DEFAULT_MIME, StagedFile
from chat_widget.errors import UploadError
from chat_widget.models.schemas import Attachment, UploadedFile

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "files"

_uploaded_files = TypeAdapter(list[UploadedFile])


class UploadDelegate:
    """Deliver staged files to the upload endpoint, or derive them locally.

    Args:
        client: HTTP client used for remote uploads.
        upload_url: Upload endpoint. None selects local-only attachments.
        headers: Extra headers sent with the upload (e.g. the credential).
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        upload_url: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._client = client
        self.upload_url = upload_url
        self._headers = headers or {}

    async def deliver(self, files: Sequence[StagedFile]) -> list[Attachment]:
        """Turn staged files into attachments.

        Args:
            files: Staged files, in display order. Not modified.

        Returns:
            One attachment per file.

        Raises:
            UploadError: If the transport fails or the server rejects the batch.
        """
        if not files:
            return []

        if self.upload_url is None:
            return [f.to_attachment() for f in files]

        multipart = [(UPLOAD_FIELD, (f.name, f.content, f.mime)) for f in files]

        try:
            response = await self._client.post(
                self.upload_url,
                files=multipart,
                headers=self._headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Upload rejected: HTTP {e.response.status_code}")
            raise UploadError("Upload failed") from e
        except httpx.RequestError as e:
            logger.warning(f"Upload transport failure: {e!r}")
            raise UploadError(f"Upload failed: {e}") from e

        try:
            uploaded = _uploaded_files.validate_python(response.json())
        except ValueError as e:
            raise UploadError("Upload failed: invalid server response") from e

        logger.info(f"Uploaded {len(uploaded)} file(s)")
        # The server's image flag is not trusted, it is derived from the MIME type
        return [
            Attachment(
                name=u.name,
                url=u.url,
                mime=u.mime or DEFAULT_MIME,
                size=u.size,
                is_image=(u.mime or "").startswith("image/"),
            )
            for u in uploaded
        ]
