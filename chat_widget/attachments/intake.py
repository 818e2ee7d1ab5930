"""Attachment intake: validation and staging of files before a turn is sent.

Rules for one selection, evaluated in order:
    1. More files than the per-selection cap rejects the whole batch.
    2. The batch is truncated to the slots left under the total cap.
    3. Truncation raises a non-fatal "total cap" notice.
    4. Any truncated file over the byte limit rejects the truncated batch.
    5. Otherwise the batch is appended in arrival order.
"""

import logging
import mimetypes
from pathlib import Path
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

from chat_widget.attachments.preview import PreviewGenerator
from chat_widget.errors import AttachmentValidationError
from chat_widget.models.schemas import Attachment

logger = logging.getLogger(__name__)

DEFAULT_MIME = "application/octet-stream"


def format_file_size(size: int) -> str:
    """Format a byte count as KB below one megabyte, MB above."""
    if size < 1024 * 1024:
        return f"{size / 1024:.1f}KB"
    return f"{size / 1024 / 1024:.1f}MB"


class StagedFile(BaseModel):
    """A file chosen by the user but not yet attached to a sent message.

    Attributes:
        name: Original filename.
        mime: MIME type, guessed from the name when not supplied.
        content: Raw file bytes.
        source_path: Where the file was read from, if anywhere.
        preview: Local preview reference (image thumbnail data URI) once staged.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    mime: str = DEFAULT_MIME
    content: bytes = b""
    source_path: Path | None = None
    preview: str | None = None

    @classmethod
    def from_bytes(cls, name: str, content: bytes, mime: str | None = None) -> "StagedFile":
        return cls(name=name, content=content, mime=mime or _guess_mime(name))

    @classmethod
    def from_path(cls, path: str | Path, mime: str | None = None) -> "StagedFile":
        path = Path(path)
        return cls(
            name=path.name,
            content=path.read_bytes(),
            mime=mime or _guess_mime(path.name),
            source_path=path,
        )

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def is_image(self) -> bool:
        return self.mime.startswith("image/")

    @property
    def locator(self) -> str:
        """Local-only reference used when no upload destination exists."""
        if self.preview:
            return self.preview
        if self.source_path is not None:
            return self.source_path.resolve().as_uri()
        return f"local:{quote(self.name)}"

    def to_attachment(self) -> Attachment:
        """Derive an attachment purely from local metadata."""
        return Attachment(
            name=self.name,
            url=self.locator,
            mime=self.mime,
            size=self.size,
            is_image=self.is_image,
        )


def _guess_mime(name: str) -> str:
    mime, _ = mimetypes.guess_type(name)
    return mime or DEFAULT_MIME


class StageResult(BaseModel):
    """Outcome of offering one selection of files.

    Attributes:
        accepted: Files from the selection that were staged, in arrival order.
        notices: User-facing notices raised by the selection, in rule order.
        rejected: Whether the selection was refused outright.
    """

    accepted: list[StagedFile] = Field(default_factory=list)
    notices: list[str] = Field(default_factory=list)
    rejected: bool = False

    @property
    def rejection_reason(self) -> str | None:
        """The notice to display; later rules override earlier ones."""
        return self.notices[-1] if self.notices else None


def check_file_size(staged: StagedFile, max_file_bytes: int) -> None:
    """Check one file against the per-file byte limit.

    Raises:
        AttachmentValidationError: If the file is over the limit.
    """
    if staged.size > max_file_bytes:
        limit_mb = max_file_bytes / (1024 * 1024)
        raise AttachmentValidationError(f"Each file must be ≤ {limit_mb:g} MB.")


def stage_files(
    candidates: list[StagedFile],
    current_count: int,
    *,
    max_per_selection: int,
    max_total: int,
    max_file_bytes: int,
) -> StageResult:
    """Decide which of the offered files may be staged.

    Args:
        candidates: Files offered in one selection, in arrival order.
        current_count: Number of files already staged.
        max_per_selection: Cap on files offered in a single selection.
        max_total: Cap on files staged at once.
        max_file_bytes: Per-file size limit.

    Returns:
        StageResult describing accepted files and notices.
    """
    if len(candidates) > max_per_selection:
        return StageResult(
            notices=[f"You can attach up to {max_per_selection} files per selection."],
            rejected=True,
        )

    remaining = max(0, max_total - current_count)
    trimmed = candidates[:remaining]
    notices: list[str] = []

    if len(candidates) + current_count > max_total:
        notices.append(f"You can attach up to {max_total} files total.")

    try:
        for staged in trimmed:
            check_file_size(staged, max_file_bytes)
    except AttachmentValidationError as e:
        logger.info(f"Rejecting selection of {len(trimmed)} files: {e}")
        notices.append(str(e))
        return StageResult(notices=notices, rejected=True)

    return StageResult(accepted=trimmed, notices=notices)


class StagingArea:
    """The widget instance's list of staged files.

    Read, never mutated, by the upload delegate.
    """

    def __init__(
        self,
        max_files: int,
        max_file_bytes: int,
        previews: PreviewGenerator | None = None,
    ) -> None:
        self.max_files = max_files
        self.max_file_bytes = max_file_bytes
        self._previews = previews or PreviewGenerator()
        self._files: list[StagedFile] = []

    @property
    def files(self) -> tuple[StagedFile, ...]:
        return tuple(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def add(self, candidates: list[StagedFile]) -> StageResult:
        """Offer a selection of files and stage whatever the rules accept."""
        result = stage_files(
            candidates,
            len(self._files),
            max_per_selection=self.max_files,
            max_total=self.max_files,
            max_file_bytes=self.max_file_bytes,
        )
        for staged in result.accepted:
            preview = self._previews.preview_for(staged.content, staged.mime)
            self._files.append(staged.model_copy(update={"preview": preview}))
        return result

    def remove(self, index: int) -> None:
        """Remove the staged file at index. Out-of-range indices are ignored."""
        if 0 <= index < len(self._files):
            del self._files[index]

    def clear(self) -> None:
        self._files.clear()
