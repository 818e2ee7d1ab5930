"""Attachment intake for files the user wants to send.

Responsibilities:
    - Per-selection and total count caps
    - Per-file size limit with all-or-nothing batches
    - Local thumbnail previews for images (Pillow)
    - Local-only attachment derivation for offline operation
"""

from chat_widget.attachments.intake import (
    StagedFile,
    StageResult,
    StagingArea,
    check_file_size,
    format_file_size,
    stage_files,
)
from chat_widget.attachments.preview import PreviewGenerator

__all__ = [
    "PreviewGenerator",
    "StageResult",
    "StagedFile",
    "StagingArea",
    "check_file_size",
    "format_file_size",
    "stage_files",
]
