"""Local image previews for staged files.

Wraps Pillow to turn raw image bytes into a small PNG thumbnail, returned
as a data URI the presentation layer can display without a network call.
Non-image files get no preview and keep only their metadata.

Example:
    previews = PreviewGenerator(max_size=(160, 160))
    uri = previews.create_data_uri(png_bytes)
"""

from __future__ import annotations

import base64
import io
import logging

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


class PreviewGenerator:
    """Generate thumbnail data URIs from image bytes.

    Args:
        max_size: Maximum width and height of the thumbnail. Defaults to (160, 160).
        background: RGB color used to flatten transparent images. Defaults to white.
    """

    def __init__(
        self,
        max_size: tuple[int, int] = (160, 160),
        background: tuple[int, int, int] | None = None,
    ) -> None:
        self.max_size = max_size
        self.background = background or (255, 255, 255)

    def create_data_uri(self, content: bytes) -> str:
        """Create a PNG thumbnail data URI from raw image bytes.

        Raises:
            ValueError: If the bytes cannot be opened as an image.
        """
        try:
            src = Image.open(io.BytesIO(content))
            src.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError("Bytes are not a supported image format") from exc

        src = src.convert("RGBA")
        src.thumbnail(self.max_size, Image.LANCZOS)

        # Flatten alpha against the background color
        flat = Image.new("RGB", src.size, self.background)
        flat.paste(src, mask=src.split()[3])

        out = io.BytesIO()
        flat.save(out, format="PNG", optimize=True)
        encoded = base64.b64encode(out.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"

    def preview_for(self, content: bytes, mime: str) -> str | None:
        """Return a preview for image content, None for anything else.

        Undecodable images are logged and left without a preview.
        """
        if not mime.startswith("image/"):
            return None
        try:
            return self.create_data_uri(content)
        except ValueError as e:
            logger.warning(f"Could not build image preview: {e}")
            return None
