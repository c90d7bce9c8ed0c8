import io
from pathlib import PurePath

from PIL import Image

from app.processor.exceptions import ImageCompressionError
from app.processor.models import UploadedFile


class ImageCompressor:
    """Downsamples receipt photos and re-encodes them as JPEG."""

    def __init__(self, *, max_side: int = 1200, quality: int = 80) -> None:
        self._max_side = max_side
        self._quality = quality

    def compress(self, file: UploadedFile) -> UploadedFile:
        """Return a JPEG copy of ``file`` whose longest side is at most ``max_side``.

        Raises:
            ImageCompressionError: if the image cannot be decoded or encoded.
        """
        buffer = io.BytesIO()
        try:
            with Image.open(io.BytesIO(file.content)) as image:
                image.thumbnail((self._max_side, self._max_side))
                rgb = image if image.mode in ("RGB", "L") else image.convert("RGB")
                rgb.save(buffer, format="JPEG", quality=self._quality, optimize=True)
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise ImageCompressionError(f"Image compression failed: {exc}") from exc
        content = buffer.getvalue()
        return UploadedFile(
            name=_jpeg_name(file.name),
            content=content,
            media_type="image/jpeg",
            size=len(content),
        )


def _jpeg_name(name: str) -> str:
    if not name:
        return "receipt.jpg"
    return PurePath(name).with_suffix(".jpg").name
