# capture_inventory/tools/media.py
from __future__ import annotations

import io
import mimetypes
from pathlib import Path
from typing import NamedTuple

from PIL import Image, UnidentifiedImageError

# Formats the vision service accepts directly.
SUPPORTED_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/webp", "image/gif"})


class ImagePayload(NamedTuple):
    data: bytes
    mime_type: str
    width: int
    height: int


def probe_image(data: bytes, *, name: str | None = None) -> ImagePayload:
    """
    Sniff MIME type and pixel size from the bytes themselves.
    Falls back to the filename guess only when Pillow has no MIME for the format.
    Raises ValueError for bytes that are not a readable image, or for a format
    outside SUPPORTED_MIME_TYPES.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"not a readable image: {name or '<bytes>'}") from e

    mime = Image.MIME.get(fmt) if fmt else None
    if not mime and name:
        mime = mimetypes.guess_type(name)[0]
    if mime not in SUPPORTED_MIME_TYPES:
        raise ValueError(f"unsupported image format {mime or fmt!r}: {name or '<bytes>'}")
    return ImagePayload(data=data, mime_type=mime, width=width, height=height)


def load_image(path: str | Path) -> ImagePayload:
    p = Path(path)
    if not p.exists() or not p.is_file():
        raise FileNotFoundError(f"Image not found: {path}")
    return probe_image(p.read_bytes(), name=p.name)


__all__ = ["ImagePayload", "SUPPORTED_MIME_TYPES", "probe_image", "load_image"]
