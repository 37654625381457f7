"""Writing extracted members and images to disk."""

from __future__ import annotations

from pathlib import Path

from .image import optimize_and_save
from .pcx import PcxFormatError, load_image_pcx
from .reader import MemoryReader, TruncatedDataError

_IMAGE_EXTENSIONS = {".pcx", ".p32"}


def save_image(image, destination, filename):
    """Save ``image`` as PNG under ``destination``, replacing the extension."""
    destination = Path(destination)
    destination.mkdir(parents=True, exist_ok=True)
    output = (destination / filename).with_suffix(".png")
    optimize_and_save(image, output)
    return output


def save_file(data, destination, filename):
    """Write an extracted member, converting PCX and P32 images to PNG.

    Returns the path that was written.
    """
    destination = Path(destination)
    destination.mkdir(parents=True, exist_ok=True)
    data = bytes(data)

    name = Path(filename)
    if name.suffix.lower() in _IMAGE_EXTENSIONS:
        try:
            image = load_image_pcx(MemoryReader(data))
        except (PcxFormatError, TruncatedDataError):
            image = None
        if image is not None:
            return save_image(image, destination, str(name.with_suffix(".png")))

    output = destination / filename
    output.write_bytes(data)
    return output