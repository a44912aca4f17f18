"""
Map Image Loading
=================
The image asset provider for the viewer.

Why is this file needed?
------------------------
The interaction core only needs the pixel extent of the map. This module is
the one place that touches image files: it decodes the map into a QPixmap for
painting and reports its size as an ImageSize.

Classes:
    MapImage: A decoded map and its extent.
    MapLoadError: Raised when a file is missing or cannot be decoded.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from PySide6.QtGui import QImageReader, QPixmap

from tiletrace.model.geometry import ImageSize

logger = logging.getLogger(__name__)

# Large world maps exceed Qt's default 256 MB allocation guard.
_ALLOCATION_LIMIT_MB = 1024


class MapLoadError(Exception):
    """The map image could not be loaded."""


@dataclass
class MapImage:
    path: str
    pixmap: QPixmap
    size: ImageSize


def supported_formats() -> list[str]:
    return sorted({bytes(fmt).decode("ascii").lower() for fmt in QImageReader.supportedImageFormats()})


def file_filter() -> str:
    """Filter string for QFileDialog."""
    patterns = " ".join(f"*.{ext}" for ext in supported_formats())
    return f"Images ({patterns})"


def load_map(path: str) -> MapImage:
    """
    Decode the map image at path.

    Raises:
        MapLoadError: If the file does not exist or Qt cannot decode it.
    """
    if not os.path.isfile(path):
        raise MapLoadError(f"File not found: {path}")

    logger.info("Loading map from: %s", path)
    QImageReader.setAllocationLimit(_ALLOCATION_LIMIT_MB)
    reader = QImageReader(path)
    reader.setAutoTransform(True)
    image = reader.read()
    if image.isNull():
        raise MapLoadError(f"Cannot decode {os.path.basename(path)}: {reader.errorString()}")

    size = ImageSize(image.width(), image.height())
    logger.info("Map decoded: %dx%d px", size.width, size.height)
    return MapImage(path=path, pixmap=QPixmap.fromImage(image), size=size)
