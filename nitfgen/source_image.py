"""
SourceImage - The NITF being rendered and what its header tells us.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import rasterio
from rasterio.errors import RasterioIOError

from .exceptions import SourceReadError


class ImageRepresentation(Enum):
    """Image representation (IREP) of an image segment."""

    MONOCHROME = 'MONO'
    RGB = 'RGB'
    RGB_LUT = 'RGB/LUT'
    MULTIBAND = 'MULTI'
    NO_DISPLAY = 'NODISPLY'
    VECTOR = 'NVECTOR'
    POLAR = 'POLAR'
    VPH = 'VPH'
    YCBCR601 = 'YCbCr601'

    @classmethod
    def from_irep(cls, value: Optional[str]) -> Optional['ImageRepresentation']:
        """Look up an IREP field value; unknown or blank values give None."""
        if not value:
            return None
        value = value.strip()
        for member in cls:
            if member.value == value:
                return member
        return None


@dataclass(frozen=True)
class ImageBand:
    """
    One band of an image segment.

    Attributes:
        representation: Band representation (IREPBAND), e.g. 'R', 'G', 'B', 'M'
        subcategory: Band subcategory (ISUBCAT), e.g. a wavelength
    """
    representation: str = ''
    subcategory: str = ''


@dataclass
class SourceImage:
    """
    A source image container borrowed by the renderers for one call.

    Attributes:
        width: Native width in pixels
        height: Native height in pixels
        size: Declared size of the container in bytes
        bands: Bands of the first image segment, in order
        representation: Image representation of the first image segment
        path: Absolute path of the container on disk, if it has one
        data: Container bytes, if held in memory
    """
    width: int
    height: int
    size: int
    bands: List[ImageBand] = field(default_factory=list)
    representation: Optional[ImageRepresentation] = None
    path: Optional[str] = None
    data: Optional[bytes] = None

    @property
    def is_monochrome(self) -> bool:
        return self.representation == ImageRepresentation.MONOCHROME

    @property
    def band_count(self) -> int:
        return len(self.bands)

    @property
    def filename(self) -> str:
        return os.path.basename(self.path) if self.path else ''

    def read_bytes(self) -> bytes:
        """Return the container bytes, reading them from disk if needed."""
        if self.data is not None:
            return self.data
        if self.path is None:
            raise SourceReadError("Source image has neither data nor a path")
        with open(self.path, 'rb') as f:
            return f.read()

    @classmethod
    def from_path(
        cls,
        path: str,
        logger: Optional[logging.Logger] = None
    ) -> 'SourceImage':
        """
        Build a SourceImage from the header of the file at path.

        Only the first image segment is described; pixel data is not read.

        Raises:
            SourceReadError: If the file is missing or not a readable raster
        """
        logger = logger or logging.getLogger(__name__)
        path = os.path.abspath(path)

        try:
            size = os.path.getsize(path)
            with rasterio.open(path) as dataset:
                bands = [
                    ImageBand(
                        representation=dataset.tags(index).get('NITF_IREPBAND', '').strip(),
                        subcategory=dataset.tags(index).get('NITF_ISUBCAT', '').strip(),
                    )
                    for index in dataset.indexes
                ]
                representation = ImageRepresentation.from_irep(
                    dataset.tags().get('NITF_IREP')
                )
                width, height = dataset.width, dataset.height
        except (OSError, RasterioIOError) as e:
            raise SourceReadError(f"Unable to read source data: {path}") from e

        logger.debug(
            f"Read header: {path} ({width}x{height}, {len(bands)} bands, "
            f"irep={representation.value if representation else 'unknown'})"
        )

        return cls(
            width=width,
            height=height,
            size=size,
            bands=bands,
            representation=representation,
            path=path,
        )
