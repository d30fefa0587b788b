"""
DefaultImageGenerator - Renders derived images in-process.

Used when gdal_translate is unavailable or fails. The source is decoded
with rasterio, resampled and encoded with Pillow.
"""

import io
import logging
from contextlib import closing
from enum import Enum
from typing import Iterator, List, Optional

import numpy as np
import rasterio
from PIL import Image
from rasterio.enums import ColorInterp
from rasterio.errors import RasterioIOError
from rasterio.io import MemoryFile

from .exceptions import DecodeError, EncodeError, SourceTooLargeError
from .image_generator import ImageGenerator, RenderRequest, RenderResult
from .output_format import OutputFormat
from .source_image import SourceImage


MEGABYTE = 1024 * 1024

DEFAULT_MAX_SOURCE_SIZE_MB = 120

ARGB_COMPONENT_COUNT = 4

# Lossy, rate-controlled JP2 at the smallest output size: a single quality
# layer at 200:1 stands in for a 0.0 quality setting
JPEG2000_COMPRESSION_RATIO = 200
JPEG2000_SAVE_OPTIONS = {
    'irreversible': True,
    'quality_mode': 'rates',
    'quality_layers': [JPEG2000_COMPRESSION_RATIO],
    'no_jp2': False,
}


class DecodeMode(Enum):
    """How decoded segments are mapped onto Pillow images."""

    CLOSEST = 'closest'
    RGB = 'rgb'


class DefaultImageGenerator(ImageGenerator):
    """
    Decodes, resamples and encodes images without external tools.
    """

    name = 'default'

    def __init__(
        self,
        max_source_size_mb: int = DEFAULT_MAX_SOURCE_SIZE_MB,
        decode_mode: DecodeMode = DecodeMode.CLOSEST,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize in-process generator.

        Args:
            max_source_size_mb: Largest source (in MB) that will be decoded
            decode_mode: Pixel model used when decoding segments
            logger: Optional logger instance
        """
        self.max_source_size_mb = max_source_size_mb
        self.decode_mode = decode_mode
        self.logger = logger or logging.getLogger(__name__)

    def create_image(self, source: SourceImage, request: RenderRequest) -> RenderResult:
        """
        Render source in-process.

        Raises:
            SourceTooLargeError: If the source exceeds the size limit
            DecodeError: If no image segment could be decoded
            EncodeError: If the bitmap could not be encoded
        """
        size_mb = source.size // MEGABYTE
        if size_mb > self.max_source_size_mb:
            self.logger.debug(
                f"Skipping large ({size_mb} MB) content item: filename={source.filename}"
            )
            raise SourceTooLargeError(size_mb, self.max_source_size_mb)

        image = self.decode(source.read_bytes())
        if image is None:
            raise DecodeError("Unable to read image")

        if image.size != (request.width, request.height):
            image = self._to_three_channel(image).resize(
                (request.width, request.height), Image.Resampling.LANCZOS
            )

        data = self.encode(image, request.output_format)
        return RenderResult(data=data)

    def decode(self, data: bytes) -> Optional[Image.Image]:
        """
        Decode the first image segment that can be decoded.

        Returns None if no segment decodes.
        """
        image = None
        with MemoryFile(data, ext='.ntf') as memfile, \
                closing(self._iter_segments(memfile)) as segments:
            for segment in segments:
                try:
                    image = self._decode_segment(segment)
                except Exception as e:
                    self.logger.debug(f"Unable to decode image segment {segment.name}: {e}")
                    continue
                if image is not None:
                    break
        return image

    def _iter_segments(self, memfile: MemoryFile) -> Iterator[rasterio.DatasetReader]:
        """Yield each image segment of the container as an open dataset."""
        try:
            dataset = memfile.open()
        except RasterioIOError as e:
            self.logger.debug(f"Unable to parse source: {e}")
            return

        with dataset:
            names = [name for name in dataset.subdatasets if name.startswith('NITF_IM:')]
            if not names:
                yield dataset
                return

        for name in names:
            try:
                segment = rasterio.open(name)
            except RasterioIOError as e:
                self.logger.debug(f"Unable to open image segment {name}: {e}")
                continue
            with segment:
                yield segment

    def _decode_segment(self, dataset: rasterio.DatasetReader) -> Optional[Image.Image]:
        """Read a segment into the closest matching Pillow image."""
        if dataset.count == 0:
            return None

        if dataset.count == 1 and dataset.colorinterp[0] == ColorInterp.palette:
            image = self._decode_palette(dataset)
        else:
            planes = dataset.read(self._select_bands(dataset))
            pixels = self._to_8bit(planes)
            if pixels.shape[0] == 1:
                image = Image.fromarray(pixels[0])
            else:
                image = Image.fromarray(np.ascontiguousarray(np.moveaxis(pixels, 0, -1)))

        if self.decode_mode == DecodeMode.RGB:
            image = self._to_three_channel(image)
        return image

    def _select_bands(self, dataset: rasterio.DatasetReader) -> List[int]:
        """1-based band indexes to read, ending with the alpha band if kept."""
        count = dataset.count
        has_alpha = count > 1 and dataset.colorinterp[-1] == ColorInterp.alpha
        colour_count = count - 1 if has_alpha else count

        if colour_count < 3:
            bands = [1]
        else:
            tags = [
                dataset.tags(index).get('NITF_IREPBAND', '').strip()
                for index in range(1, colour_count + 1)
            ]
            if all(channel in tags for channel in ('R', 'G', 'B')):
                bands = [tags.index(channel) + 1 for channel in ('R', 'G', 'B')]
            else:
                bands = [1, 2, 3]

        # alpha never stands in for a colour channel
        if has_alpha and count <= ARGB_COMPONENT_COUNT:
            bands.append(count)
        return bands

    def _decode_palette(self, dataset: rasterio.DatasetReader) -> Image.Image:
        """Apply the band's lookup table."""
        indexes = dataset.read(1)
        colormap = dataset.colormap(1)
        palette = []
        for entry in range(256):
            palette.extend(colormap.get(entry, (0, 0, 0, 255))[:3])
        image = Image.fromarray(indexes.astype(np.uint8))
        image.putpalette(palette)
        return image.convert('RGB')

    @staticmethod
    def _to_8bit(planes: np.ndarray) -> np.ndarray:
        """Linearly rescale samples that are not already 8-bit."""
        if np.iscomplexobj(planes):
            planes = np.abs(planes)
        if planes.dtype == np.uint8:
            return planes

        planes = planes.astype(np.float64)
        low = np.nanmin(planes)
        high = np.nanmax(planes)
        if not high > low:
            return np.zeros(planes.shape, dtype=np.uint8)

        scaled = (planes - low) * (255.0 / (high - low))
        return np.clip(np.nan_to_num(scaled), 0, 255).astype(np.uint8)

    @staticmethod
    def _to_three_channel(image: Image.Image) -> Image.Image:
        """Flatten any alpha onto black and convert to RGB."""
        if image.mode in ('RGBA', 'LA'):
            background = Image.new('RGB', image.size, (0, 0, 0))
            if image.mode == 'LA':
                image = image.convert('RGBA')
            background.paste(image, mask=image.split()[-1])
            return background
        if image.mode != 'RGB':
            return image.convert('RGB')
        return image

    def encode(self, image: Image.Image, output_format: OutputFormat) -> bytes:
        """Encode image to output_format."""
        if output_format == OutputFormat.JPEG:
            if image.mode not in ('L', 'RGB'):
                image = self._to_three_channel(image)
            options = {}
        elif output_format == OutputFormat.JPEG_2000:
            if len(image.getbands()) == ARGB_COMPONENT_COUNT:
                image = self._to_three_channel(image)
            options = JPEG2000_SAVE_OPTIONS
        else:
            raise EncodeError(f"Unsupported output format: {output_format}")

        output = io.BytesIO()
        try:
            image.save(output, format=output_format.pillow_format, **options)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError(f"Unable to encode image as {output_format.name}: {e}") from e

        return output.getvalue()
