"""
OutputFormat - Encodings available for derived images.
"""

from enum import Enum


_FORMAT_ALIASES = {
    'jpeg': 'JPEG',
    'jpg': 'JPEG',
    'jpeg2000': 'JPEG_2000',
    'jpeg_2000': 'JPEG_2000',
    'jp2': 'JPEG_2000',
}


class OutputFormat(Enum):
    """
    Output encodings for derived images.

    Each member carries its file extension, MIME type, the GDAL driver used
    by the external renderer and the Pillow format used in-process.
    """

    JPEG = ('jpg', 'image/jpeg', 'JPEG', 'JPEG')
    JPEG_2000 = ('jp2', 'image/jp2', 'JP2OpenJPEG', 'JPEG2000')

    def __init__(self, extension: str, mime_type: str, driver: str, pillow_format: str):
        self.extension = extension
        self.mime_type = mime_type
        self.driver = driver
        self.pillow_format = pillow_format

    @classmethod
    def from_name(cls, name: str) -> 'OutputFormat':
        """Parse a format name such as 'jpeg' or 'jp2' (case-insensitive)."""
        key = _FORMAT_ALIASES.get(name.strip().lower())
        if key is None:
            raise ValueError(f"Unsupported output format: {name}")
        return cls[key]
