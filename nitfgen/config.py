"""
RenditionConfig - Settings for derived image generation.
"""

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from .output_format import OutputFormat


DEFAULT_MAX_SIDE_LENGTH = 1024
DEFAULT_MAX_SOURCE_SIZE_MB = 120
DEFAULT_THUMBNAIL_WIDTH = 200
DEFAULT_THUMBNAIL_HEIGHT = 200
DEFAULT_COMMAND_TIMEOUT = 300.0

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('yes', 'true', 't', 'y', '1')


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    return int(value)


@dataclass
class RenditionConfig:
    """
    Configuration for derived image generation.

    Attributes:
        max_source_size_mb: Largest source decoded in-process
        max_side_length: Longer side of the overview
        original_max_side_length: Longer side of the original re-encode (None for native)
        thumbnail_width: Thumbnail width bound
        thumbnail_height: Thumbnail height bound
        create_overview: Produce the overview variant
        store_original: Produce the original variant
        thumbnail_format: Encoding of the thumbnail
        overview_format: Encoding of the overview
        original_format: Encoding of the original
        gdal_translate_path: gdal_translate executable
        gdalinfo_path: gdalinfo executable
        command_timeout: Seconds before an external tool is killed (None for no limit)
    """
    max_source_size_mb: int = DEFAULT_MAX_SOURCE_SIZE_MB
    max_side_length: int = DEFAULT_MAX_SIDE_LENGTH
    original_max_side_length: Optional[int] = None
    thumbnail_width: int = DEFAULT_THUMBNAIL_WIDTH
    thumbnail_height: int = DEFAULT_THUMBNAIL_HEIGHT
    create_overview: bool = True
    store_original: bool = True
    thumbnail_format: OutputFormat = OutputFormat.JPEG
    overview_format: OutputFormat = OutputFormat.JPEG
    original_format: OutputFormat = OutputFormat.JPEG_2000
    gdal_translate_path: str = 'gdal_translate'
    gdalinfo_path: str = 'gdalinfo'
    command_timeout: Optional[float] = DEFAULT_COMMAND_TIMEOUT

    @property
    def max_thumbnail_length(self) -> int:
        return max(self.thumbnail_width, self.thumbnail_height)

    def set_max_side_length(self, max_side_length: int) -> None:
        """Set the overview side length; non-positive values restore the default."""
        if max_side_length > 0:
            logger.debug(f"Setting derived image max_side_length to {max_side_length}")
            self.max_side_length = max_side_length
        else:
            logger.debug(
                f"Invalid max_side_length value [{max_side_length}], must be greater "
                f"than zero. Default value [{DEFAULT_MAX_SIDE_LENGTH}] will be used instead."
            )
            self.max_side_length = DEFAULT_MAX_SIDE_LENGTH

    @classmethod
    def from_env(cls) -> 'RenditionConfig':
        """
        Load configuration from NITFGEN_* environment variables.

        Unset variables keep their defaults.
        """
        config = cls(
            max_source_size_mb=_env_int('NITFGEN_MAX_SOURCE_SIZE_MB', DEFAULT_MAX_SOURCE_SIZE_MB),
            original_max_side_length=_env_int('NITFGEN_ORIGINAL_MAX_SIDE_LENGTH', None),
            thumbnail_width=_env_int('NITFGEN_THUMBNAIL_WIDTH', DEFAULT_THUMBNAIL_WIDTH),
            thumbnail_height=_env_int('NITFGEN_THUMBNAIL_HEIGHT', DEFAULT_THUMBNAIL_HEIGHT),
            create_overview=_env_bool('NITFGEN_CREATE_OVERVIEW', True),
            store_original=_env_bool('NITFGEN_STORE_ORIGINAL', True),
            gdal_translate_path=os.getenv('NITFGEN_GDAL_TRANSLATE', 'gdal_translate'),
            gdalinfo_path=os.getenv('NITFGEN_GDALINFO', 'gdalinfo'),
        )
        config.set_max_side_length(_env_int('NITFGEN_MAX_SIDE_LENGTH', DEFAULT_MAX_SIDE_LENGTH))

        for attr, var in (
            ('thumbnail_format', 'NITFGEN_THUMBNAIL_FORMAT'),
            ('overview_format', 'NITFGEN_OVERVIEW_FORMAT'),
            ('original_format', 'NITFGEN_ORIGINAL_FORMAT'),
        ):
            if os.getenv(var):
                setattr(config, attr, OutputFormat.from_name(os.environ[var]))

        timeout = os.getenv('NITFGEN_COMMAND_TIMEOUT')
        if timeout:
            config.command_timeout = float(timeout) if float(timeout) > 0 else None

        return config

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty when valid)."""
        errors = []
        if self.max_source_size_mb < 0:
            errors.append("max_source_size_mb must not be negative")
        if self.max_side_length <= 0:
            errors.append("max_side_length must be greater than zero")
        if self.original_max_side_length is not None and self.original_max_side_length <= 0:
            errors.append("original_max_side_length must be greater than zero")
        if self.thumbnail_width <= 0 or self.thumbnail_height <= 0:
            errors.append("thumbnail dimensions must be greater than zero")
        if self.command_timeout is not None and self.command_timeout <= 0:
            errors.append("command_timeout must be greater than zero")
        for attr in ('thumbnail_format', 'overview_format', 'original_format'):
            if not isinstance(getattr(self, attr), OutputFormat):
                errors.append(f"{attr} must be an OutputFormat")
        return errors
