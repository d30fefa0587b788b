"""
Derived image generation for NITF imagery.

Each source image gets a thumbnail, a scaled overview and a full size
re-encode. Rendering is done with gdal_translate when possible and falls
back to in-process decoding with rasterio and Pillow.
"""

__version__ = "1.0.0"

from .exceptions import (
    NitfGenError,
    SourceReadError,
    RenderError,
    ExternalToolError,
    DecodeError,
    EncodeError,
    SourceTooLargeError,
)
from .output_format import OutputFormat
from .source_image import ImageBand, ImageRepresentation, SourceImage
from .dimensions import calculate_image_dimension
from .command_runner import CommandResult, CommandRunner
from .pixel_statistics import PixelStatistics, StatisticsCollector
from .image_generator import ImageGenerator, RenderRequest, RenderResult
from .external_generator import ExternalImageGenerator
from .default_generator import DecodeMode, DefaultImageGenerator
from .derived_image import DerivedArtifact, ImageVariant, build_derived_filename
from .config import RenditionConfig
from .generator import DerivedImageGenerator, GenerationResult
from .generation_stats import GenerationStats

__all__ = [
    "NitfGenError",
    "SourceReadError",
    "RenderError",
    "ExternalToolError",
    "DecodeError",
    "EncodeError",
    "SourceTooLargeError",
    "OutputFormat",
    "ImageBand",
    "ImageRepresentation",
    "SourceImage",
    "calculate_image_dimension",
    "CommandResult",
    "CommandRunner",
    "PixelStatistics",
    "StatisticsCollector",
    "ImageGenerator",
    "RenderRequest",
    "RenderResult",
    "ExternalImageGenerator",
    "DecodeMode",
    "DefaultImageGenerator",
    "DerivedArtifact",
    "ImageVariant",
    "build_derived_filename",
    "RenditionConfig",
    "DerivedImageGenerator",
    "GenerationResult",
    "GenerationStats",
]
