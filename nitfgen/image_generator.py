"""
ImageGenerator - Common contract for the derived image renderers.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from .output_format import OutputFormat
from .source_image import SourceImage


@dataclass(frozen=True)
class RenderRequest:
    """
    Size and encoding of an image to render.

    Attributes:
        width: Output width in pixels (> 0)
        height: Output height in pixels (> 0)
        output_format: Output encoding (JPEG when None)
    """
    width: int
    height: int
    output_format: Optional[OutputFormat] = OutputFormat.JPEG

    def __post_init__(self):
        if self.output_format is None:
            object.__setattr__(self, 'output_format', OutputFormat.JPEG)
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Render size must be positive, got {self.width}x{self.height}"
            )


@dataclass(frozen=True)
class RenderResult:
    """
    An encoded image.

    Attributes:
        data: Encoded image bytes
        path: Temporary file the bytes were read from, owned by the caller
    """
    data: bytes
    path: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)

    def discard(self, logger: Optional[logging.Logger] = None) -> None:
        """Remove the temporary file backing this result, if any."""
        if self.path and os.path.exists(self.path):
            try:
                os.remove(self.path)
            except OSError as e:
                (logger or logging.getLogger(__name__)).warning(
                    f"Could not delete {self.path}: {e}"
                )


class ImageGenerator(ABC):
    """
    Renders a source image to a requested size and format.

    Implementations keep no state between calls and raise an ``IOError``
    subclass when they cannot produce the image.
    """

    name = 'generator'

    @abstractmethod
    def create_image(self, source: SourceImage, request: RenderRequest) -> RenderResult:
        """Render source as described by request."""
