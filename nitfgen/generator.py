"""
DerivedImageGenerator - Produces the thumbnail, overview and original
renditions of a source image.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .command_runner import CommandRunner
from .config import RenditionConfig
from .default_generator import DefaultImageGenerator
from .derived_image import DerivedArtifact, ImageVariant, build_derived_filename
from .dimensions import calculate_image_dimension
from .exceptions import SourceTooLargeError
from .external_generator import ExternalImageGenerator
from .image_generator import ImageGenerator, RenderRequest
from .output_format import OutputFormat
from .pixel_statistics import StatisticsCollector
from .source_image import SourceImage


@dataclass
class GenerationResult:
    """
    Renditions produced for one source image.

    Attributes:
        thumbnail: Encoded thumbnail, or None if it could not be produced
        artifacts: Overview and original renditions that were produced
        warnings: One message per variant that could not be produced
        fallbacks: Variants that needed a fallback renderer
    """
    thumbnail: Optional[bytes] = None
    artifacts: List[DerivedArtifact] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    fallbacks: List[ImageVariant] = field(default_factory=list)

    @property
    def bytes_generated(self) -> int:
        thumb_bytes = len(self.thumbnail) if self.thumbnail else 0
        return thumb_bytes + sum(a.size for a in self.artifacts)

    def get_artifact(self, qualifier: str) -> Optional[DerivedArtifact]:
        for artifact in self.artifacts:
            if artifact.qualifier == qualifier:
                return artifact
        return None


class DerivedImageGenerator:
    """
    Generates derived images for a source, trying each renderer in turn.

    A variant that no renderer can produce is skipped; the remaining
    variants are still generated.
    """

    def __init__(
        self,
        config: Optional[RenditionConfig] = None,
        generators: Optional[List[ImageGenerator]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize derived image generator.

        Args:
            config: Rendition configuration (defaults if None)
            generators: Renderers in the order they are tried
                (gdal_translate, then in-process, if None)
            logger: Optional logger instance
        """
        self.config = config or RenditionConfig()
        self.logger = logger or logging.getLogger(__name__)
        if generators is None:
            generators = self._default_generators()
        self.generators = generators

    def _default_generators(self) -> List[ImageGenerator]:
        runner = CommandRunner(timeout=self.config.command_timeout, logger=self.logger)
        statistics = StatisticsCollector(runner, self.config.gdalinfo_path, logger=self.logger)
        return [
            ExternalImageGenerator(
                runner=runner,
                translate_command=self.config.gdal_translate_path,
                statistics=statistics,
                logger=self.logger,
            ),
            DefaultImageGenerator(self.config.max_source_size_mb, logger=self.logger),
        ]

    def variants(self) -> List[Tuple[ImageVariant, OutputFormat]]:
        """Variants to generate with their output formats, in order."""
        variants = [(ImageVariant.THUMBNAIL, self.config.thumbnail_format)]
        if self.config.create_overview:
            variants.append((ImageVariant.OVERVIEW, self.config.overview_format))
        if self.config.store_original:
            variants.append((ImageVariant.ORIGINAL, self.config.original_format))
        return variants

    def target_dimension(self, source: SourceImage, variant: ImageVariant) -> Tuple[int, int]:
        """Output size of variant for source."""
        if variant == ImageVariant.THUMBNAIL:
            max_side = self.config.max_thumbnail_length
        elif variant == ImageVariant.OVERVIEW:
            max_side = self.config.max_side_length
        else:
            max_side = self.config.original_max_side_length
            if max_side is None:
                return source.width, source.height

        return calculate_image_dimension(source.width, source.height, max_side)

    def process(self, source: SourceImage, title: Optional[str] = None) -> GenerationResult:
        """
        Generate all configured variants of source.

        Args:
            source: Source image
            title: Catalog title used to name derived artifacts

        Returns:
            GenerationResult with whatever could be produced
        """
        label = source.filename or title or 'source'
        self.logger.info(f"Derived image processing starting for input: {label}")

        result = GenerationResult()
        for variant, output_format in self.variants():
            width, height = self.target_dimension(source, variant)
            self.logger.debug(f"Generating {variant.qualifier} ({width}x{height}) for input: {label}")

            data = self.render(
                source, RenderRequest(width, height, output_format), variant, result
            )
            if data is None:
                message = f"{variant.qualifier.capitalize()} image generation failed for input: {label}"
                self.logger.warning(message)
                result.warnings.append(message)
                continue

            if variant == ImageVariant.THUMBNAIL:
                result.thumbnail = data
            else:
                result.artifacts.append(DerivedArtifact(
                    qualifier=variant.qualifier,
                    data=data,
                    mime_type=output_format.mime_type,
                    filename=build_derived_filename(
                        title, variant.qualifier, output_format.extension
                    ),
                ))

        self.logger.info(f"Derived image processing complete for input: {label}")
        return result

    def render(
        self,
        source: SourceImage,
        request: RenderRequest,
        variant: ImageVariant,
        result: GenerationResult
    ) -> Optional[bytes]:
        """
        Render request with the first generator that succeeds.

        Returns the encoded bytes, or None if every generator failed.
        """
        for index, generator in enumerate(self.generators):
            try:
                rendered = generator.create_image(source, request)
            except SourceTooLargeError as e:
                self.logger.debug(f"Skipping {variant.qualifier} with {generator.name} renderer: {e}")
                continue
            except Exception as e:
                self.logger.debug(
                    f"Failed to generate {variant.qualifier} with {generator.name} renderer: {e}",
                    exc_info=True,
                )
                if index + 1 < len(self.generators):
                    self.logger.debug(
                        f"Falling back to {self.generators[index + 1].name} renderer..."
                    )
                continue

            if index > 0:
                result.fallbacks.append(variant)

            data = rendered.data
            rendered.discard(self.logger)
            return data

        return None
