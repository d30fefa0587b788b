"""
ExternalImageGenerator - Renders derived images with gdal_translate.
"""

import logging
import os
import re
import uuid
from typing import List, Optional

from .command_runner import CommandRunner
from .exceptions import ExternalToolError
from .image_generator import ImageGenerator, RenderRequest, RenderResult
from .output_format import OutputFormat
from .pixel_statistics import ScaleRange, StatisticsCollector
from .source_image import ImageBand, SourceImage


# non-word characters, equivalent to [^a-zA-Z0-9_]
INVALID_FILENAME_CHARACTERS = re.compile(r'[^A-Za-z0-9_]')


def select_rgb_bands(bands: List[ImageBand]) -> List[int]:
    """
    1-based indices of the first bands tagged R, G and B, in that order.

    Channels that are not present are left out.
    """
    indices = {}
    for index, band in enumerate(bands, start=1):
        if band.representation in ('R', 'G', 'B'):
            indices.setdefault(band.representation, index)
    return [indices[channel] for channel in ('R', 'G', 'B') if channel in indices]


class ExternalImageGenerator(ImageGenerator):
    """
    Renders images by running gdal_translate against the source file.

    Monochrome sources get a statistics based contrast stretch when
    gdalinfo can report statistics for them.
    """

    name = 'external'

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        translate_command: str = 'gdal_translate',
        statistics: Optional[StatisticsCollector] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize external generator.

        Args:
            runner: Runner used to invoke the tools
            translate_command: Name or path of gdal_translate
            statistics: Collector used for monochrome contrast stretching
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.runner = runner or CommandRunner(logger=self.logger)
        self.translate_command = translate_command
        self.statistics = statistics or StatisticsCollector(self.runner, logger=self.logger)

    def build_command(
        self,
        source: SourceImage,
        request: RenderRequest,
        scale_range: Optional[ScaleRange] = None
    ) -> List[str]:
        """
        Build the gdal_translate arguments, without input and output paths.

        Args:
            source: Source image metadata
            request: Output size and format
            scale_range: Contrast stretch to apply to a monochrome source
        """
        output_format = request.output_format
        command = [self.translate_command, '-of', output_format.driver]

        if source.band_count > 1:
            for index in select_rgb_bands(source.bands):
                command.extend(['-b', str(index)])

        byte_added = False
        if output_format == OutputFormat.JPEG:
            command.extend(['-ot', 'Byte'])
            byte_added = True

        if source.is_monochrome and scale_range is not None:
            if not byte_added:
                command.extend(['-ot', 'Byte'])
            command.extend(['-scale', str(scale_range[0]), str(scale_range[1])])

        command.extend(['-outsize', str(request.width), str(request.height)])
        return command

    def output_path(self, source_path: str, output_format: OutputFormat) -> str:
        """Unique output file next to the source file."""
        stem = os.path.splitext(os.path.basename(source_path))[0]
        stem = INVALID_FILENAME_CHARACTERS.sub('_', stem)
        filename = f"{uuid.uuid4()}_{stem}.{output_format.extension}"
        return os.path.join(os.path.dirname(source_path), filename)

    def create_image(self, source: SourceImage, request: RenderRequest) -> RenderResult:
        """
        Render source with gdal_translate.

        The temporary output file is left in place on success; its path is
        returned in the result and the caller owns its cleanup.

        Raises:
            ExternalToolError: If the tool fails or writes no output
        """
        if not source.path:
            raise ExternalToolError("Unable to read source data: no file path")

        input_path = os.path.abspath(source.path)
        scale_range = None
        if source.is_monochrome:
            scale_range = self.statistics.scale_range(input_path)

        command = self.build_command(source, request, scale_range)
        out_path = self.output_path(input_path, request.output_format)
        command.extend([input_path, out_path])

        result = self.runner.run(command)

        if not result.succeeded:
            self._remove(out_path)
            if result.timed_out:
                raise ExternalToolError("Image translation timed out", result.output)
            raise ExternalToolError(
                f"Unable to create image: command failed with code {result.exit_code}",
                result.output,
            )

        if not os.path.exists(out_path):
            raise ExternalToolError("Output image not generated correctly", result.output)

        with open(out_path, 'rb') as f:
            data = f.read()

        self.logger.debug(f"Translated {source.filename} -> {out_path} ({len(data)} bytes)")
        return RenderResult(data=data, path=out_path)

    def _remove(self, path: str) -> None:
        if os.path.exists(path):
            try:
                os.remove(path)
            except OSError as e:
                self.logger.warning(f"Could not delete {path}: {e}")
