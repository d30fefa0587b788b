"""
Pixel statistics for single-band imagery and the contrast stretch derived
from them.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .command_runner import CommandRunner


ScaleRange = Tuple[int, int]

STATS_PATTERN = re.compile(
    r'.*Minimum=(\d+).+Maximum=(\d+).+Mean=(\d+(\.\d+)?).+StdDev=(\d+(\.\d+)?).*',
    re.DOTALL,
)


@dataclass(frozen=True)
class PixelStatistics:
    """
    Band statistics as reported by the info tool.

    Attributes:
        minimum: Smallest pixel value
        maximum: Largest pixel value
        mean: Mean pixel value
        std_dev: Standard deviation (> 0)
    """
    minimum: float
    maximum: float
    mean: float
    std_dev: float

    @classmethod
    def parse(cls, output: str) -> Optional['PixelStatistics']:
        """
        Parse info tool output.

        Returns None when the report does not match or the band is
        uniform (zero standard deviation).
        """
        match = STATS_PATTERN.fullmatch(output)
        if match is None:
            return None

        std_dev = float(match.group(5))
        if std_dev == 0:
            return None

        return cls(
            minimum=float(match.group(1)),
            maximum=float(match.group(2)),
            mean=float(match.group(3)),
            std_dev=std_dev,
        )

    def scale_range(self) -> ScaleRange:
        """
        Stretch range clamped symmetrically around the mean.

        Uses the tighter of the two tails, measured in whole standard
        deviations, so a long bright or dark tail does not flatten the
        stretch. The result never leaves [minimum, maximum].
        """
        min_deviations = (self.mean - self.minimum) / self.std_dev
        max_deviations = (self.maximum - self.mean) / self.std_dev

        deviations = math.ceil(min(min_deviations, max_deviations))
        low = max(self.minimum, self.mean - deviations * self.std_dev)
        high = min(self.maximum, self.mean + deviations * self.std_dev)

        return math.floor(low), math.ceil(high)


class StatisticsCollector:
    """
    Collects pixel statistics by running ``gdalinfo -stats``.
    """

    def __init__(
        self,
        runner: CommandRunner,
        info_command: str = 'gdalinfo',
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize statistics collector.

        Args:
            runner: Runner used to invoke the info tool
            info_command: Name or path of the info tool
            logger: Optional logger instance
        """
        self.runner = runner
        self.info_command = info_command
        self.logger = logger or logging.getLogger(__name__)

    def build_command(self, image_path: str) -> List[str]:
        return [self.info_command, '-stats', image_path]

    def collect(self, image_path: str) -> Optional[PixelStatistics]:
        """
        Get statistics for the image at image_path.

        Returns None when statistics are unavailable for any reason.
        """
        result = self.runner.run(self.build_command(image_path))
        if not result.succeeded:
            self.logger.debug(
                f"Unable to get image statistics for image {image_path} "
                f"(exit code {result.exit_code})"
            )
            return None

        statistics = PixelStatistics.parse(result.output)
        if statistics is None:
            self.logger.debug(f"No usable statistics reported for image {image_path}")
        return statistics

    def scale_range(self, image_path: str) -> Optional[ScaleRange]:
        """Contrast stretch range for the image, or None."""
        statistics = self.collect(image_path)
        if statistics is None:
            return None
        return statistics.scale_range()
