"""
GenerationStats - Statistics for a batch of derived image runs.
"""

import time
from dataclasses import dataclass, field
from typing import List

from .generator import GenerationResult


@dataclass
class GenerationStats:
    """
    Statistics for a batch run.

    Attributes:
        total_to_process: Source files in the batch
        processed: Files that produced at least a thumbnail
        errors: Files that could not be read or produced no thumbnail
        thumbnails: Thumbnails generated
        artifacts: Overview and original renditions generated
        fallbacks: Variants produced by a fallback renderer
        skipped_variants: Variants no renderer could produce
        bytes_generated: Total bytes of derived images
        start_time: Start timestamp
        error_details: List of error messages
    """
    total_to_process: int = 0
    processed: int = 0
    errors: int = 0
    thumbnails: int = 0
    artifacts: int = 0
    fallbacks: int = 0
    skipped_variants: int = 0
    bytes_generated: int = 0
    start_time: float = field(default_factory=time.time)
    error_details: List[str] = field(default_factory=list)

    def record(self, filename: str, result: GenerationResult) -> None:
        """Add the outcome of one source file."""
        if result.thumbnail is not None:
            self.processed += 1
            self.thumbnails += 1
        else:
            self.errors += 1
            self.error_details.append(f"{filename}: no thumbnail generated")

        self.artifacts += len(result.artifacts)
        self.fallbacks += len(result.fallbacks)
        self.skipped_variants += len(result.warnings)
        self.bytes_generated += result.bytes_generated

    def record_error(self, filename: str, error: Exception) -> None:
        """Add a source file that could not be processed at all."""
        self.errors += 1
        self.error_details.append(f"{filename}: {error}")

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time

    @property
    def rate_per_minute(self) -> float:
        """Processing rate in files per minute."""
        if self.elapsed_seconds > 0:
            return self.completed_count / self.elapsed_seconds * 60
        return 0.0

    @property
    def completed_count(self) -> int:
        """Total completed (processed + errors)."""
        return self.processed + self.errors


def format_bytes(bytes_val: float) -> str:
    """Format bytes as human-readable string."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_val < 1024:
            return f"{bytes_val:.1f} {unit}"
        bytes_val /= 1024
    return f"{bytes_val:.1f} PB"
