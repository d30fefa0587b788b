"""
Command Line Interface for derived image generation.
"""

import argparse
import logging
import os
from pathlib import Path
from typing import List, Optional

from .command_runner import CommandRunner
from .config import RenditionConfig
from .derived_image import ImageVariant, build_derived_filename
from .exceptions import SourceReadError
from .generation_stats import GenerationStats, format_bytes
from .generator import DerivedImageGenerator, GenerationResult
from .output_format import OutputFormat
from .pixel_statistics import StatisticsCollector
from .source_image import SourceImage


FORMAT_CHOICES = ['jpeg', 'jp2']


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('rasterio').setLevel(logging.WARNING)
    logging.getLogger('sh').setLevel(logging.WARNING)

    return logging.getLogger('nitfgen')


def get_config(args: argparse.Namespace) -> RenditionConfig:
    """Get configuration from environment and CLI overrides."""
    config = RenditionConfig.from_env()

    if getattr(args, 'max_side', None) is not None:
        config.set_max_side_length(args.max_side)
    if getattr(args, 'original_max_side', None) is not None:
        config.original_max_side_length = args.original_max_side
    if getattr(args, 'max_source_mb', None) is not None:
        config.max_source_size_mb = args.max_source_mb
    if getattr(args, 'thumbnail_size', None) is not None:
        config.thumbnail_width = args.thumbnail_size
        config.thumbnail_height = args.thumbnail_size
    if getattr(args, 'no_overview', False):
        config.create_overview = False
    if getattr(args, 'no_original', False):
        config.store_original = False
    if getattr(args, 'thumbnail_format', None):
        config.thumbnail_format = OutputFormat.from_name(args.thumbnail_format)
    if getattr(args, 'overview_format', None):
        config.overview_format = OutputFormat.from_name(args.overview_format)
    if getattr(args, 'original_format', None):
        config.original_format = OutputFormat.from_name(args.original_format)
    if getattr(args, 'gdal_translate', None):
        config.gdal_translate_path = args.gdal_translate
    if getattr(args, 'gdalinfo', None):
        config.gdalinfo_path = args.gdalinfo
    if getattr(args, 'timeout', None) is not None:
        config.command_timeout = args.timeout if args.timeout > 0 else None

    return config


def add_rendering_arguments(parser: argparse.ArgumentParser) -> None:
    """Add rendering configuration arguments to a parser."""
    render_group = parser.add_argument_group('Rendering')
    render_group.add_argument('--max-side', type=int, metavar='N',
                              help='Overview max side length (default: 1024)')
    render_group.add_argument('--original-max-side', type=int, metavar='N',
                              help='Original max side length (default: native size)')
    render_group.add_argument('--thumbnail-size', type=int, metavar='N',
                              help='Thumbnail max side length (default: 200)')
    render_group.add_argument('--max-source-mb', type=int, metavar='MB',
                              help='Largest source decoded in-process (default: 120)')
    render_group.add_argument('--no-overview', action='store_true', help='Skip the overview')
    render_group.add_argument('--no-original', action='store_true', help='Skip the original re-encode')
    render_group.add_argument('--thumbnail-format', choices=FORMAT_CHOICES)
    render_group.add_argument('--overview-format', choices=FORMAT_CHOICES)
    render_group.add_argument('--original-format', choices=FORMAT_CHOICES)

    tools_group = parser.add_argument_group('External Tools')
    tools_group.add_argument('--gdal-translate', metavar='PATH', help='gdal_translate executable')
    tools_group.add_argument('--gdalinfo', metavar='PATH', help='gdalinfo executable')
    tools_group.add_argument('--timeout', type=float, metavar='SECONDS',
                             help='Kill external tools after this long (0 for no limit)')


def write_result(output_dir: Path, title: str, config: RenditionConfig,
                 result: GenerationResult) -> List[Path]:
    """Write the renditions in result to output_dir."""
    written = []
    if result.thumbnail is not None:
        thumb_name = build_derived_filename(
            title, ImageVariant.THUMBNAIL.qualifier, config.thumbnail_format.extension
        )
        path = output_dir / thumb_name
        path.write_bytes(result.thumbnail)
        written.append(path)

    for artifact in result.artifacts:
        path = output_dir / artifact.filename
        path.write_bytes(artifact.data)
        written.append(path)

    return written


def cmd_generate(args: argparse.Namespace) -> int:
    """Execute generate command."""
    logger = setup_logging(args.verbose)

    try:
        config = get_config(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return 1

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f"Output: {output_dir}")
    if config.create_overview:
        logger.info(f"Overview max side: {config.max_side_length}px")
    logger.info(f"Original: {config.original_format.name if config.store_original else 'off'}")

    generator = DerivedImageGenerator(config, logger=logger)
    stats = GenerationStats(total_to_process=len(args.files))

    try:
        for filename in args.files:
            title = os.path.basename(filename)
            try:
                source = SourceImage.from_path(filename, logger=logger)
            except SourceReadError as e:
                logger.error(f"Error processing {filename}: {e}")
                stats.record_error(filename, e)
                continue

            result = generator.process(source, title)
            stats.record(filename, result)
            logger.info(f"[{stats.completed_count}/{stats.total_to_process}] {filename}")

            for path in write_result(output_dir, title, config, result):
                if not args.quiet:
                    print(f"  [OK] {filename} -> {path}")
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    if not args.quiet:
        print()
        print(f"Processed: {stats.processed}")
        print(f"Thumbnails: {stats.thumbnails}")
        print(f"Derived: {stats.artifacts}")
        print(f"Fallbacks: {stats.fallbacks}")
        print(f"Skipped variants: {stats.skipped_variants}")
        print(f"Generated: {format_bytes(stats.bytes_generated)}")
        print(f"Errors: {stats.errors}")
        print(f"Time: {stats.elapsed_seconds:.1f}s")
        print(f"Rate: {stats.rate_per_minute:.1f}/min")
        for detail in stats.error_details:
            print(f"  [ERROR] {detail}")

    return 0 if stats.errors == 0 else 1


def cmd_info(args: argparse.Namespace) -> int:
    """Execute info command."""
    logger = setup_logging(args.verbose)

    try:
        source = SourceImage.from_path(args.file, logger=logger)
    except SourceReadError as e:
        logger.error(str(e))
        return 1

    try:
        config = get_config(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    representation = source.representation.value if source.representation else 'unknown'
    bands = ', '.join(band.representation or '-' for band in source.bands)

    print(f"File:           {source.path}")
    print(f"Size:           {source.size:,} bytes")
    print(f"Dimensions:     {source.width} x {source.height}")
    print(f"Representation: {representation}")
    print(f"Bands:          {source.band_count} ({bands})")

    if source.is_monochrome:
        runner = CommandRunner(timeout=config.command_timeout, logger=logger)
        collector = StatisticsCollector(runner, config.gdalinfo_path, logger=logger)
        statistics = collector.collect(source.path)
        if statistics is None:
            print("Statistics:     unavailable")
        else:
            print(f"Statistics:     min={statistics.minimum:g} max={statistics.maximum:g} "
                  f"mean={statistics.mean:g} stddev={statistics.std_dev:g}")
            low, high = statistics.scale_range()
            print(f"Scale range:    {low} - {high}")

    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='nitfgen',
        description='Derived image generation for NITF imagery',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m nitfgen generate image.ntf -o derived/
  python -m nitfgen generate *.ntf -o derived/ --no-original
  python -m nitfgen info image.ntf

Environment:
  NITFGEN_* variables (e.g. NITFGEN_MAX_SIDE_LENGTH) set defaults;
  command line options override them.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Generate command
    gen_parser = subparsers.add_parser('generate', help='Generate derived images')
    gen_parser.add_argument('files', nargs='+', metavar='FILE', help='Source NITF file(s)')
    gen_parser.add_argument('-o', '--output-dir', default='.', help='Output directory')
    gen_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress progress output')
    gen_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_rendering_arguments(gen_parser)

    # Info command
    info_parser = subparsers.add_parser('info', help='Show header and statistics of a source')
    info_parser.add_argument('file', metavar='FILE', help='Source NITF file')
    info_parser.add_argument('--gdalinfo', metavar='PATH', help='gdalinfo executable')
    info_parser.add_argument('--timeout', type=float, metavar='SECONDS',
                             help='Kill gdalinfo after this long (0 for no limit)')
    info_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'generate':
        return cmd_generate(parsed_args)
    elif parsed_args.command == 'info':
        return cmd_info(parsed_args)

    return 1
