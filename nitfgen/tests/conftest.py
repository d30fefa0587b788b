"""
Pytest fixtures for nitfgen tests.
"""

import io
import logging
from pathlib import Path

import numpy as np
import pytest

from nitfgen.command_runner import CommandResult, CommandRunner


GDALINFO_STATS_OUTPUT = """Driver: NITF/National Imagery Transmission Format
Files: /tmp/scene.ntf
Size is 128, 64
Band 1 Block=128x64 Type=Byte, ColorInterp=Gray
  Minimum=0.000, Maximum=255.000, Mean=100.000, StdDev=20.000
  Metadata:
    NITF_IREPBAND=M
    STATISTICS_MAXIMUM=255
    STATISTICS_MEAN=100
    STATISTICS_MINIMUM=0
    STATISTICS_STDDEV=20
"""


class FakeCommandRunner(CommandRunner):
    """
    Command runner that never spawns processes.

    Handlers are registered per program name and are either a
    CommandResult or a callable taking the command and returning one.
    Unregistered programs behave as if they were not installed.
    """

    def __init__(self):
        super().__init__(logger=logging.getLogger('test'))
        self.calls = []
        self.handlers = {}

    def when(self, program, handler):
        self.handlers[program] = handler
        return self

    def run(self, command):
        self.calls.append(list(command))
        handler = self.handlers.get(command[0])
        if handler is None:
            return CommandResult(127, f"{command[0]}: command not found")
        if callable(handler):
            return handler(command)
        return handler

    def calls_for(self, program):
        return [call for call in self.calls if call[0] == program]


def translate_writes(data=b'translated image'):
    """Handler for gdal_translate that writes data to the output path."""
    def handler(command):
        Path(command[-1]).write_bytes(data)
        return CommandResult(0, 'Input file size is 128, 64\n0...10...20...30...100 - done.')
    return handler


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    return logging.getLogger('test')


@pytest.fixture
def fake_runner():
    """Fixture providing a FakeCommandRunner with nothing installed."""
    return FakeCommandRunner()


@pytest.fixture
def source_file(tmp_path):
    """Fixture providing a placeholder source file for external rendering."""
    path = tmp_path / "scene.ntf"
    path.write_bytes(b'NITF02.10' + b'\0' * 100)
    return path


@pytest.fixture
def sample_rgb_image():
    """Fixture providing an RGB Pillow image."""
    from PIL import Image
    return Image.new('RGB', (120, 80), color=(200, 30, 30))


@pytest.fixture
def sample_rgba_image():
    """Fixture providing a half transparent RGBA Pillow image."""
    from PIL import Image
    return Image.new('RGBA', (60, 40), color=(255, 0, 0, 128))


@pytest.fixture
def sample_jpeg_bytes():
    """Fixture providing sample JPEG image bytes."""
    from PIL import Image

    img = Image.new('RGB', (100, 100), color='red')
    buffer = io.BytesIO()
    img.save(buffer, format='JPEG')
    return buffer.getvalue()


def _write_nitf(filepath, data, **options):
    import rasterio
    from rasterio.transform import from_bounds

    count, height, width = data.shape
    transform = from_bounds(-180, -90, 180, 90, width, height)

    with rasterio.open(
        str(filepath), 'w', driver='NITF',
        height=height, width=width, count=count,
        dtype=data.dtype.name,
        transform=transform,
        crs='EPSG:4326',
        ICORDS='G',
        **options
    ) as ds:
        ds.write(data)

    return filepath


@pytest.fixture
def nitf_mono(tmp_path):
    """Create a single band 128x64 NITF."""
    rng = np.random.default_rng(7)
    data = rng.integers(0, 255, (1, 64, 128), dtype=np.uint8)
    return _write_nitf(tmp_path / "test.ntf", data, IREP="MONO")


@pytest.fixture
def nitf_rgb(tmp_path):
    """Create a three band 100x50 NITF."""
    rng = np.random.default_rng(11)
    data = rng.integers(0, 255, (3, 50, 100), dtype=np.uint8)
    return _write_nitf(tmp_path / "test_multi.ntf", data, IREP="RGB", IREPBAND="R,G,B")


@pytest.fixture
def nitf_mono_16bit(tmp_path):
    """Create a single band 16-bit 80x120 NITF."""
    rng = np.random.default_rng(3)
    data = rng.integers(0, 4095, (1, 120, 80), dtype=np.uint16)
    return _write_nitf(tmp_path / "test_16bit.ntf", data, IREP="MONO")
