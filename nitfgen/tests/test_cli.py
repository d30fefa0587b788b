"""Tests for CLI module."""

import io

import pytest
from PIL import Image

from nitfgen.cli import create_parser, get_config, main, write_result
from nitfgen.config import RenditionConfig
from nitfgen.derived_image import DerivedArtifact
from nitfgen.generator import GenerationResult
from nitfgen.output_format import OutputFormat


MISSING_TOOLS = ['--gdal-translate', '/nonexistent/gdal_translate',
                 '--gdalinfo', '/nonexistent/gdalinfo']


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    import os
    for name in list(os.environ):
        if name.startswith('NITFGEN_'):
            monkeypatch.delenv(name)


class TestCreateParser:
    """Tests for argument parser creation."""

    def test_parser_has_commands(self):
        """Test parser has expected commands."""
        parser = create_parser()

        args = parser.parse_args(['generate', 'a.ntf'])
        assert args.command == 'generate'

        args = parser.parse_args(['info', 'a.ntf'])
        assert args.command == 'info'

    def test_generate_defaults(self):
        """Test generate command defaults."""
        args = create_parser().parse_args(['generate', 'a.ntf', 'b.ntf'])

        assert args.files == ['a.ntf', 'b.ntf']
        assert args.output_dir == '.'
        assert args.max_side is None
        assert not args.no_overview
        assert not args.quiet

    def test_generate_options(self):
        """Test generate command options."""
        args = create_parser().parse_args([
            'generate', 'a.ntf', '-o', 'out', '--max-side', '512',
            '--no-original', '--original-format', 'jpeg', '--timeout', '30',
        ])

        assert args.output_dir == 'out'
        assert args.max_side == 512
        assert args.no_original
        assert args.original_format == 'jpeg'
        assert args.timeout == 30.0

    def test_invalid_format_rejected(self):
        """Test unknown format choices."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(['generate', 'a.ntf', '--overview-format', 'png'])


class TestGetConfig:
    """Tests for CLI configuration overrides."""

    def test_overrides(self):
        """Test command line options override the defaults."""
        args = create_parser().parse_args([
            'generate', 'a.ntf', '--max-side', '512', '--thumbnail-size', '64',
            '--no-overview', '--thumbnail-format', 'jp2', '--timeout', '0',
            '--max-source-mb', '10',
        ])

        config = get_config(args)

        assert config.max_side_length == 512
        assert config.max_thumbnail_length == 64
        assert not config.create_overview
        assert config.store_original
        assert config.thumbnail_format == OutputFormat.JPEG_2000
        assert config.command_timeout is None
        assert config.max_source_size_mb == 10

    def test_overrides_environment(self, monkeypatch):
        """Test command line options win over environment variables."""
        monkeypatch.setenv('NITFGEN_MAX_SIDE_LENGTH', '300')
        monkeypatch.setenv('NITFGEN_GDALINFO', '/env/gdalinfo')
        args = create_parser().parse_args(['generate', 'a.ntf', '--max-side', '700'])

        config = get_config(args)

        assert config.max_side_length == 700
        assert config.gdalinfo_path == '/env/gdalinfo'

    def test_non_positive_max_side(self):
        """Test a zero overview size restores the default."""
        args = create_parser().parse_args(['generate', 'a.ntf', '--max-side', '0'])

        assert get_config(args).max_side_length == 1024


class TestWriteResult:
    """Tests for write_result."""

    def test_writes_all_renditions(self, tmp_path):
        """Test thumbnail and artifacts are written."""
        result = GenerationResult(
            thumbnail=b'thumb',
            artifacts=[DerivedArtifact('original', b'jp2', 'image/jp2', 'original-scene.jp2')],
        )

        paths = write_result(tmp_path, 'scene.ntf', RenditionConfig(), result)

        assert [p.name for p in paths] == ['thumbnail-scene.jpg', 'original-scene.jp2']
        assert (tmp_path / 'thumbnail-scene.jpg').read_bytes() == b'thumb'
        assert (tmp_path / 'original-scene.jp2').read_bytes() == b'jp2'

    def test_nothing_to_write(self, tmp_path):
        """Test an empty result writes nothing."""
        assert write_result(tmp_path, 'scene.ntf', RenditionConfig(), GenerationResult()) == []
        assert list(tmp_path.iterdir()) == []


class TestMain:
    """Tests for the main entry point."""

    def test_no_command(self, capsys):
        """Test running without a command."""
        assert main([]) == 1

    def test_generate_with_fallback(self, nitf_mono, tmp_path, capsys):
        """Test generating renditions when gdal_translate is unavailable."""
        output_dir = tmp_path / 'derived'

        exit_code = main(['generate', str(nitf_mono), '-o', str(output_dir)] + MISSING_TOOLS)

        assert exit_code == 0
        assert sorted(p.name for p in output_dir.iterdir()) == [
            'original-test.jp2', 'overview-test.jpg', 'thumbnail-test.jpg',
        ]
        thumbnail = Image.open(io.BytesIO((output_dir / 'thumbnail-test.jpg').read_bytes()))
        assert thumbnail.size == (128, 64)

        out = capsys.readouterr().out
        assert '[OK]' in out
        assert 'Processed: 1' in out
        assert 'Fallbacks: 3' in out
        assert 'Thumbnails: 1' in out
        assert 'Derived: 2' in out
        assert 'Skipped variants: 0' in out
        assert 'Generated: ' in out
        assert 'Rate: ' in out
        assert '[ERROR]' not in out

    def test_generate_quiet(self, nitf_mono, tmp_path, capsys):
        """Test quiet mode prints nothing."""
        exit_code = main(['generate', str(nitf_mono), '-o', str(tmp_path / 'out'), '-q',
                          '--no-overview', '--no-original'] + MISSING_TOOLS)

        assert exit_code == 0
        assert capsys.readouterr().out == ''
        assert [p.name for p in (tmp_path / 'out').iterdir()] == ['thumbnail-test.jpg']

    def test_generate_missing_file(self, tmp_path):
        """Test a source file that does not exist."""
        exit_code = main(['generate', str(tmp_path / 'missing.ntf'), '-o', str(tmp_path),
                          '-q'] + MISSING_TOOLS)

        assert exit_code == 1

    def test_generate_reports_errors(self, nitf_mono, tmp_path, capsys):
        """Test the summary lists files that failed."""
        missing = tmp_path / 'missing.ntf'

        exit_code = main(['generate', str(nitf_mono), str(missing), '-o', str(tmp_path / 'out'),
                          '--no-overview', '--no-original'] + MISSING_TOOLS)

        assert exit_code == 1
        out = capsys.readouterr().out
        assert 'Processed: 1' in out
        assert 'Errors: 1' in out
        assert f'  [ERROR] {missing}: ' in out

    def test_generate_invalid_config(self, nitf_mono, tmp_path):
        """Test invalid configuration stops before processing."""
        exit_code = main(['generate', str(nitf_mono), '-o', str(tmp_path / 'out'),
                          '--thumbnail-size', '0'])

        assert exit_code == 1
        assert not (tmp_path / 'out').exists()

    def test_info(self, nitf_mono, capsys):
        """Test showing source information."""
        exit_code = main(['info', str(nitf_mono), '--gdalinfo', '/nonexistent/gdalinfo'])

        assert exit_code == 0
        out = capsys.readouterr().out
        assert 'Dimensions:     128 x 64' in out
        assert 'Representation: MONO' in out
        assert 'Statistics:     unavailable' in out

    def test_info_missing_file(self, tmp_path):
        """Test info for a file that does not exist."""
        assert main(['info', str(tmp_path / 'missing.ntf')]) == 1
