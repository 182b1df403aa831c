"""Command-line interface for the image reducer."""

import json
import logging
import os
import sys
import time
import click
from typing import Any, Dict, Optional

from . import __version__
from .core.engine import PillowTransformEngine
from .core.planner import OptimizationPlanner
from .core.reducer import ImageReducer
from .core.scanner import DirectoryScanner
from .config.config_manager import ConfigManager
from .utils.formatters import format_file_size, format_run_summary


def setup_logging(level: str, log_file: Optional[str] = None):
    """Set up logging configuration."""
    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            click.echo(f"Warning: Could not set up file logging: {e}", err=True)


def run_options(func):
    """Attach the options shared by the commands that build a run configuration."""
    options = [
        click.option('--source-path', '-s', help='Directory to read images from'),
        click.option('--dest-path', '-d', help='Directory to write the mirrored tree to'),
        click.option('--max-width', type=int, help='Maximum output width in pixels'),
        click.option('--max-height', type=int, help='Maximum output height in pixels'),
        click.option('--min-size-reduction', type=int,
                     help='Minimum dimension reduction in percent (0-100)'),
        click.option('--quality', type=int, help='Compression quality (0-100)'),
        click.option('--jpeg-blur', type=float, help='Blur applied before JPEG compression (0.1-100)'),
        click.option('--force-direct-color-output-format',
                     type=click.Choice(['jpg', 'gif', 'png', 'webp']),
                     help='Output format for direct color images'),
        click.option('--force-indexed-color-output-format',
                     type=click.Choice(['jpg', 'gif', 'png', 'webp']),
                     help='Output format for indexed color images'),
        click.option('--direct-color-bit-depth', type=int,
                     help='Bit depth for direct color images (1, 4, 8, 15, 16, 18, 24, 32)'),
        click.option('--indexed-color-bit-depth', type=int,
                     help='Bit depth for indexed color images (1-8)'),
        click.option('--force-png-to-indexed/--no-force-png-to-indexed', default=None,
                     help='Convert every PNG to an indexed palette'),
        click.option('--force-png-to-jpg/--no-force-png-to-jpg', default=None,
                     help='Convert direct color PNGs to JPEG'),
        click.option('--recursive/--no-recursive', default=None,
                     help='Descend into subdirectories'),
        click.option('--max-depth', type=int, help='Maximum number of directory levels to scan'),
        click.option('--full-optimization/--no-full-optimization', default=None,
                     help='Apply the aggressive optimization preset'),
        click.option('--verbose/--no-verbose', default=None,
                     help='Log every file decision'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _load_config(ctx) -> ConfigManager:
    """Load the configuration file and apply its logging section."""
    config_manager = ConfigManager(ctx.obj.get('config_path'))
    config_manager.load_config()

    logging_config = config_manager.get_logging_config()
    if ctx.obj.get('log_level') is None:
        setup_logging(logging_config.get('level', 'INFO'),
                      ctx.obj.get('log_file') or logging_config.get('file'))

    return config_manager


@click.group()
@click.version_option(__version__, '--version', '-V', prog_name='image-reducer')
@click.option('--config', '-c', 'config_path',
              help='Path to configuration file')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level')
@click.option('--log-file',
              help='Log file path')
@click.pass_context
def cli(ctx, config_path: Optional[str], log_level: Optional[str], log_file: Optional[str]):
    """Image Reducer - Mirror a directory tree while shrinking its images."""

    ctx.ensure_object(dict)

    setup_logging(log_level or 'INFO', log_file)

    ctx.obj['config_path'] = config_path
    ctx.obj['log_level'] = log_level
    ctx.obj['log_file'] = log_file


@cli.command()
@run_options
@click.option('--output', '-o', type=click.Choice(['text', 'json']), default='text',
              help='Output format')
@click.pass_context
def reduce(ctx, output: str, **options: Any):
    """Mirror the source tree into the destination, optimizing images."""
    try:
        config_manager = _load_config(ctx)
        config = config_manager.build_scan_configuration(options)

        if output == 'json':
            _console_logging_to_stderr()
        else:
            click.echo(f"Reducing images from {config.source_path} into {config.dest_path}...")

        start_time = time.monotonic()
        stats = ImageReducer(config).run()
        elapsed = time.monotonic() - start_time

        if output == 'json':
            result = stats.to_dict()
            result['elapsed_seconds'] = round(elapsed, 3)
            click.echo(json.dumps(result, indent=2))
        else:
            click.echo(format_run_summary(stats, elapsed))

    except Exception as e:
        click.echo(f"Error during reduction: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument('image_path', type=click.Path(exists=True, dir_okay=False))
@run_options
@click.pass_context
def plan(ctx, image_path: str, **options: Any):
    """Show the transform plan for a single image without writing anything."""
    try:
        config_manager = _load_config(ctx)
        image_path = os.path.abspath(image_path)
        if not options.get('source_path'):
            options['source_path'] = os.path.dirname(image_path)
        config = config_manager.build_scan_configuration(options)

        source_root = os.path.abspath(config.source_path)
        relative_dir = os.path.relpath(os.path.dirname(image_path), source_root)
        if relative_dir == os.curdir or relative_dir.startswith(os.pardir):
            relative_dir = ''

        entry = DirectoryScanner.make_entry(image_path, relative_dir, os.path.basename(image_path),
                                            os.path.getsize(image_path), False)

        probe = PillowTransformEngine().probe(image_path)
        transform_plan = OptimizationPlanner().plan(probe, entry, config)

        click.echo(f"📷 {image_path} ({format_file_size(entry.size)})")
        click.echo(f"   Natural size: {probe.width}x{probe.height}, "
                   f"{'direct' if probe.is_direct_color else 'indexed'} color")
        click.echo(f"   Target size:  {transform_plan.width}x{transform_plan.height}")
        click.echo(f"   Format:       {transform_plan.target_extension}")
        click.echo(f"   Destination:  {transform_plan.destination}")

        for label, directive in (('Direct color', transform_plan.direct_color),
                                 ('Indexed color', transform_plan.indexed_color)):
            if directive:
                click.echo(f"   {label}: {directive.bit_depth} bits, {directive.palette_size} colors")

        compression = transform_plan.compression
        if compression.quality is not None:
            click.echo(f"   Quality:      {compression.quality}")
        if compression.blur:
            click.echo(f"   Blur:         {compression.blur}")
        if compression.sampling_factor:
            click.echo(f"   Sampling:     {compression.sampling_factor[0]}x{compression.sampling_factor[1]}")

    except Exception as e:
        click.echo(f"Error planning {image_path}: {e}", err=True)
        sys.exit(1)


@cli.command()
@run_options
@click.pass_context
def validate_config(ctx, **options: Any):
    """Validate the configuration file together with any given options."""
    try:
        config_manager = _load_config(ctx)
        config = config_manager.build_scan_configuration(options)

        click.echo("✅ Configuration loaded successfully")

        if config_manager.config_file:
            click.echo(f"   Config file: {config_manager.config_file}")

        click.echo(f"\n📊 Configuration Summary:")
        for name, value in _describe(config).items():
            click.echo(f"   {name}: {value}")

    except Exception as e:
        click.echo(f"❌ Configuration validation failed: {e}", err=True)
        sys.exit(1)


def _console_logging_to_stderr():
    """Send console log records to stderr, leaving stdout to the command's output."""
    for handler in logging.getLogger().handlers:
        if type(handler) is logging.StreamHandler:
            handler.setStream(sys.stderr)


def _describe(config) -> Dict[str, Any]:
    """List the options that are set, in declaration order."""
    return {
        name.replace('_', '-'): value
        for name, value in vars(config).items()
        if value is not None and value is not False
    }


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()
