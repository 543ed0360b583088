"""Command line interface for simpleconvert."""
import sys
from pathlib import Path
from typing import Optional

import click
from loguru import logger

from . import __version__
from .config import ConversionConfig
from .core.video.errors import VideoError
from .utils.logging import setup_logging
from .video_processor import VideoProcessor

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@click.command()
@click.argument('input_path', type=click.Path(exists=True, path_type=Path))
@click.argument('output_path', type=click.Path(path_type=Path))
@click.option('--crf', type=click.IntRange(min=0), default=None,
              help='Override the CRF chosen from the frame size.')
@click.option('-p', '--preset', default=None,
              help='Override the x265 preset chosen from the frame size.')
@click.option('--no-crop', is_flag=True, help='Disable black bar detection.')
@click.option('-d', '--dolby-vision', is_flag=True,
              help='Encode with Dolby Vision RPU passthrough.')
@click.option('--overwrite', is_flag=True, help='Replace existing outputs.')
@click.option('--no-progress', is_flag=True, help='Hide progress bars.')
@click.option('--log-level', type=click.Choice(LOG_LEVELS, case_sensitive=False),
              default='INFO', show_default=True, help='Console log level.')
@click.option('--log-file', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help='Also write DEBUG logs to this file.')
@click.version_option(__version__, prog_name='simpleconvert')
def main(input_path: Path, output_path: Path, crf: Optional[int], preset: Optional[str],
         no_crop: bool, dolby_vision: bool, overwrite: bool, no_progress: bool,
         log_level: str, log_file: Optional[Path]) -> None:
    """Re-encode video files to HEVC.

    INPUT_PATH can be a video file or directory.
    OUTPUT_PATH can be a file or directory (required if INPUT_PATH is a directory).
    """
    setup_logging(log_level, log_file)
    config = ConversionConfig(
        overwrite=overwrite,
        show_progress=not no_progress,
        log_level=log_level,
        log_file=log_file,
    )

    try:
        processor = VideoProcessor(config)
        ok = processor.process(
            input_path,
            output_path,
            crf=crf,
            preset=preset,
            crop=not no_crop,
            dolby_vision=dolby_vision,
        )
    except VideoError as e:
        logger.error(e.message)
        if e.details:
            logger.debug(e.details)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("Interrupted", err=True)
        sys.exit(130)

    if not ok:
        click.echo("Error: some files failed to convert", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
