"""Command-line interface for the audio logger."""

import logging
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .formatting import DEFAULT_LOG_FILE, format_json, format_pretty, write_log
from .pipeline import DEFAULT_WORKERS, collect_metadata, stream_metadata
from .probe import PROBE_BACKENDS, get_prober

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

USAGE_EXIT_CODE = 1


class UsageError(click.UsageError):
    exit_code = USAGE_EXIT_CODE


class AudioLoggerCommand(click.Command):
    """Command that reports argument errors with exit status 1."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = USAGE_EXIT_CODE
            raise


@click.command(cls=AudioLoggerCommand)
@click.version_option(version=__version__)
@click.argument("music_directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--pretty", "-p", is_flag=True, help="Print a text block per file as it is probed")
@click.option(
    "--output", "-o",
    is_flag=True,
    help="Write the text blocks to a log file instead of printing"
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help=f"Log file written by --output (default: {DEFAULT_LOG_FILE})"
)
@click.option(
    "--backend",
    type=click.Choice(PROBE_BACKENDS),
    default="ffprobe",
    show_default=True,
    help="How audio streams are probed"
)
@click.option(
    "--ffprobe", "ffprobe_path",
    envvar="AUDIO_LOGGER_FFPROBE",
    help="ffprobe binary to run (default: ffprobe on PATH)"
)
@click.option(
    "--workers", "-w",
    type=click.IntRange(min=1),
    default=DEFAULT_WORKERS,
    envvar="AUDIO_LOGGER_WORKERS",
    show_default=True,
    help="Concurrent probes when collecting all files before output"
)
@click.option(
    "--progress/--no-progress",
    default=False,
    help="Show a progress bar while collecting"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose logging"
)
def cli(
    music_directory: Path,
    pretty: bool,
    output: bool,
    log_file: Optional[Path],
    backend: str,
    ffprobe_path: str,
    workers: int,
    progress: bool,
    verbose: bool,
):
    """Log codec, bit rate and sample rate of every audio file in a directory.

    MUSIC_DIRECTORY: Folder to scan. Artist and album are taken from the two
    folders above each file.

    Without flags, a JSON array is printed once every file has been probed.

    Examples:

      audio-logger ~/Music

      audio-logger ~/Music/Artist -p

      audio-logger ~/Music -o --log-file library.log
    """
    if pretty and output:
        raise UsageError("-p and -o cannot be used together", click.get_current_context())

    if log_file is not None and not output:
        raise UsageError("--log-file requires -o", click.get_current_context())

    log_file = log_file or Path(DEFAULT_LOG_FILE)

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    prober = get_prober(backend, ffprobe_path)
    logger.debug(f"Probing with {backend}")

    try:
        if pretty:
            for record in stream_metadata(music_directory, prober):
                click.echo(format_pretty(record))
                click.echo()
            return

        records = collect_metadata(music_directory, prober, workers=workers, progress=progress)

        if output:
            count = write_log(records, log_file)
            click.echo(f"Logged {count} files to {log_file}")
        else:
            click.echo(format_json(records))

    except OSError as e:
        raise click.ClickException(str(e)) from e


if __name__ == "__main__":
    cli()
