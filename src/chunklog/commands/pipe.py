"""chunklog pipe — log the lines of a file or stdin.

Every non-blank input line becomes one log message as soon as it is read::

    tail -f app.out | chunklog pipe --prefix app --redact 'password=\\S+'
    chunklog pipe build.log --level warn --log-folder logs
"""

import argparse
import sys

from chunklog.config import build_logger, resolve_config
from chunklog.errors import ConfigError
from chunklog.lifecycle import LifecycleManager


def register(subparsers, parents):
    """Register the 'pipe' subcommand."""
    p = subparsers.add_parser(
        "pipe",
        parents=parents,
        help="Log each line of a file or stdin",
        description=(
            "Read lines from FILE (default: stdin) and log each one at\n"
            "--level (default: the configured default_level)."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "file", nargs="?", default=None,
        help="Input file (default: stdin)",
    )
    p.add_argument(
        "--level", dest="default_level", metavar="LEVEL", default=None,
        help="Level to log at: info, warn, error, debug or fatal",
    )
    p.set_defaults(func=run)


def _open_input(path):
    if path is None:
        return sys.stdin
    try:
        return open(path, encoding="utf-8", errors="replace")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e


def iter_lines(stream):
    """Yield lines as they arrive, without their line endings."""
    for line in stream:
        yield line.rstrip("\r\n")


def run(args):
    """Execute the pipe command.

    Returns:
        0 on success, 1 when a FATAL line ends the run.
    """
    config = resolve_config(args)
    source = _open_input(args.file)

    try:
        with LifecycleManager() as lifecycle:
            logger = build_logger(config, lifecycle=lifecycle)
            for line in iter_lines(source):
                if line.strip():
                    logger.log(line)
    finally:
        if source is not sys.stdin:
            source.close()
    return 0
