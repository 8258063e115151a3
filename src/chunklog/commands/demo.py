"""chunklog demo — log one of everything.

Shows every input kind the compiler understands at every level::

    chunklog demo
    chunklog demo --colored-background --all-line-colored
    chunklog demo --log-folder logs --html     # also writes logs/latest.html

A FATAL message closes the showcase. It ends the process with exit code 1
only when --crash is given.
"""

import argparse

from chunklog.config import build_logger, resolve_config
from chunklog.lib.compile_lib import Prefix
from chunklog.lifecycle import LifecycleManager

RAINBOW = ['#ff5555', '#55ff55', '#5555ff']


def register(subparsers, parents):
    """Register the 'demo' subcommand."""
    p = subparsers.add_parser(
        "demo",
        parents=parents,
        help="Log a showcase of every message kind and level",
        description=(
            "Log strings, format arguments, templates, objects, multi-line\n"
            "text and chained exceptions at every level, using the resolved\n"
            "configuration (flags, .chunklog.json, ~/.chunklog/config.json)."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "--crash", action="store_true", default=False,
        help="Let the final FATAL message end the process",
    )
    p.set_defaults(func=run)


def rainbow(text):
    """One color per character, cycling through RAINBOW."""
    return [RAINBOW[i % len(RAINBOW)] for i in range(len(text))]


def _chained_error():
    try:
        try:
            raise ConnectionError("connection reset by peer")
        except ConnectionError as e:
            raise RuntimeError("could not load user 42") from e
    except RuntimeError as e:
        return e


def showcase(logger):
    """Log the demo messages through ``logger``."""
    logger.info("This is an info message")
    logger.warn("This is a warning message")
    logger.error("This is an error message")
    logger.debug("This is a debug message")

    logger.info("Hello, %s! You have %d new messages", "World", 3)
    logger.info(["Request ", " finished in ", "ms"], "GET /users", 12.5)
    logger.info("Values are colored: true, false, null, 42, 0x1f and 'quoted'")
    logger.warn({"message": "Hello world!", "code": 500, "tags": ["a", "b"]})
    logger.info("first line\nsecond line\nthird line")
    logger.info("Connecting with password=hunter2 token=abc123")
    logger.error(_chained_error())
    logger.fatal("This is a fatal message")


def run(args):
    """Execute the demo command."""
    config = resolve_config(args)
    showcase_prefix = not config.get("prefixes")
    if showcase_prefix:
        config["prefixes"] = ["chunklog"]
    if not config.get("redacted_content"):
        config["redacted_content"] = [r"password=\S+", r"token=\S+"]
    config["disable_fatal_crash"] = not args.crash

    with LifecycleManager() as lifecycle:
        logger = build_logger(config, lifecycle=lifecycle)
        if showcase_prefix:
            # Per-character colors cannot be expressed in JSON config
            logger.prefixes.append(
                Prefix.create("This prefix has complex colors", rainbow, "#000033"))
        showcase(logger)
    return 0
