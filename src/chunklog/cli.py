"""Main CLI entry point for chunklog.

Implements a Docker-style two-pass argument parser:
  1. First pass: extract global flags (--no-color, --config)
  2. Second pass: dispatch to subcommand with shared parent args

Global flags can appear before OR after the subcommand:
  chunklog --no-color demo            # works
  chunklog demo --no-color            # also works

Subcommands self-register via register(subparsers, parents) convention.
"""

import argparse
import sys

from chunklog._version import BASE_VERSION, VERSION
from chunklog.errors import ConfigError


# ---------------------------------------------------------------------------
# Global flags (Docker-style: can precede the subcommand)
# ---------------------------------------------------------------------------
GLOBAL_FLAGS = {
    "--no-color": {"action": "store_true", "default": None,
                   "help": "Disable colored output"},
    "--config": {"metavar": "PATH", "default": None,
                 "help": "Path to config file (default: ~/.chunklog/config.json)"},
}


def _extract_global_flags(argv):
    """Two-pass parse: pull global flags from anywhere in argv.

    Returns (global_namespace, remaining_argv).
    """
    global_parser = argparse.ArgumentParser(add_help=False)
    for flag, kwargs in GLOBAL_FLAGS.items():
        global_parser.add_argument(flag, **kwargs)

    global_args, remaining = global_parser.parse_known_args(argv)
    return global_args, remaining


# ---------------------------------------------------------------------------
# Shared parent parser (inherited by all subcommands via parents=[])
# ---------------------------------------------------------------------------
def _build_common_parser():
    """Build the shared argument parser for logger settings.

    Defaults are None so that unset flags fall through to the config files.
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--prefix", dest="prefixes", action="append", metavar="NAME",
                        default=None, help="Prefix tag (repeatable)")
    common.add_argument("--redact", dest="redacted_content", action="append",
                        metavar="REGEX", default=None,
                        help="Redact text matching REGEX (repeatable)")
    common.add_argument("--log-folder", metavar="PATH", default=None,
                        help="Also write log files under PATH")
    common.add_argument("--html", action="store_true", default=None,
                        help="Write HTML log files instead of plain text")
    common.add_argument("--no-compress", dest="compress", action="store_false",
                        default=None,
                        help="Keep rotated log files instead of zipping them")
    common.add_argument("--debug", action="store_true", default=None,
                        help="Show DEBUG messages")
    common.add_argument("--colored-background", action="store_true", default=None,
                        help="Paint the level color behind the header")
    common.add_argument("--all-line-colored", action="store_true", default=None,
                        help="Paint the whole first line in the level color")
    return common


# ---------------------------------------------------------------------------
# Subcommand discovery and registration
# ---------------------------------------------------------------------------
def _discover_commands():
    """Import and return all command modules.

    Each module in chunklog.commands must export:
      register(subparsers, parents) — add itself to the subparser
      run(args) — execute the command
    """
    from chunklog.commands import demo, pipe
    return [demo, pipe]


def _build_parser(commands, common_parser):
    """Build the main argparse parser with subcommand dispatch."""
    parser = argparse.ArgumentParser(
        prog="chunklog",
        description="chunklog — structured, colorized logging",
        epilog=(
            "Run 'chunklog <command> --help' for details on a specific command.\n"
            "\n"
            "Global flags (--no-color, --config) can appear\n"
            "before or after the subcommand."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"chunklog {BASE_VERSION} ({VERSION})",
    )

    # Add global flags to main parser too (for --help display)
    for flag, kwargs in GLOBAL_FLAGS.items():
        parser.add_argument(flag, **kwargs)

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    for cmd_module in commands:
        cmd_module.register(subparsers, parents=[common_parser])

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def main(argv=None):
    """Main entry point for chunklog CLI.

    Args:
        argv: Command-line arguments. None means sys.argv[1:].

    Returns:
        Exit code (0 = success).
    """
    if argv is None:
        argv = sys.argv[1:]

    # Pass 1: extract global flags from anywhere in the arg list
    global_args, remaining = _extract_global_flags(argv)

    # Pass 2: parse subcommand + shared/specific args
    common_parser = _build_common_parser()
    commands = _discover_commands()
    parser = _build_parser(commands, common_parser)

    if not remaining:
        parser.print_help()
        return 0

    args = parser.parse_args(remaining)

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    # Merge global args into the namespace for convenience
    for key, value in vars(global_args).items():
        if key not in vars(args) or getattr(args, key) is None:
            setattr(args, key, value)

    # Dispatch
    try:
        return args.func(args) or 0
    except ConfigError as e:
        from chunklog.lifecycle import system_logger
        system_logger().error(f"Configuration error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1


if __name__ == "__main__":
    sys.exit(main())
