"""Main CLI entry point for shkit.

Implements a Docker-style two-pass argument parser:
  1. First pass: extract global flags (--log-level, --log-file, --config, ...)
  2. Second pass: dispatch to subcommand with shared parent args

Global flags can appear before OR after the subcommand:
  shkit --log-level DEBUG log INFO hello      # works
  shkit log INFO hello --log-level DEBUG      # also works

Anything after a bare ``--`` is never treated as a global flag, so
``shkit run -- grep --log-file x`` passes ``--log-file`` to grep.

Subcommands self-register via register(subparsers, parents) convention.
"""

import argparse
import sys

from shkit._version import BASE_VERSION, VERSION


# ---------------------------------------------------------------------------
# Global flags (Docker-style: can precede the subcommand)
# ---------------------------------------------------------------------------
GLOBAL_FLAGS = {
    "--log-level": {"aliases": ["-L"], "metavar": "LEVEL", "default": None,
                    "help": "Minimum level to show (default: INFO)"},
    "--log-file": {"action": "append", "metavar": "PATH[:LEVELS]",
                   "help": "Also write records to PATH (repeatable; "
                           "LEVELS is a comma list, default ALL)"},
    "--timestamp": {"metavar": "FORMAT", "default": None,
                    "help": "strftime pattern for record timestamps"},
    "--force-color": {"action": "store_const", "const": True,
                      "dest": "force_color", "default": None,
                      "help": "Emit ANSI colors even to files and pipes"},
    "--no-color": {"action": "store_const", "const": False,
                   "dest": "force_color", "default": None,
                   "help": "Never force colors (overrides SHKIT_FORCE_COLOR)"},
    "--config": {"metavar": "PATH", "default": None,
                 "help": "Path to config file (default: nearest .shkit.json)"},
}


def _extract_global_flags(argv):
    """Two-pass parse: pull global flags from anywhere in argv.

    Returns (global_namespace, remaining_argv).
    """
    global_parser = argparse.ArgumentParser(add_help=False)
    for flag, kwargs in GLOBAL_FLAGS.items():
        aliases = kwargs.pop("aliases", [])
        global_parser.add_argument(flag, *aliases, **kwargs)
        if aliases:
            kwargs["aliases"] = aliases  # restore for reuse

    if "--" in argv:
        split = argv.index("--")
        head, tail = argv[:split], argv[split:]
    else:
        head, tail = argv, []
    global_args, remaining = global_parser.parse_known_args(head)
    return global_args, remaining + tail


# ---------------------------------------------------------------------------
# Shared parent parser (inherited by all subcommands via parents=[])
# ---------------------------------------------------------------------------
def _build_common_parser():
    """Build the shared argument parser inherited by every subcommand."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--dry-run", "-n", action="store_true", default=False,
                        help="Log commands without running them")
    return common


# ---------------------------------------------------------------------------
# Subcommand discovery and registration
# ---------------------------------------------------------------------------
def _discover_commands():
    """Import and return all command modules.

    Each module in shkit.commands must export:
      register(subparsers, parents) — add itself to the subparser
      run(args) — execute the command
    """
    from shkit.commands import demo, levels, log, run
    return [log, run, levels, demo]


def _build_parser(commands, common_parser):
    """Build the main argparse parser with subcommand dispatch."""
    parser = argparse.ArgumentParser(
        prog="shkit",
        description="shkit — leveled logging for shell scripts",
        epilog=(
            "Run 'shkit <command> --help' for details on a specific command.\n"
            "\n"
            "Global flags (--log-level, --log-file, --timestamp, --force-color,\n"
            "--no-color, --config) can appear before or after the subcommand."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"shkit {BASE_VERSION} ({VERSION})",
    )

    # Add global flags to main parser too (for --help display)
    for flag, kwargs in GLOBAL_FLAGS.items():
        kw = {k: v for k, v in kwargs.items() if k != "aliases"}
        aliases = kwargs.get("aliases", [])
        parser.add_argument(flag, *aliases, **kw)

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    # Let each command register itself
    for cmd_module in commands:
        cmd_module.register(subparsers, parents=[common_parser])

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def _dispatch(args):
    """Initialize logging from resolved settings and run the command.

    Configuration errors (bad level names, malformed output specs) are
    reported as FATAL records on a default logger.
    """
    from shkit.config import resolve_settings
    from shkit.lib.log_lib import LogError, get_logger, init_logger

    try:
        init_logger(resolve_settings(args))
        return args.func(args) or 0
    except LogError as e:
        return get_logger().log("FATAL", str(e))


def main(argv=None):
    """Main entry point for shkit CLI.

    Args:
        argv: Command-line arguments. None means sys.argv[1:].

    Returns:
        Exit code (0 = success; FATAL records exit with their status).
    """
    if argv is None:
        argv = sys.argv[1:]

    # Pass 1: extract global flags from anywhere in the arg list
    global_args, remaining = _extract_global_flags(argv)

    # Pass 2: parse subcommand + shared/specific args
    common_parser = _build_common_parser()
    commands = _discover_commands()
    parser = _build_parser(commands, common_parser)

    # If no args at all, print help
    if not remaining:
        parser.print_help()
        return 0

    args = parser.parse_args(remaining)

    # If subcommand selected but no handler, print help
    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    # Merge global args into the namespace for convenience
    for key, value in vars(global_args).items():
        if key not in vars(args) or getattr(args, key) is None:
            setattr(args, key, value)

    # Dispatch; FatalError is a SystemExit carrying the record's status
    try:
        return _dispatch(args)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1


if __name__ == "__main__":
    sys.exit(main())
