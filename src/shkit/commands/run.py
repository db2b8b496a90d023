"""shkit run — log a command at RUN level, then run it.

    shkit run -- make -j4 install
    shkit run --dry-run -- rm -rf build/

The command's own output is passed through untouched and its exit
status becomes shkit's exit status. With --dry-run (or SHKIT_DRY_RUN=1)
the command is only logged.
"""

import argparse

from shkit.lib.log_lib import get_logger, trace


def register(subparsers, parents):
    """Register the 'run' subcommand."""
    p = subparsers.add_parser(
        "run",
        parents=parents,
        help="Log and run a command",
        description=(
            "Log COMMAND at RUN level and execute it, forwarding its output\n"
            "and exit status. Use '--' before commands that take options."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("argv", metavar="COMMAND", nargs=argparse.REMAINDER,
                   help="Command and arguments")
    p.set_defaults(func=run)


@trace
def run(args):
    """Execute the run command."""
    argv = list(args.argv)
    if argv and argv[0] == "--":
        argv = argv[1:]
    logger = get_logger()
    if not argv:
        return logger.log("ERROR", 2, "run: no command given")
    return logger.log_command(argv)
