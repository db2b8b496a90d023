"""shkit log — emit one record from a shell script.

    shkit log INFO "Copying files"
    shkit log --file build.log WARN "disk almost full"
    shkit log FATAL 3 "cannot continue"      # exits with status 3

The exit status is the status the record produces: 0 for informational
and warning levels, the status (default 1) for ERROR and QUIT, and the
fatal status for FATAL. Scripts use QUIT inside a condition to decide
for themselves whether to stop:

    shkit log QUIT "would exit here" || exit $?
"""

import argparse

from shkit.lib.log_lib import get_logger, parse_output_spec, trace


def register(subparsers, parents):
    """Register the 'log' subcommand."""
    p = subparsers.add_parser(
        "log",
        parents=parents,
        help="Log a message at a level",
        description=(
            "Log MESSAGE at LEVEL. LEVEL is a built-in level (DEBUG, RUN,\n"
            "INFO, WARN, ERROR, FATAL, QUIT) or any new name, which becomes\n"
            "a level on first use. For ERROR, FATAL and QUIT a leading\n"
            "number sets the exit status."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("level", metavar="LEVEL", help="Level name")
    p.add_argument("message", metavar="MESSAGE", nargs="*",
                   help="Message words (joined with spaces)")
    p.add_argument("--file", "-f", action="append", metavar="PATH[:LEVELS]",
                   dest="extra_files", default=[],
                   help="Also write to this file for the duration of the call")
    p.set_defaults(func=run)


@trace
def run(args):
    """Execute the log command."""
    logger = get_logger()
    for spec in args.extra_files:
        out = parse_output_spec(spec)
        logger.add_output_file(out.path, out.levels)
    return logger.log(args.level, *args.message)
