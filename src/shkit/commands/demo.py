"""shkit demo — walk through the built-in levels.

Logs one record at INFO, RUN, WARN and ERROR, then ends with FATAL
(trace and exit status 1) or, with --quit, with QUIT (trace, and the
status is returned instead of aborting).
"""

from shkit.lib.log_lib import get_logger


def register(subparsers, parents):
    """Register the 'demo' subcommand."""
    p = subparsers.add_parser(
        "demo",
        parents=parents,
        help="Show what each built-in level looks like",
    )
    p.add_argument("--quit", action="store_true", default=False,
                   help="End with an advisory QUIT instead of FATAL")
    p.add_argument("--run", action="store_true", default=False,
                   help="Actually run the RUN example (echo foo)")
    p.set_defaults(func=run)


def run(args):
    """Execute the demo command."""
    logger = get_logger()
    logger.log("INFO", "FYI")
    if args.run:
        logger.log_command("echo", "foo")
    else:
        logger.log("RUN", "echo foo")
    logger.log("WARN", "watch out")
    logger.log("ERROR", "uh-oh")
    if args.quit:
        return logger.log("QUIT", "oh noes!")
    return logger.log("FATAL", "oh noes!")
