"""shkit levels — list the known levels."""

from shkit.lib.log_lib import format_level_list, get_logger


def register(subparsers, parents):
    """Register the 'levels' subcommand."""
    p = subparsers.add_parser(
        "levels",
        parents=parents,
        help="List levels with rank, class and action",
        description="List every registered level. '*' marks the current minimum.",
    )
    p.set_defaults(func=run)


def run(args):
    """Execute the levels command."""
    print(format_level_list(get_logger().levels))
    return 0
