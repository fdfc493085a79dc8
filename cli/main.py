"""varset command-line entry point."""

import argparse
import logging
import sys

from config import Settings
from config.logging_config import setup_logging
from core import VarsetError, format_error, get_exit_code

from . import __version__, commands
from .formatters import EXPORT_FORMATS
from .hooks import HOOKS

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one sub-command per operation."""
    parser = argparse.ArgumentParser(
        prog="varset",
        description="Environment variable manager for .envrc files",
    )
    parser.add_argument("--version", action="version", version=f"varset {__version__}")
    parser.add_argument("--log-level", help="Log level (default: VARSET_LOG_LEVEL or WARNING)")
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    allow = sub.add_parser("allow", help="Grant permission to load .envrc (defaults to ./.envrc)")
    allow.add_argument("path", nargs="?")
    allow.set_defaults(handler=commands.handle_allow)

    deny = sub.add_parser("deny", help="Revoke permission to load .envrc (defaults to ./.envrc)")
    deny.add_argument("path", nargs="?")
    deny.set_defaults(handler=commands.handle_deny)

    prune = sub.add_parser("prune", help="Remove stale entries from the permission list")
    prune.set_defaults(handler=commands.handle_prune)

    listing = sub.add_parser("list", aliases=["status"], help="Show tracked .envrc files")
    listing.set_defaults(handler=commands.handle_list)

    reload = sub.add_parser("reload", help="Print export statements for the current directory")
    reload.set_defaults(handler=commands.handle_reload)

    export = sub.add_parser("export", help="Print the merged environment")
    export.add_argument("--format", choices=sorted(EXPORT_FORMATS), default="dotenv")
    export.set_defaults(handler=commands.handle_export)

    execute = sub.add_parser("exec", help="Run a command with the .envrc of DIR loaded")
    execute.add_argument("directory")
    execute.add_argument("cmd")
    execute.add_argument("args", nargs=argparse.REMAINDER)
    execute.set_defaults(handler=commands.handle_exec)

    use = sub.add_parser("use", help="Show or set the active profile of the current directory")
    use.add_argument("profile", nargs="?")
    use.add_argument("--clear", action="store_true", help="Clear the active profile")
    use.set_defaults(handler=commands.handle_use)

    diff = sub.add_parser("diff", help="Compare two .envrc files or preview a directory change")
    diff.add_argument("--preview", action="store_true", help="Preview changes when entering a directory")
    diff.add_argument("files", nargs="*")
    diff.set_defaults(handler=commands.handle_diff)

    importer = sub.add_parser("import", help="Merge variables from SOURCE into TARGET")
    importer.add_argument("source")
    importer.add_argument("target", nargs="?")
    importer.set_defaults(handler=commands.handle_import)

    edit = sub.add_parser("edit", help="Open .envrc in $EDITOR (defaults to ./.envrc)")
    edit.add_argument("path", nargs="?")
    edit.set_defaults(handler=commands.handle_edit)

    hook = sub.add_parser("hook", help="Print the shell hook")
    hook.add_argument("shell", choices=sorted(HOOKS))
    hook.set_defaults(handler=commands.handle_hook)

    version = sub.add_parser("version", help="Show varset version")
    version.set_defaults(handler=commands.handle_version)

    return parser


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    """
    Run one varset command.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])
        settings: Settings override (defaults to Settings.from_env())

    Returns:
        Process exit status
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = settings or Settings.from_env()
    setup_logging(args.log_level or settings.log_level)

    if not getattr(args, "handler", None):
        parser.print_help()
        return 0

    ctx = commands.Context.create(settings)
    try:
        return args.handler(args, ctx)
    except VarsetError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {format_error(e)}", file=sys.stderr)
        return get_exit_code(e)


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
