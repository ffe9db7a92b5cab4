import argparse
import logging
import os
import sys
from typing import List, Optional

from . import config
from .cli import setup_cli_parsers
from .exceptions import TerminautError
from .paths import normalize_path
from .storage import get_default_store


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.environ.get(config.LOG_LEVEL_ENV, "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run_picker(start_dir: str) -> Optional[str]:
    """Runs the directory picker TUI and returns the chosen path, if any."""
    from .tui import PickerApp

    app = PickerApp(store=get_default_store(), start_dir=start_dir)
    return app.run()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for Terminaut."""
    parser = argparse.ArgumentParser(
        description="Terminaut: favorite, recent and tagged directories, launch profiles and fuzzy directory search.",
        prog="terminaut"
    )

    parser.add_argument(
        '--state-path',
        action='store_true',
        help='Show the path to the state JSON file and exit'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debug output to stderr')

    # Setup subparsers for CLI commands
    setup_cli_parsers(parser)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.state_path:
        print(config.STATE_FILE)
        return 0

    try:
        if hasattr(args, 'func') and args.func:
            args.func(args)
            return 0

        # No CLI command given, launch the picker
        selected = run_picker(normalize_path(os.getcwd()))
    except TerminautError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if selected:
        print(selected)
    return 0


if __name__ == "__main__":
    sys.exit(main())
