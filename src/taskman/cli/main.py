# src/taskman/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads the task file once, runs one command
and saves once if the command changed something and succeeded.

Exit codes: 0 on success, 1 on any handled or unexpected error.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

from ..cli.bootstrap import create_initial_state
from ..cli.commands import PROG, UsageError, registry
from ..config import get_settings
from ..logging_setup import setup_logging
from ..tasks.task_errors import TaskManagerError

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None, *, settings=None) -> int:
    if settings is None:
        settings = get_settings()

    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)
    log_dir = getattr(settings, "data_dir", None) if getattr(settings, "log_to_file", False) else None
    setup_logging(log_dir=log_dir, console_level=console_level)

    parser = registry.build_parser(PROG)
    try:
        args = parser.parse_args(list(argv) if argv is not None else None)
    except UsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"Run '{PROG} help' for usage information.", file=sys.stderr)
        return 1
    except SystemExit as e:
        # argparse -h/--help
        return e.code if isinstance(e.code, int) else 0

    command = registry.get(args.command)
    if command is None:
        print(registry.build_help())
        return 0

    logger.debug("Running command %s", command.name)

    if not command.uses_store:
        return command.handler(None, args)  # type: ignore[arg-type]

    try:
        state = create_initial_state(settings=settings, tasks_file=args.file)
        state.tasks.load()

        result = command.handler(state, args)
        if result == 0 and command.mutates:
            state.tasks.save()
        return result

    except TaskManagerError as e:
        logger.debug("Command %s failed: %s", command.name, e, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.error("I/O error during %s: %s", command.name, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("An unexpected error occurred")
        print(f"Error: {e}", file=sys.stderr)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
