"""CLI entry point.

With no arguments an interactive session starts; otherwise the arguments are
run as a single command, e.g. `gist-upload-cli upload intro.webm "Intro call"`.
"""

import os
import shlex
import sys
from typing import List, Optional

from common.logging_config import setup_logging
from cli.commands import close_client
from cli.repl import repl_loop, run_line


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for CLI."""
    args = list(sys.argv[1:] if argv is None else argv)
    debug = '--debug' in args
    if debug:
        args.remove('--debug')

    logger = setup_logging('cli', log_level='DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING'))
    logger.debug("CLI starting...")

    if not args:
        repl_loop()
        return 0

    try:
        output = run_line(' '.join(shlex.quote(arg) for arg in args))
    finally:
        close_client()

    print(output)
    failed = output.startswith('Error:') or 'Warning: upload failed' in output
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
