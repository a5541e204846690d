"""Process entry point for the ``kubetop`` script and ``python -m kubetop``."""

import sys

from kubetop.cli import cli_main
from kubetop.errors import EXIT_ERROR, EXIT_INTERRUPTED, EXIT_OK


def main() -> int:
    """Run the CLI and turn the way it ended into a process exit code.

    typer always finishes by raising SystemExit. An integer code passes
    through unchanged. A message string (already printed) maps to 1. Ctrl+C
    before the refresh loop starts, e.g. while the kubeconfig loads, maps
    to 130.
    """
    try:
        cli_main()
    except SystemExit as e:
        if e.code is None:
            return EXIT_OK
        return e.code if isinstance(e.code, int) else EXIT_ERROR
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
