from __future__ import annotations

import sys

from acmonitor.dev.logging_setup import configure_logging
from monitor_server.monitor_server import main as serve


def main() -> None:
    """
    Start the monitor HTTP server and the notification worker.

    Notes
    -----
    - Loads configuration from `config.yaml` by default.
    - Optional CLI usage:
        python -m acmonitor.dev.run_server --config path/to/config.yaml [--verbose]
    """
    config_path = None
    if "--config" in sys.argv:
        i = sys.argv.index("--config")
        if i + 1 < len(sys.argv):
            config_path = sys.argv[i + 1]

    configure_logging(verbose="--verbose" in sys.argv)
    serve(config_path=config_path)


if __name__ == "__main__":
    main()
