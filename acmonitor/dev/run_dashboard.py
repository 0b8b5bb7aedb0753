from __future__ import annotations

import logging
import sys
import time

from acmonitor.bootstrap import build_dashboard_system
from acmonitor.dev.logging_setup import configure_logging
from acmonitor.runtime.snapshots import render_text

logger = logging.getLogger("acmonitor.dashboard")


def main() -> None:
    """
    Run the headless polling dashboard and print the view every cycle.

    Notes
    -----
    - Loads configuration from `config.yaml` when present, else defaults.
    - Optional CLI usage:
        python -m acmonitor.dev.run_dashboard --config path/to/config.yaml
    """
    config_path = None
    if "--config" in sys.argv:
        i = sys.argv.index("--config")
        if i + 1 < len(sys.argv):
            config_path = sys.argv[i + 1]

    configure_logging(verbose="--verbose" in sys.argv)
    wiring = build_dashboard_system(config_path=config_path)
    wiring.runtime.start()
    logger.info("Polling %s every %.1fs", wiring.config.poller.base_url, wiring.config.poller.interval_s)

    try:
        while True:
            time.sleep(wiring.config.poller.interval_s)
            view = render_text(wiring.model)
            if view:
                print(view, flush=True)
                print("-" * 60, flush=True)
    except KeyboardInterrupt:
        pass
    finally:
        wiring.runtime.stop()
        wiring.client.close()


if __name__ == "__main__":
    main()
