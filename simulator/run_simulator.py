from __future__ import annotations

import logging
import sys
import threading

from acmonitor.dev.logging_setup import configure_logging
from acmonitor.domain.errors import StorageUnavailable, ValidationError
from acmonitor.runtime.api_client import ApiClientConfig, MonitorApiClient
from simulator.config.settings import SimulatorSettings
from simulator.sensors.current_sensor import CurrentSensorModel

logger = logging.getLogger("simulator")


def publish_loop(client: MonitorApiClient, model: CurrentSensorModel, interval_s: float,
                 stop_flag: threading.Event) -> int:
    """
    Post one sample per interval until stopped.

    Returns
    -------
    int
        Number of samples the server accepted.
    """
    sent = 0
    while not stop_flag.is_set():
        meas = model.sample()
        try:
            reading = client.post_reading(meas)
            sent += 1
            logger.info("Sent %.2fV %.3fA %.2fW -> %s", meas.voltage, meas.current, meas.power, reading.id)
        except StorageUnavailable as e:
            logger.warning("Server unavailable: %s", e)
        except ValidationError as e:
            logger.error("Server rejected sample: %s", e)
        stop_flag.wait(interval_s)
    return sent


def _parse_scenario(argv: list[str]) -> list[float]:
    if "--scenario" not in argv:
        return []
    i = argv.index("--scenario")
    if i + 1 >= len(argv):
        return []
    return [float(x) for x in argv[i + 1].split(",") if x.strip()]


def main() -> None:
    """
    Optional CLI usage:
        python -m simulator.run_simulator --scenario 5,5,0,0,12,5,12
    """
    configure_logging()
    settings = SimulatorSettings(scenario=_parse_scenario(sys.argv))

    client = MonitorApiClient(ApiClientConfig(base_url=settings.base_url, timeout_s=settings.timeout_s))
    model = CurrentSensorModel(seed=settings.seed, scenario=settings.scenario)
    stop_flag = threading.Event()

    logger.info("Streaming readings to %s every %.1fs", settings.base_url, settings.interval_s)
    try:
        publish_loop(client, model, settings.interval_s, stop_flag)
    except KeyboardInterrupt:
        stop_flag.set()
    finally:
        client.close()


if __name__ == "__main__":
    main()
