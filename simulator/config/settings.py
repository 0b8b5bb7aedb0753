from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class SimulatorSettings:
    """
    Settings for the meter simulator.

    Parameters
    ----------
    base_url
        Monitor server to post readings to.
    interval_s
        Delay between posted samples.
    scenario
        Optional scripted list of currents (A); played once, then the model
        continues with random samples. Empty means random only.
    seed
        RNG seed for reproducible runs.
    """

    base_url: str = "http://127.0.0.1:3000"
    interval_s: float = 1.0
    timeout_s: float = 5.0
    scenario: List[float] = field(default_factory=list)
    seed: int = 321
