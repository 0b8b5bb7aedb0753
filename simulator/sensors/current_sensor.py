from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence

from acmonitor.domain.models import Measurements

NOMINAL_VOLTAGE_V = 230.0
NOMINAL_CURRENT_A = 5.0


@dataclass
class CurrentSensorModel:
    """
    Voltage/current/power meter model.

    The model emits readings normally distributed around ``voltage_v`` and
    ``current_a``; power is computed as ``V * I``.

    Fault injection
    ---------------
    To exercise the alert pipeline, the model can inject:
    - short circuits: current jumps to ``short_circuit_a`` (above the 11A limit)
    - open circuits: current drops to exactly 0A

    A fault lasts ``fault_length`` consecutive samples so the dashboard sees a
    persisting condition rather than a single spike.

    Scripted scenario
    -----------------
    When ``scenario`` is given, those currents are played back first (voltage
    still noisy), which makes end-to-end runs deterministic, e.g.
    ``[5, 5, 0, 0, 12, 5, 12]``.
    """

    voltage_v: float = NOMINAL_VOLTAGE_V
    current_a: float = NOMINAL_CURRENT_A
    voltage_sigma: float = 2.0
    current_sigma: float = 0.4
    seed: Optional[int] = 321

    fault_probability: float = 0.02          # chance per sample to start a fault
    short_circuit_probability: float = 0.5   # among faults: chance it's a short circuit
    short_circuit_a: float = 14.0
    fault_length: int = 3

    scenario: Sequence[float] = ()

    _rng: random.Random = field(init=False, repr=False)
    _pending: List[float] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)
        self._pending = [float(c) for c in self.scenario]

    def _next_current(self) -> float:
        if self._pending:
            return self._pending.pop(0)

        if self._rng.random() < self.fault_probability:
            if self._rng.random() < self.short_circuit_probability:
                fault = self.short_circuit_a
            else:
                fault = 0.0
            # remaining samples of the fault
            self._pending = [fault] * max(0, self.fault_length - 1)
            return fault

        # Normal band stays strictly positive so noise never fakes an open circuit.
        return max(0.1, self._rng.gauss(self.current_a, self.current_sigma))

    def sample(self) -> Measurements:
        """
        Produce the next measurement.
        """
        current = round(self._next_current(), 3)
        voltage = round(self._rng.gauss(self.voltage_v, self.voltage_sigma), 2)
        power = round(voltage * current, 2)
        return Measurements(voltage=voltage, current=current, power=power)

    def stream(self, count: int) -> Iterator[Measurements]:
        for _ in range(count):
            yield self.sample()
