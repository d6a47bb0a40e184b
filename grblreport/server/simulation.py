"""
Simulation module for FAKE_SERIAL mode.

Provides an in-memory machine implementing both MachineStateProvider and
SettingsStore so the reporter can run without a motion controller. A
simple jog along the X axis produces changing positions while running.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from grblreport import config as cfg
from grblreport.protocol.types import (
    MachineSnapshot,
    MachineState,
    ModalState,
    OverrideState,
)
from grblreport.utils.errors import SettingReadError

logger = logging.getLogger(__name__)


@dataclass
class SimulatedMachine:
    """State for FAKE_SERIAL simulation mode."""
    n_axis: int = cfg.N_AXIS
    steps_per_mm: float = 250.0
    state: MachineSnapshot = field(default_factory=MachineSnapshot)
    modal_state: ModalState = field(default_factory=ModalState)
    override_state: OverrideState = field(default_factory=OverrideState)
    coord_data: list[np.ndarray] = field(default_factory=list)
    tools: list[np.ndarray] = field(default_factory=list)
    failing_slots: set[int] = field(default_factory=set)

    def __post_init__(self):
        if not self.coord_data:
            self.coord_data = [
                np.zeros((self.n_axis,), dtype=np.float32) for _ in range(cfg.SETTING_INDEX_NCOORD)
            ]

    # ---- MachineStateProvider ----

    def snapshot(self) -> MachineSnapshot:
        return self.state

    def modal(self) -> ModalState:
        # Active coordinate system offset follows the selected slot
        idx = self.modal_state.coord_system_idx
        if 0 <= idx < len(self.coord_data):
            self.modal_state.coord_system_offset = self.coord_data[idx]
        return self.modal_state

    def overrides(self) -> OverrideState:
        return self.override_state

    def tool_table(self) -> list[np.ndarray]:
        return self.tools

    # ---- SettingsStore ----

    def read_coord_data(self, index: int) -> np.ndarray:
        if index in self.failing_slots or not 0 <= index < len(self.coord_data):
            raise SettingReadError(index)
        return self.coord_data[index]

    # ---- motion ----

    def start_cycle(self, feed_rate: float = 600.0, line_number: int | None = None) -> None:
        self.state.state = MachineState.CYCLE
        self.state.feed_rate = feed_rate
        self.state.line_number = line_number
        logger.info(f"Simulated cycle started at F{feed_rate}")

    def stop(self) -> None:
        self.state.state = MachineState.IDLE
        self.state.feed_rate = 0.0
        self.state.line_number = None

    def step(self, dt: float) -> None:
        """Advance the simulated jog by dt seconds."""
        if self.state.state != MachineState.CYCLE:
            return
        mm = self.state.feed_rate / 60.0 * dt
        self.state.position[0] += int(round(mm * self.steps_per_mm))
