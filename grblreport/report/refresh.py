"""
Refresh counters and dirty flags gating the optional status frame fields.

The WCO and override fields are expensive and change rarely, so they are sent
every N-th frame only. N is shorter while the machine is busy than at rest.
ReportState is the only state that survives between status frames; it is
mutated exclusively by the report path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from grblreport import config as cfg
from grblreport.config import TRACE
from grblreport.protocol.types import BUSY_STATES, MachineState

logger = logging.getLogger(__name__)

# Forces the accessory (A:) field on the next override report even when empty
FORCE_ACCESSORY = -1


@dataclass(frozen=True)
class RefreshIntervals:
    wco_busy: int = cfg.REPORT_WCO_REFRESH_BUSY_COUNT
    wco_idle: int = cfg.REPORT_WCO_REFRESH_IDLE_COUNT
    ovr_busy: int = cfg.REPORT_OVR_REFRESH_BUSY_COUNT
    ovr_idle: int = cfg.REPORT_OVR_REFRESH_IDLE_COUNT


DEFAULT_INTERVALS = RefreshIntervals()


@dataclass
class ReportState:
    """
    Cross-frame report state.

    Counters start at zero so the first frame after startup carries the WCO
    field and the one after it the override field.
    """
    wco_counter: int = 0
    ovr_counter: int = 0
    scaling: bool = False
    mpg_mode: bool = False

    def request_wco(self) -> None:
        """Send WCO with the next status frame (offsets changed)."""
        self.wco_counter = 0

    def request_overrides(self, force_accessory: bool = False) -> None:
        """
        Send overrides with the next status frame.

        With force_accessory the A: field is sent even when nothing is active,
        telling the host that spindle and coolant turned off.
        """
        self.ovr_counter = FORCE_ACCESSORY if force_accessory else 0

    def mark_scaling_changed(self) -> None:
        self.scaling = True

    def mark_mpg_changed(self) -> None:
        self.mpg_mode = True

    def reset(self) -> None:
        self.wco_counter = 0
        self.ovr_counter = 0
        self.scaling = False
        self.mpg_mode = False


class RefreshScheduler:
    """
    Per-frame view over ReportState deciding which gated fields are due.

    Call order within one frame is fixed: take_wco() then take_overrides(),
    then the one-shot flags. Emitting WCO defers the overrides to a later
    frame so both long fields never share one frame.
    """

    def __init__(
        self,
        state: ReportState,
        machine_state: MachineState,
        intervals: RefreshIntervals = DEFAULT_INTERVALS,
    ) -> None:
        self._state = state
        self._busy = machine_state in BUSY_STATES
        self._intervals = intervals
        self._overrides_ready = state.ovr_counter <= 0
        self.accessory_forced = False

    @property
    def busy(self) -> bool:
        return self._busy

    def take_wco(self) -> bool:
        """Decrement the WCO counter; True when the field is due this frame."""
        st = self._state
        if st.wco_counter > 0:
            st.wco_counter -= 1
            return False
        interval = self._intervals.wco_busy if self._busy else self._intervals.wco_idle
        st.wco_counter = interval - 1
        self._overrides_ready = False
        logger.log(TRACE, "wco_due busy=%s next=%d", self._busy, st.wco_counter)
        return True

    def take_overrides(self) -> bool:
        """Decrement the override counter; True when Ov: is due this frame."""
        st = self._state
        if st.ovr_counter > 0:
            st.ovr_counter -= 1
            return False
        if not self._overrides_ready:
            return False
        self.accessory_forced = st.ovr_counter < 0
        interval = self._intervals.ovr_busy if self._busy else self._intervals.ovr_idle
        st.ovr_counter = interval - 1
        logger.log(TRACE, "ovr_due busy=%s next=%d forced=%s", self._busy, st.ovr_counter, self.accessory_forced)
        return True

    def take_scaling(self) -> bool:
        if self._state.scaling:
            self._state.scaling = False
            return True
        return False

    def take_mpg(self) -> bool:
        if self._state.mpg_mode:
            self._state.mpg_mode = False
            return True
        return False
