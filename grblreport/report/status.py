"""
Real-time status frame encoder.

Produces the ``<...>`` line sent in answer to every ``?`` poll. The frame
must stay as short as possible since hosts poll at 5-20 Hz during jobs with
short segments; optional fields are omitted rather than zero filled.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import numpy as np

from grblreport import config as cfg
from grblreport.capabilities import Capabilities
from grblreport.config import TRACE
from grblreport.protocol import wire
from grblreport.protocol.types import (
    DriverExtension,
    MachineSnapshot,
    MachineState,
    ModalState,
    OutputSink,
    OverrideState,
    ReportMask,
)
from grblreport.report.refresh import RefreshIntervals, RefreshScheduler, ReportState, DEFAULT_INTERVALS

logger = logging.getLogger(__name__)

_STATE_TOKENS: dict[MachineState, str] = {
    MachineState.IDLE: "Idle",
    MachineState.CYCLE: "Run",
    MachineState.HOLD: "Hold",
    MachineState.JOG: "Jog",
    MachineState.HOMING: "Home",
    MachineState.ALARM: "Alarm",
    MachineState.ESTOP: "Alarm",
    MachineState.CHECK_MODE: "Check",
    MachineState.SAFETY_DOOR: "Door",
    MachineState.SLEEP: "Sleep",
    MachineState.TOOL_CHANGE: "Tool",
}

# Pn: letters after the probe and axis letters, in wire order
_CONTROL_LETTERS: tuple[tuple[str, str], ...] = (
    ("safety_door_ajar", "D"),
    ("reset", "R"),
    ("feed_hold", "H"),
    ("cycle_start", "S"),
    ("e_stop", "E"),
    ("block_delete", "B"),
    ("stop_disable", "T"),
)

# A: letters, in wire order
_ACCESSORY_LETTERS: tuple[tuple[Callable[[MachineSnapshot, ModalState], bool], str], ...] = (
    (lambda s, m: s.spindle.on and not s.spindle.ccw, "S"),
    (lambda s, m: s.spindle.on and s.spindle.ccw, "C"),
    (lambda s, m: s.coolant.flood, "F"),
    (lambda s, m: s.coolant.mist, "M"),
    (lambda s, m: m.tool_change, "T"),
)


def state_token(snapshot: MachineSnapshot) -> str:
    """Machine state word with the Hold/Door sub-state suffix."""
    token = _STATE_TOKENS.get(snapshot.state, "")
    if snapshot.state == MachineState.HOLD:
        # Internal hold codes are 1-based on the wire minus one; hosts rely on it
        return f"{token}:{wire.format_uint8(int(snapshot.holding_state) - 1)}"
    if snapshot.state == MachineState.SAFETY_DOOR:
        return f"{token}:{wire.format_uint8(snapshot.parking_state)}"
    return token


def pin_letters(snapshot: MachineSnapshot, n_axis: int) -> str:
    """Pn: letters in fixed precedence: probe, limit axes, control pins, block delete."""
    letters = []
    if snapshot.probe_triggered:
        letters.append("P")
    for idx in range(n_axis):
        if idx < len(snapshot.limit_pins) and snapshot.limit_pins[idx]:
            letters.append(cfg.AXIS_LETTERS[idx])
    control = snapshot.control
    for name, letter in _CONTROL_LETTERS:
        if getattr(control, name):
            letters.append(letter)
    if snapshot.block_delete_enabled:
        letters.append("B")
    return "".join(letters)


def accessory_letters(snapshot: MachineSnapshot, modal: ModalState) -> str:
    return "".join(letter for pred, letter in _ACCESSORY_LETTERS if pred(snapshot, modal))


class StatusFrameEncoder:
    """
    Encodes one status frame per call, writing it incrementally to the sink.

    Axis buffers are allocated once, sized by axis count, and reused for every
    frame. The ReportState passed to encode() is updated in place.
    """

    def __init__(
        self,
        steps_per_mm: np.ndarray,
        capabilities: Capabilities | None = None,
        intervals: RefreshIntervals = DEFAULT_INTERVALS,
        extension: DriverExtension | None = None,
    ) -> None:
        self.steps_per_mm = np.asarray(steps_per_mm, dtype=np.float32)
        self.n_axis = len(self.steps_per_mm)
        self.capabilities = capabilities or Capabilities()
        self.intervals = intervals
        self.extension = extension

        self._print_position = np.zeros((self.n_axis,), dtype=np.float32)
        self._wco = np.zeros((self.n_axis,), dtype=np.float32)

    def steps_to_mpos(self, steps: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
        """Convert step counts to machine position in mm."""
        if out is None:
            out = np.empty((self.n_axis,), dtype=np.float32)
        np.divide(np.asarray(steps[: self.n_axis], dtype=np.float32), self.steps_per_mm, out=out)
        return out

    def encode(
        self,
        sink: OutputSink,
        snapshot: MachineSnapshot,
        mask: ReportMask,
        modal: ModalState,
        overrides: OverrideState,
        report_state: ReportState,
        inches: bool = False,
    ) -> None:
        caps = self.capabilities
        pos = self.steps_to_mpos(snapshot.position, out=self._print_position)
        scheduler = RefreshScheduler(report_state, snapshot.state, self.intervals)

        sink.write("<")
        sink.write(state_token(snapshot))

        wco_due = mask.work_coord_offset and scheduler.take_wco()
        if not mask.position_type or wco_due:
            np.add(modal.coord_system_offset[: self.n_axis], modal.g92_coord_offset[: self.n_axis], out=self._wco)
            self._wco += modal.tool_length_offset[: self.n_axis]
            if not mask.position_type:
                pos -= self._wco

        sink.write("|MPos:" if mask.position_type else "|WPos:")
        sink.write(wire.axis_values(pos, inches))

        if mask.buffer_state:
            sink.write(
                f"|Bf:{wire.format_uint8(snapshot.planner_blocks_available)},"
                f"{wire.format_uint32(snapshot.rx_buffer_available)}"
            )

        if mask.line_numbers and snapshot.line_number is not None and snapshot.line_number > 0:
            sink.write(f"|Ln:{wire.format_uint32(snapshot.line_number)}")

        if mask.feed_speed:
            if caps.variable_spindle:
                sink.write(f"|FS:{wire.format_rate(snapshot.feed_rate, inches)},{wire.format_rpm(snapshot.spindle_rpm)}")
                if caps.spindle_data:
                    sink.write(f",{wire.format_rpm(snapshot.actual_spindle_rpm)}")
            else:
                sink.write(f"|F:{wire.format_rate(snapshot.feed_rate, inches)}")

        if mask.pin_state:
            letters = pin_letters(snapshot, self.n_axis)
            if letters:
                sink.write(f"|Pn:{letters}")

        if wco_due:
            sink.write(f"|WCO:{wire.axis_values(self._wco, inches)}")

        if mask.overrides:
            if scheduler.take_overrides():
                sink.write(
                    f"|Ov:{wire.format_uint8(overrides.feed)},"
                    f"{wire.format_uint8(overrides.rapid)},"
                    f"{wire.format_uint8(overrides.spindle)}"
                )
                letters = accessory_letters(snapshot, modal)
                if letters or scheduler.accessory_forced:
                    sink.write(f"|A:{letters}")
        elif modal.tool_change:
            sink.write("|A:T")

        if scheduler.take_scaling():
            sink.write(f"|Sc:{wire.format_uint8(modal.scaling_mask)}")

        if scheduler.take_mpg():
            sink.write(f"|MPG:{'1' if snapshot.mpg_mode else '0'}")

        if self.extension is not None:
            self.extension.realtime_report(sink)

        sink.write(">" + wire.LINE_END)
        logger.log(TRACE, "status_frame state=%d wco=%d ovr=%d", int(snapshot.state),
                   report_state.wco_counter, report_state.ovr_counter)
