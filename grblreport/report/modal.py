"""
G-code modal state encoder ($G).
"""

from __future__ import annotations

from grblreport.capabilities import Capabilities
from grblreport.protocol import wire
from grblreport.protocol.types import ModalState, MotionMode, OutputSink, ProgramFlow

_PROGRAM_FLOW_TOKENS: dict[int, str] = {
    ProgramFlow.PAUSED: "0",
    # Legacy firmware writes a bare "M" for this one
    ProgramFlow.OPTIONAL_STOP: "1",
    ProgramFlow.COMPLETED_M2: "2",
    ProgramFlow.COMPLETED_M30: "30",
}


def motion_word(motion: int) -> str:
    # Probe modes 140..143 map to G38.2..G38.5
    if motion >= MotionMode.PROBE_TOWARD:
        return f"38.{wire.format_uint8(motion - (MotionMode.PROBE_TOWARD - 2))}"
    return wire.format_uint8(motion)


def coord_system_word(idx: int) -> str:
    """54..59, then 59.1..59.3 for the extended systems."""
    g5x = idx + 54
    if g5x > 59:
        return f"59.{wire.format_uint8(g5x - 59)}"
    return wire.format_uint8(g5x)


def format_gcode_modes(modal: ModalState, capabilities: Capabilities | None = None, inches: bool = False) -> str:
    caps = capabilities or Capabilities()
    words = [
        f"G{motion_word(modal.motion)}",
        f"G{coord_system_word(modal.coord_system_idx)}",
        "G7" if modal.diameter_mode else "G8",
        f"G{modal.plane_select + 17}",
        f"G{21 - modal.units}",
        f"G{modal.distance + 90}",
        f"G{94 - modal.feed_mode}",
        f"G51:{wire.format_uint8(modal.scaling_mask)}" if modal.scaling_active else "G50",
    ]

    if modal.program_flow:
        flow = _PROGRAM_FLOW_TOKENS.get(int(modal.program_flow))
        if flow is not None:
            words.append(f"M{flow}")

    if modal.spindle.on:
        words.append("M4" if modal.spindle.ccw else "M3")
    else:
        words.append("M5")

    if modal.tool_change:
        words.append("M6")

    if modal.coolant.value:
        if modal.coolant.mist:
            words.append("M7")
        if modal.coolant.flood:
            words.append("M8")
    else:
        words.append("M9")

    ctrl = modal.override_ctrl
    if ctrl.feed_rate_disable:
        words.append("M50")
    if ctrl.spindle_rpm_disable:
        words.append("M51")
    if ctrl.feed_hold_disable:
        words.append("M53")
    if caps.parking_override_control and ctrl.parking_disable:
        words.append("M56")

    words.append(f"T{wire.format_uint8(modal.tool)}")
    words.append(f"F{wire.format_rate(modal.feed_rate, inches)}")
    if caps.variable_spindle:
        words.append(f"S{wire.format_rpm(modal.spindle_rpm)}")

    return "[GC:" + " ".join(words) + wire.FEEDBACK_END


def report_gcode_modes(
    sink: OutputSink,
    modal: ModalState,
    capabilities: Capabilities | None = None,
    inches: bool = False,
) -> None:
    sink.write(format_gcode_modes(modal, capabilities, inches))
