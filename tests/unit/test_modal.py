import pytest
from grblreport.capabilities import Capabilities
from grblreport.protocol.types import ModalState, MotionMode, ProgramFlow
from grblreport.report.modal import coord_system_word, format_gcode_modes, motion_word, report_gcode_modes


def test_default_modes(modal):
    assert format_gcode_modes(modal) == "[GC:G0 G54 G8 G17 G21 G90 G94 G50 M5 M9 T0 F0]\r\n"


def test_all_alternate_modes(modal):
    modal.motion = MotionMode.CCW_ARC
    modal.coord_system_idx = 1
    modal.diameter_mode = True
    modal.plane_select = 2
    modal.units = 1
    modal.distance = 1
    modal.feed_mode = 1
    modal.scaling_active = True
    modal.scaling_mask = 3
    modal.program_flow = ProgramFlow.COMPLETED_M30
    modal.spindle.on = True
    modal.spindle.ccw = True
    modal.tool_change = True
    modal.coolant.mist = True
    modal.coolant.flood = True
    modal.override_ctrl.feed_rate_disable = True
    modal.override_ctrl.spindle_rpm_disable = True
    modal.override_ctrl.feed_hold_disable = True
    modal.tool = 5
    modal.feed_rate = 1500.0
    assert format_gcode_modes(modal) == (
        "[GC:G3 G55 G7 G19 G20 G91 G93 G51:3 M30 M4 M6 M7 M8 M50 M51 M53 T5 F1500]\r\n"
    )


@pytest.mark.parametrize(
    "motion,expected",
    [
        (MotionMode.PROBE_TOWARD, "38.2"),
        (MotionMode.PROBE_TOWARD_NO_ERROR, "38.3"),
        (MotionMode.PROBE_AWAY, "38.4"),
        (MotionMode.PROBE_AWAY_NO_ERROR, "38.5"),
        (MotionMode.NONE, "80"),
        (MotionMode.SPINDLE_SYNCHRONIZED, "33"),
    ],
)
def test_motion_words(motion, expected):
    assert motion_word(motion) == expected


@pytest.mark.parametrize("idx,expected", [(0, "54"), (5, "59"), (6, "59.1"), (7, "59.2"), (8, "59.3")])
def test_coord_system_words(idx, expected):
    assert coord_system_word(idx) == expected


@pytest.mark.parametrize(
    "flow,token",
    [
        (ProgramFlow.PAUSED, " M0 "),
        (ProgramFlow.OPTIONAL_STOP, " M1 "),
        (ProgramFlow.COMPLETED_M2, " M2 "),
        (ProgramFlow.COMPLETED_M30, " M30 "),
    ],
)
def test_program_flow_tokens(modal, flow, token):
    modal.program_flow = flow
    assert token in format_gcode_modes(modal)


def test_spindle_speed_only_with_variable_spindle(modal):
    modal.spindle_rpm = 1200.0
    assert " S" not in format_gcode_modes(modal)
    assert format_gcode_modes(modal, Capabilities(variable_spindle=True)).endswith(" F0 S1200]\r\n")


def test_parking_override_only_with_capability(modal):
    modal.override_ctrl.parking_disable = True
    assert "M56" not in format_gcode_modes(modal)
    assert " M56 " in format_gcode_modes(modal, Capabilities(parking_override_control=True))


def test_feed_rate_in_inches(modal):
    modal.feed_rate = 254.0
    assert format_gcode_modes(modal, inches=True).endswith(" F10.0]\r\n")


def test_idempotent_output(sink, modal):
    report_gcode_modes(sink, modal)
    report_gcode_modes(sink, modal)
    first, second = sink.lines()
    assert first == second


def test_mist_only_coolant():
    modal = ModalState()
    modal.coolant.mist = True
    text = format_gcode_modes(modal)
    assert " M7 " in text
    assert "M8" not in text and "M9" not in text
