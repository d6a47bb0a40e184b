"""
Unit tests for the realtime status frame encoder.
"""

import numpy as np
import pytest
from grblreport.capabilities import Capabilities
from grblreport.protocol.types import (
    ControlSignals,
    HoldState,
    MachineSnapshot,
    MachineState,
    ModalState,
    ReportMask,
)
from grblreport.report.status import StatusFrameEncoder, accessory_letters, pin_letters, state_token
from grblreport.server.transports import MockSerialTransport

ORIGIN = "0.000,0.000,0.000"


@pytest.fixture
def encoder(settings):
    return StatusFrameEncoder(settings.steps_per_mm)


def _encode(encoder, snapshot, modal, overrides, report_state, mask, inches=False):
    out = MockSerialTransport()
    encoder.encode(out, snapshot, mask, modal, overrides, report_state, inches=inches)
    return out.getvalue()


def test_idle_at_origin_minimal_frame(encoder, snapshot, modal, overrides, report_state):
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(position_type=True))
    assert frame == f"<Idle|MPos:{ORIGIN}>\r\n"


def test_hold_substate_and_limit_pin(encoder, snapshot, modal, overrides, report_state):
    snapshot.state = MachineState.HOLD
    snapshot.holding_state = HoldState.PENDING
    snapshot.limit_pins = [True, False, False]
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(pin_state=True))
    assert "Hold:1" in frame
    assert "|Pn:X" in frame
    assert frame == f"<Hold:1|MPos:{ORIGIN}|Pn:X>\r\n"


def test_overrides_with_spindle_cw(encoder, snapshot, modal, overrides, report_state):
    snapshot.spindle.on = True
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(overrides=True))
    assert "|Ov:100,100,100|A:S" in frame
    assert frame == f"<Idle|MPos:{ORIGIN}|Ov:100,100,100|A:S>\r\n"


def test_machine_position_converted_from_steps(encoder, snapshot, modal, overrides, report_state):
    snapshot.position = np.array([2500, -125, 50], dtype=np.int32)
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask())
    assert frame == "<Idle|MPos:10.000,-0.500,0.200>\r\n"


def test_work_position_subtracts_all_offsets(encoder, snapshot, modal, overrides, report_state):
    snapshot.position = np.array([2500, 0, 0], dtype=np.int32)
    modal.coord_system_offset = np.array([10.0, 0.0, 0.0], dtype=np.float32)
    modal.g92_coord_offset = np.array([0.0, 1.0, 0.0], dtype=np.float32)
    modal.tool_length_offset = np.array([0.0, 0.0, 0.5], dtype=np.float32)
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(position_type=False))
    assert frame == "<Idle|WPos:0.000,-1.000,-0.500>\r\n"


def test_position_in_inches(encoder, snapshot, modal, overrides, report_state):
    snapshot.position = np.array([6350, 0, 0], dtype=np.int32)
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(), inches=True)
    assert frame == "<Idle|MPos:1.0000,0.0000,0.0000>\r\n"


def test_buffer_state(encoder, snapshot, modal, overrides, report_state):
    snapshot.planner_blocks_available = 15
    snapshot.rx_buffer_available = 128
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(buffer_state=True))
    assert frame == f"<Idle|MPos:{ORIGIN}|Bf:15,128>\r\n"


@pytest.mark.parametrize("line_number,expected", [(42, "|Ln:42"), (0, None), (None, None)])
def test_line_number_only_when_positive(encoder, snapshot, modal, overrides, report_state, line_number, expected):
    snapshot.line_number = line_number
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(line_numbers=True))
    if expected:
        assert expected in frame
    else:
        assert "|Ln:" not in frame


def test_feed_only_without_variable_spindle(encoder, snapshot, modal, overrides, report_state):
    snapshot.feed_rate = 600.0
    snapshot.spindle_rpm = 1000.0
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(feed_speed=True))
    assert frame == f"<Idle|MPos:{ORIGIN}|F:600>\r\n"


def test_feed_and_speed_with_variable_spindle(settings, snapshot, modal, overrides, report_state):
    enc = StatusFrameEncoder(settings.steps_per_mm, Capabilities(variable_spindle=True))
    snapshot.feed_rate = 600.0
    snapshot.spindle_rpm = 1000.0
    frame = _encode(enc, snapshot, modal, overrides, report_state, ReportMask(feed_speed=True))
    assert "|FS:600,1000>" in frame


def test_actual_spindle_speed_with_spindle_data(settings, snapshot, modal, overrides, report_state):
    enc = StatusFrameEncoder(settings.steps_per_mm, Capabilities(variable_spindle=True, spindle_data=True))
    snapshot.feed_rate = 600.0
    snapshot.spindle_rpm = 1000.0
    snapshot.actual_spindle_rpm = 998.6
    frame = _encode(enc, snapshot, modal, overrides, report_state, ReportMask(feed_speed=True))
    assert "|FS:600,1000,999>" in frame


def test_pin_letter_precedence(snapshot):
    snapshot.probe_triggered = True
    snapshot.limit_pins = [True, False, True]
    snapshot.control = ControlSignals(feed_hold=True, stop_disable=True, safety_door_ajar=True)
    assert pin_letters(snapshot, 3) == "PXZDHT"


def test_pin_field_omitted_when_nothing_set(encoder, snapshot, modal, overrides, report_state):
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(pin_state=True))
    assert "|Pn:" not in frame


def test_pin_field_for_block_delete_alone(encoder, snapshot, modal, overrides, report_state):
    snapshot.block_delete_enabled = True
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(pin_state=True))
    assert frame == f"<Idle|MPos:{ORIGIN}|Pn:B>\r\n"


def test_wco_then_overrides_on_following_frame(encoder, snapshot, modal, overrides, report_state):
    modal.coord_system_offset = np.array([10.0, 0.0, 0.0], dtype=np.float32)
    mask = ReportMask(work_coord_offset=True, overrides=True)
    first = _encode(encoder, snapshot, modal, overrides, report_state, mask)
    second = _encode(encoder, snapshot, modal, overrides, report_state, mask)
    assert first == f"<Idle|MPos:{ORIGIN}|WCO:10.000,0.000,0.000>\r\n"
    assert second == f"<Idle|MPos:{ORIGIN}|Ov:100,100,100>\r\n"


def test_wco_counter_decrements_between_emissions(encoder, snapshot, modal, overrides, report_state):
    mask = ReportMask(work_coord_offset=True)
    _encode(encoder, snapshot, modal, overrides, report_state, mask)
    counter = report_state.wco_counter
    frame = _encode(encoder, snapshot, modal, overrides, report_state, mask)
    assert "|WCO:" not in frame
    assert report_state.wco_counter == counter - 1


def test_forced_accessory_field_may_be_empty(encoder, snapshot, modal, overrides, report_state):
    report_state.request_overrides(force_accessory=True)
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(overrides=True))
    assert frame == f"<Idle|MPos:{ORIGIN}|Ov:100,100,100|A:>\r\n"


def test_override_values(encoder, snapshot, modal, overrides, report_state):
    overrides.feed = 120
    overrides.rapid = 25
    overrides.spindle = 200
    snapshot.spindle.on = True
    snapshot.spindle.ccw = True
    snapshot.coolant.flood = True
    snapshot.coolant.mist = True
    modal.tool_change = True
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(overrides=True))
    assert "|Ov:120,25,200|A:CFMT>" in frame


def test_tool_change_reported_when_overrides_masked(encoder, snapshot, modal, overrides, report_state):
    modal.tool_change = True
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask())
    assert frame == f"<Idle|MPos:{ORIGIN}|A:T>\r\n"


def test_tool_change_not_reported_between_override_frames(encoder, snapshot, modal, overrides, report_state):
    modal.tool_change = True
    report_state.ovr_counter = 5
    frame = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask(overrides=True))
    assert "|A:" not in frame


def test_scaling_reported_once(encoder, snapshot, modal, overrides, report_state):
    modal.scaling_mask = 5
    report_state.mark_scaling_changed()
    first = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask())
    second = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask())
    assert first == f"<Idle|MPos:{ORIGIN}|Sc:5>\r\n"
    assert "|Sc:" not in second


def test_mpg_reported_once(encoder, snapshot, modal, overrides, report_state):
    snapshot.mpg_mode = True
    report_state.mark_mpg_changed()
    first = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask())
    second = _encode(encoder, snapshot, modal, overrides, report_state, ReportMask())
    assert first.endswith("|MPG:1>\r\n")
    assert "|MPG:" not in second


def test_field_order_with_everything_enabled(settings, snapshot, modal, overrides, report_state):
    enc = StatusFrameEncoder(settings.steps_per_mm, Capabilities(variable_spindle=True))
    snapshot.state = MachineState.CYCLE
    snapshot.line_number = 7
    snapshot.probe_triggered = True
    report_state.mark_scaling_changed()
    report_state.mark_mpg_changed()
    mask = ReportMask(
        position_type=True, buffer_state=True, line_numbers=True, feed_speed=True,
        pin_state=True, work_coord_offset=True, overrides=True,
    )
    frame = _encode(enc, snapshot, modal, overrides, report_state, mask)
    tokens = ["<Run", "|MPos:", "|Bf:", "|Ln:", "|FS:", "|Pn:", "|WCO:", "|Sc:", "|MPG:", ">\r\n"]
    positions = [frame.index(t) for t in tokens]
    assert positions == sorted(positions)


def test_extension_appended_before_terminator(settings, snapshot, modal, overrides, report_state):
    class Extension:
        def settings_report(self, sink, axis_settings):
            pass

        def realtime_report(self, sink):
            sink.write("|TMC:0")

    enc = StatusFrameEncoder(settings.steps_per_mm, extension=Extension())
    frame = _encode(enc, snapshot, modal, overrides, report_state, ReportMask())
    assert frame == f"<Idle|MPos:{ORIGIN}|TMC:0>\r\n"


@pytest.mark.parametrize("n_axis", [3, 4, 5, 6])
def test_axis_count_drives_value_count(n_axis, modal, overrides, report_state):
    enc = StatusFrameEncoder(np.full((n_axis,), 100.0, dtype=np.float32))
    snap = MachineSnapshot(position=np.full((n_axis,), 100, dtype=np.int32), limit_pins=[False] * n_axis)
    frame = _encode(enc, snap, modal, overrides, report_state, ReportMask())
    values = frame[len("<Idle|MPos:"):-len(">\r\n")]
    assert values.split(",") == ["1.000"] * n_axis


@pytest.mark.parametrize(
    "state,expected",
    [
        (MachineState.IDLE, "Idle"),
        (MachineState.CYCLE, "Run"),
        (MachineState.JOG, "Jog"),
        (MachineState.HOMING, "Home"),
        (MachineState.ALARM, "Alarm"),
        (MachineState.ESTOP, "Alarm"),
        (MachineState.CHECK_MODE, "Check"),
        (MachineState.SLEEP, "Sleep"),
        (MachineState.TOOL_CHANGE, "Tool"),
    ],
)
def test_state_tokens(snapshot, state, expected):
    snapshot.state = state
    assert state_token(snapshot) == expected


def test_door_and_hold_suffixes(snapshot):
    snapshot.state = MachineState.SAFETY_DOOR
    snapshot.parking_state = 1
    assert state_token(snapshot) == "Door:1"
    snapshot.state = MachineState.HOLD
    snapshot.holding_state = HoldState.COMPLETE
    assert state_token(snapshot) == "Hold:0"


def test_accessory_letters_follow_actual_outputs(snapshot):
    modal = ModalState()
    modal.spindle.on = True  # programmed only; not reported
    assert accessory_letters(snapshot, modal) == ""
    snapshot.coolant.mist = True
    assert accessory_letters(snapshot, modal) == "M"
