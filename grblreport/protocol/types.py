"""
Type definitions for the Grbl reporting protocol.

Defines the enums, dataclasses and collaborator protocols shared by the
encoders, the reporter facade and the transports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Protocol, Sequence, runtime_checkable

import numpy as np

from grblreport import config as cfg


class MachineState(IntEnum):
    """Top level machine state as shown in the status frame."""
    IDLE = 0
    ALARM = 1
    CHECK_MODE = 2
    HOMING = 3
    CYCLE = 4
    HOLD = 5
    JOG = 6
    SAFETY_DOOR = 7
    SLEEP = 8
    ESTOP = 9
    TOOL_CHANGE = 10


# States that use the fast (busy) refresh interval
BUSY_STATES = frozenset({
    MachineState.HOMING,
    MachineState.CYCLE,
    MachineState.HOLD,
    MachineState.JOG,
    MachineState.SAFETY_DOOR,
})


class HoldState(IntEnum):
    """Feed hold sub-state. Displayed as value - 1."""
    NOT_HOLDING = 0
    COMPLETE = 1
    PENDING = 2


class StatusCode(IntEnum):
    """Outcome of executing one input line, reported as ok / error:<n>."""
    OK = 0
    EXPECTED_COMMAND_LETTER = 1
    BAD_NUMBER_FORMAT = 2
    INVALID_STATEMENT = 3
    NEGATIVE_VALUE = 4
    SETTING_DISABLED = 5
    SETTING_STEP_PULSE_MIN = 6
    SETTING_READ_FAIL = 7
    IDLE_ERROR = 8
    SYSTEM_GC_LOCK = 9
    SOFT_LIMIT_ERROR = 10
    OVERFLOW = 11
    MAX_STEP_RATE_EXCEEDED = 12
    CHECK_DOOR = 13
    LINE_LENGTH_EXCEEDED = 14
    TRAVEL_EXCEEDED = 15
    INVALID_JOG_COMMAND = 16
    SETTING_DISABLED_LASER = 17
    GCODE_UNSUPPORTED_COMMAND = 20
    GCODE_MODAL_GROUP_VIOLATION = 21
    GCODE_UNDEFINED_FEED_RATE = 22
    GCODE_COMMAND_VALUE_NOT_INTEGER = 23
    GCODE_AXIS_COMMAND_CONFLICT = 24
    GCODE_WORD_REPEATED = 25
    GCODE_NO_AXIS_WORDS = 26
    GCODE_INVALID_LINE_NUMBER = 27
    GCODE_VALUE_WORD_MISSING = 28
    GCODE_UNSUPPORTED_COORD_SYS = 29
    GCODE_G53_INVALID_MOTION_MODE = 30
    GCODE_AXIS_WORDS_EXIST = 31
    GCODE_NO_AXIS_WORDS_IN_PLANE = 32
    GCODE_INVALID_TARGET = 33
    GCODE_ARC_RADIUS_ERROR = 34
    GCODE_NO_OFFSETS_IN_PLANE = 35
    GCODE_UNUSED_WORDS = 36
    GCODE_G43_DYNAMIC_AXIS_ERROR = 37
    GCODE_MAX_VALUE_EXCEEDED = 38


class AlarmCode(IntEnum):
    HARD_LIMIT = 1
    SOFT_LIMIT = 2
    ABORT_CYCLE = 3
    PROBE_FAIL_INITIAL = 4
    PROBE_FAIL_CONTACT = 5
    HOMING_FAIL_RESET = 6
    HOMING_FAIL_DOOR = 7
    FAIL_PULLOFF = 8
    HOMING_FAIL_APPROACH = 9
    ESTOP = 10
    HOMING_REQUIRED = 11
    LIMITS_ENGAGED = 12
    PROBE_PROTECT = 13
    SPINDLE = 14


class MessageCode(IntEnum):
    CRITICAL_EVENT = 1
    ALARM_LOCK = 2
    ALARM_UNLOCK = 3
    ENABLED = 4
    DISABLED = 5
    SAFETY_DOOR_AJAR = 6
    CHECK_LIMITS = 7
    PROGRAM_END = 8
    RESTORE_DEFAULTS = 9
    SPINDLE_RESTORE = 10
    SLEEP_MODE = 11
    ESTOP = 12


class MotionMode(IntEnum):
    SEEK = 0
    LINEAR = 1
    CW_ARC = 2
    CCW_ARC = 3
    SPINDLE_SYNCHRONIZED = 33
    DRILL_CHIP_BREAK = 73
    NONE = 80
    CANNED_CYCLE_81 = 81
    CANNED_CYCLE_82 = 82
    CANNED_CYCLE_83 = 83
    CANNED_CYCLE_85 = 85
    CANNED_CYCLE_86 = 86
    CANNED_CYCLE_89 = 89
    PROBE_TOWARD = 140
    PROBE_TOWARD_NO_ERROR = 141
    PROBE_AWAY = 142
    PROBE_AWAY_NO_ERROR = 143


class ProgramFlow(IntEnum):
    RUNNING = 0
    OPTIONAL_STOP = 1
    COMPLETED_M2 = 2
    PAUSED = 3
    COMPLETED_M30 = 30


@dataclass
class SpindleState:
    on: bool = False
    ccw: bool = False


@dataclass
class CoolantState:
    flood: bool = False
    mist: bool = False

    @property
    def value(self) -> bool:
        return self.flood or self.mist


@dataclass
class ControlSignals:
    """Control input pins in Pn: letter order."""
    safety_door_ajar: bool = False
    reset: bool = False
    feed_hold: bool = False
    cycle_start: bool = False
    e_stop: bool = False
    block_delete: bool = False
    stop_disable: bool = False

    @property
    def value(self) -> bool:
        return any((
            self.safety_door_ajar, self.reset, self.feed_hold, self.cycle_start,
            self.e_stop, self.block_delete, self.stop_disable,
        ))


@dataclass
class OverrideControl:
    """Override disable flags set by M50/M51/M53/M56."""
    feed_rate_disable: bool = False
    spindle_rpm_disable: bool = False
    feed_hold_disable: bool = False
    parking_disable: bool = False


@dataclass
class OverrideState:
    """Runtime override percentages (0..255)."""
    feed: int = 100
    rapid: int = 100
    spindle: int = 100


def _axis_zeros(dtype=np.float32):
    return lambda: np.zeros((cfg.N_AXIS,), dtype=dtype)


@dataclass
class ReportMask:
    """
    Independent status report switches ($10).

    Bit order of the packed mask follows the field order below.
    """
    position_type: bool = True  # True = MPos, False = WPos
    buffer_state: bool = False
    line_numbers: bool = False
    feed_speed: bool = False
    pin_state: bool = False
    work_coord_offset: bool = False
    overrides: bool = False

    _FIELDS = (
        "position_type", "buffer_state", "line_numbers", "feed_speed",
        "pin_state", "work_coord_offset", "overrides",
    )

    @property
    def mask(self) -> int:
        value = 0
        for bit, name in enumerate(self._FIELDS):
            if getattr(self, name):
                value |= 1 << bit
        return value

    @classmethod
    def from_mask(cls, mask: int) -> ReportMask:
        return cls(**{name: bool(mask & (1 << bit)) for bit, name in enumerate(cls._FIELDS)})


@dataclass
class MachineSnapshot:
    """
    Real-time view of the machine read fresh for every status frame.

    Positions are in steps; conversion to millimetres uses the steps/mm
    settings of the reporter.
    """
    state: MachineState = MachineState.IDLE
    holding_state: int = HoldState.NOT_HOLDING
    parking_state: int = 0

    position: np.ndarray = field(default_factory=_axis_zeros(np.int32))

    # Planner and serial buffer availability
    planner_blocks_available: int = cfg.BLOCK_BUFFER_SIZE - 1
    rx_buffer_available: int = cfg.RX_BUFFER_SIZE
    line_number: int | None = None

    # Realtime feed and spindle
    feed_rate: float = 0.0
    spindle_rpm: float = 0.0
    actual_spindle_rpm: float = 0.0

    # Input pins
    limit_pins: Sequence[bool] = field(default_factory=lambda: [False] * cfg.N_AXIS)
    control: ControlSignals = field(default_factory=ControlSignals)
    probe_triggered: bool = False
    block_delete_enabled: bool = False

    # Actual output state (not the programmed modal state)
    spindle: SpindleState = field(default_factory=SpindleState)
    coolant: CoolantState = field(default_factory=CoolantState)

    mpg_mode: bool = False

    # Last probe cycle
    probe_position: np.ndarray = field(default_factory=_axis_zeros(np.int32))
    probe_succeeded: bool = False


@dataclass
class ModalState:
    """G-code parser modal state plus the offsets it owns."""
    motion: int = MotionMode.SEEK
    coord_system_idx: int = 0
    coord_system_offset: np.ndarray = field(default_factory=_axis_zeros())
    diameter_mode: bool = False
    plane_select: int = 0  # 0=XY (G17), 1=ZX (G18), 2=YZ (G19)
    units: int = 0  # 0=mm (G21), 1=inches (G20)
    distance: int = 0  # 0=absolute (G90), 1=incremental (G91)
    feed_mode: int = 0  # 0=units per minute (G94), 1=inverse time (G93)
    scaling_active: bool = False
    scaling_mask: int = 0
    program_flow: int = ProgramFlow.RUNNING
    spindle: SpindleState = field(default_factory=SpindleState)
    coolant: CoolantState = field(default_factory=CoolantState)
    override_ctrl: OverrideControl = field(default_factory=OverrideControl)
    tool_change: bool = False
    tool: int = 0
    feed_rate: float = 0.0
    spindle_rpm: float = 0.0
    g92_coord_offset: np.ndarray = field(default_factory=_axis_zeros())
    tool_length_offset: np.ndarray = field(default_factory=_axis_zeros())


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------

@runtime_checkable
class OutputSink(Protocol):
    """Blocking text writer towards the host, plus the alarm delay primitive."""

    def write(self, text: str) -> None: ...

    def delay_ms(self, ms: int) -> None: ...


class SettingsStore(Protocol):
    """Indexed read of persisted coordinate data; raises SettingReadError."""

    def read_coord_data(self, index: int) -> np.ndarray: ...


class MachineStateProvider(Protocol):
    """Source of fresh snapshots owned by the motion side of the controller."""

    def snapshot(self) -> MachineSnapshot: ...

    def modal(self) -> ModalState: ...

    def overrides(self) -> OverrideState: ...

    def tool_table(self) -> Sequence[np.ndarray]: ...


class DriverExtension(Protocol):
    """Peripheral driver hook appending its own text to reports."""

    def settings_report(self, sink: OutputSink, axis_settings: bool) -> None: ...

    def realtime_report(self, sink: OutputSink) -> None: ...
