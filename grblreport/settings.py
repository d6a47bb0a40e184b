"""
Persisted settings table as seen by the reporting layer.

Numbering must correlate with the ``$n=`` ids the host uses to write
settings back, so SettingId values are part of the wire contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

from grblreport import config as cfg
from grblreport.protocol.types import ReportMask


class SettingId(IntEnum):
    PULSE_MICROSECONDS = 0
    STEPPER_IDLE_LOCK_TIME = 1
    STEP_INVERT_MASK = 2
    DIR_INVERT_MASK = 3
    INVERT_STEPPER_ENABLE = 4
    LIMIT_PINS_INVERT_MASK = 5
    INVERT_PROBE_PIN = 6
    STATUS_REPORT_MASK = 10
    JUNCTION_DEVIATION = 11
    ARC_TOLERANCE = 12
    REPORT_INCHES = 13
    CONTROL_INVERT_MASK = 14
    COOLANT_INVERT_MASK = 15
    SPINDLE_INVERT_MASK = 16
    CONTROL_PULLUP_DISABLE_MASK = 17
    LIMIT_PULLUP_DISABLE_MASK = 18
    PROBE_PULLUP_DISABLE = 19
    SOFT_LIMITS_ENABLE = 20
    HARD_LIMITS_ENABLE = 21
    HOMING_ENABLE = 22
    HOMING_DIR_MASK = 23
    HOMING_FEED_RATE = 24
    HOMING_SEEK_RATE = 25
    HOMING_DEBOUNCE_DELAY = 26
    HOMING_PULLOFF = 27
    G73_RETRACT = 28
    PULSE_DELAY_MICROSECONDS = 29
    RPM_MAX = 30
    RPM_MIN = 31
    LASER_MODE = 32
    PWM_FREQ = 33
    PWM_OFF_VALUE = 34
    PWM_MIN_VALUE = 35
    PWM_MAX_VALUE = 36
    STEPPER_DEENERGIZE_MASK = 37
    SPINDLE_PPR = 38
    SPINDLE_P_GAIN = 39
    SPINDLE_I_GAIN = 40
    SPINDLE_D_GAIN = 41
    HOMING_LOCATE_CYCLES = 43
    HOMING_CYCLE_1 = 44
    AXIS_SETTINGS_BASE = cfg.AXIS_SETTINGS_BASE


class AxisSetting(IntEnum):
    """Per-axis setting categories, in dump order."""
    STEPS_PER_MM = 0
    MAX_RATE = 1
    ACCELERATION = 2
    MAX_TRAVEL = 3
    STEPPER_CURRENT = 4


def axis_setting_id(category: int, axis: int) -> int:
    """Return the ``$n`` id of a per-axis setting."""
    return cfg.AXIS_SETTINGS_BASE + cfg.AXIS_SETTINGS_INCREMENT * int(category) + axis


def _axis_array(value: float):
    return lambda: np.full((cfg.N_AXIS,), value, dtype=np.float32)


@dataclass
class Settings:
    """
    Snapshot of the persisted settings.

    Axis arrays hold internal units: acceleration in mm/min^2 and max travel
    as a negative distance.
    """
    pulse_microseconds: int = 10
    stepper_idle_lock_time: int = 25
    step_invert_mask: int = 0
    dir_invert_mask: int = 0
    stepper_enable_invert_mask: int = 0
    limit_invert_mask: int = 0
    invert_probe_pin: bool = False
    status_report: ReportMask = field(default_factory=lambda: ReportMask(position_type=True, buffer_state=True))
    junction_deviation: float = 0.01
    arc_tolerance: float = 0.002
    report_inches: bool = False
    control_invert_mask: int = 0
    coolant_invert_mask: int = 0
    spindle_invert_mask: int = 0
    control_disable_pullup_mask: int = 0
    limit_disable_pullup_mask: int = 0
    disable_probe_pullup: bool = False
    soft_limit_enable: bool = False
    hard_limit_enable: bool = False
    homing_enable: bool = False
    homing_dir_mask: int = 0
    homing_feed_rate: float = 25.0
    homing_seek_rate: float = 500.0
    homing_debounce_delay: int = 250
    homing_pulloff: float = 1.0
    g73_retract: float = 0.1
    pulse_delay_microseconds: int = 0
    rpm_max: float = 1000.0
    rpm_min: float = 0.0
    laser_mode: bool = False
    spindle_pwm_freq: float = 5000.0
    spindle_pwm_off_value: float = 0.0
    spindle_pwm_min_value: float = 0.0
    spindle_pwm_max_value: float = 100.0
    stepper_deenergize_mask: int = 0
    spindle_ppr: int = 0
    spindle_p_gain: float = 1.0
    spindle_i_gain: float = 0.01
    spindle_d_gain: float = 0.0
    homing_locate_cycles: int = 1
    homing_cycle: list[int] = field(default_factory=lambda: ([4, 3] + [0] * cfg.N_AXIS)[:cfg.N_AXIS])

    steps_per_mm: np.ndarray = field(default_factory=_axis_array(250.0))
    max_rate: np.ndarray = field(default_factory=_axis_array(500.0))
    acceleration: np.ndarray = field(default_factory=_axis_array(10.0 * 60 * 60))
    max_travel: np.ndarray = field(default_factory=_axis_array(-200.0))
    current: np.ndarray = field(default_factory=_axis_array(500.0))

    @property
    def n_axis(self) -> int:
        return len(self.steps_per_mm)
