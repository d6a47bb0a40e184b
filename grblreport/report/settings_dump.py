"""
Settings dump encoder ($$).

NOTE: the numbering and order here must correlate with SettingId, since
hosts write settings back by the ids they read.
"""

from __future__ import annotations

import logging

from grblreport import config as cfg
from grblreport.capabilities import Capabilities
from grblreport.protocol import wire
from grblreport.protocol.types import DriverExtension, OutputSink
from grblreport.settings import AxisSetting, Settings, SettingId, axis_setting_id

logger = logging.getLogger(__name__)

_SETTING = cfg.N_DECIMAL_SETTINGVALUE
_RPM = cfg.N_DECIMAL_RPMVALUE


def _general_lines(settings: Settings, caps: Capabilities) -> list[str]:
    s = settings
    uint = wire.uint_setting
    flt = wire.float_setting
    lines = [
        uint(SettingId.PULSE_MICROSECONDS, s.pulse_microseconds),
        uint(SettingId.STEPPER_IDLE_LOCK_TIME, s.stepper_idle_lock_time),
        uint(SettingId.STEP_INVERT_MASK, s.step_invert_mask),
        uint(SettingId.DIR_INVERT_MASK, s.dir_invert_mask),
        uint(SettingId.INVERT_STEPPER_ENABLE, s.stepper_enable_invert_mask),
        uint(SettingId.LIMIT_PINS_INVERT_MASK, s.limit_invert_mask),
        uint(SettingId.INVERT_PROBE_PIN, s.invert_probe_pin),
        uint(SettingId.STATUS_REPORT_MASK, s.status_report.mask),
        flt(SettingId.JUNCTION_DEVIATION, s.junction_deviation, _SETTING),
        flt(SettingId.ARC_TOLERANCE, s.arc_tolerance, _SETTING),
        uint(SettingId.REPORT_INCHES, s.report_inches),
        uint(SettingId.CONTROL_INVERT_MASK, s.control_invert_mask),
        uint(SettingId.COOLANT_INVERT_MASK, s.coolant_invert_mask),
        uint(SettingId.SPINDLE_INVERT_MASK, s.spindle_invert_mask),
        uint(SettingId.CONTROL_PULLUP_DISABLE_MASK, s.control_disable_pullup_mask),
        uint(SettingId.LIMIT_PULLUP_DISABLE_MASK, s.limit_disable_pullup_mask),
        uint(SettingId.PROBE_PULLUP_DISABLE, s.disable_probe_pullup),
        uint(SettingId.SOFT_LIMITS_ENABLE, s.soft_limit_enable),
        uint(SettingId.HARD_LIMITS_ENABLE, s.hard_limit_enable),
        uint(SettingId.HOMING_ENABLE, s.homing_enable),
        uint(SettingId.HOMING_DIR_MASK, s.homing_dir_mask),
        flt(SettingId.HOMING_FEED_RATE, s.homing_feed_rate, _SETTING),
        flt(SettingId.HOMING_SEEK_RATE, s.homing_seek_rate, _SETTING),
        uint(SettingId.HOMING_DEBOUNCE_DELAY, s.homing_debounce_delay),
        flt(SettingId.HOMING_PULLOFF, s.homing_pulloff, _SETTING),
        flt(SettingId.G73_RETRACT, s.g73_retract, _SETTING),
        uint(SettingId.PULSE_DELAY_MICROSECONDS, s.pulse_delay_microseconds),
        flt(SettingId.RPM_MAX, s.rpm_max, _RPM),
        flt(SettingId.RPM_MIN, s.rpm_min, _RPM),
        # Laser mode is meaningless without a variable spindle
        uint(SettingId.LASER_MODE, s.laser_mode if caps.variable_spindle else 0),
        flt(SettingId.PWM_FREQ, s.spindle_pwm_freq, _SETTING),
        flt(SettingId.PWM_OFF_VALUE, s.spindle_pwm_off_value, _SETTING),
        flt(SettingId.PWM_MIN_VALUE, s.spindle_pwm_min_value, _SETTING),
        flt(SettingId.PWM_MAX_VALUE, s.spindle_pwm_max_value, _SETTING),
        uint(SettingId.STEPPER_DEENERGIZE_MASK, s.stepper_deenergize_mask),
    ]
    if caps.spindle_sync:
        lines += [
            uint(SettingId.SPINDLE_PPR, s.spindle_ppr),
            flt(SettingId.SPINDLE_P_GAIN, s.spindle_p_gain, _SETTING),
            flt(SettingId.SPINDLE_I_GAIN, s.spindle_i_gain, _SETTING),
            flt(SettingId.SPINDLE_D_GAIN, s.spindle_d_gain, _SETTING),
        ]
    lines.append(uint(SettingId.HOMING_LOCATE_CYCLES, s.homing_locate_cycles))
    for idx in range(s.n_axis):
        cycle = s.homing_cycle[idx] if idx < len(s.homing_cycle) else 0
        lines.append(uint(SettingId.HOMING_CYCLE_1 + idx, cycle))
    return lines


def _axis_value(settings: Settings, category: AxisSetting, idx: int) -> float:
    if category == AxisSetting.STEPS_PER_MM:
        return float(settings.steps_per_mm[idx])
    if category == AxisSetting.MAX_RATE:
        return float(settings.max_rate[idx])
    if category == AxisSetting.ACCELERATION:
        # Stored in mm/min^2, shown in mm/sec^2
        return float(settings.acceleration[idx]) / (60.0 * 60.0)
    if category == AxisSetting.MAX_TRAVEL:
        # Stored negative
        return -float(settings.max_travel[idx])
    return float(settings.current[idx])


def axis_categories(caps: Capabilities) -> tuple[AxisSetting, ...]:
    """Per-axis categories present in this build, in dump order."""
    if caps.axis_current:
        return tuple(AxisSetting)
    return tuple(c for c in AxisSetting if c != AxisSetting.STEPPER_CURRENT)


def report_grbl_settings(
    sink: OutputSink,
    settings: Settings,
    capabilities: Capabilities | None = None,
    extension: DriverExtension | None = None,
) -> None:
    """
    Write every persisted setting as ``$n=value`` lines in ascending id order.

    The driver extension is called after the general block and again after
    the axis block, so driver specific settings land next to their group.
    """
    caps = capabilities or Capabilities()
    for line in _general_lines(settings, caps):
        sink.write(line)

    if extension is not None:
        extension.settings_report(sink, False)

    for category in axis_categories(caps):
        for idx in range(settings.n_axis):
            sink.write(wire.float_setting(
                axis_setting_id(category, idx),
                _axis_value(settings, category, idx),
                _SETTING,
            ))

    if extension is not None:
        extension.settings_report(sink, True)

    logger.debug(f"Settings dump written for {settings.n_axis} axes")
