"""
Build info encoder ($I).

Hosts parse the [OPT:] letters by position, so the order of _OPTION_LETTERS
is part of the wire contract. Some letters are shown when an option is
disabled.
"""

from __future__ import annotations

from collections.abc import Callable

from grblreport import config as cfg
from grblreport.capabilities import Capabilities
from grblreport.protocol import wire
from grblreport.protocol.types import OutputSink

_OPTION_LETTERS: tuple[tuple[Callable[[Capabilities], bool], str], ...] = (
    (lambda c: c.variable_spindle, "V"),
    (lambda c: True, "N"),  # line numbers
    (lambda c: c.mist_control, "M"),
    (lambda c: c.corexy, "C"),
    (lambda c: c.parking, "P"),
    (lambda c: c.homing_force_set_origin, "Z"),
    (lambda c: c.homing_single_axis_commands, "H"),
    (lambda c: c.limits_two_switches_on_axes, "T"),
    (lambda c: c.allow_feed_override_during_probe, "A"),
    (lambda c: c.spindle_enable_off_with_zero_speed, "0"),
    (lambda c: c.software_debounce, "S"),
    (lambda c: c.parking_override_control, "R"),
    (lambda c: not c.homing_init_lock, "L"),
    (lambda c: c.safety_door_input_pin, "+"),
    (lambda c: not c.restore_eeprom_wipe_all, "*"),
    (lambda c: not c.restore_eeprom_default_settings, "$"),
    (lambda c: not c.restore_eeprom_clear_parameters, "#"),
    (lambda c: not c.build_info_write_command, "I"),
    (lambda c: not c.force_buffer_sync_during_wco_change, "W"),
    (lambda c: c.tool_table, "V"),  # ATC
    (lambda c: not c.tool_table and c.manual_tool_change, "U"),  # M6
)


def option_letters(capabilities: Capabilities) -> str:
    return "".join(letter for pred, letter in _OPTION_LETTERS if pred(capabilities))


def format_build_info(
    line: str,
    capabilities: Capabilities | None = None,
    n_axis: int = cfg.N_AXIS,
    hal_info: str | None = None,
    block_buffer_size: int = cfg.BLOCK_BUFFER_SIZE,
    rx_buffer_size: int = cfg.RX_BUFFER_SIZE,
) -> str:
    caps = capabilities or Capabilities()
    ver = (
        f"[VER:{cfg.GRBL_VERSION}({hal_info or cfg.HAL_INFO_DEFAULT})."
        f"{cfg.GRBL_VERSION_BUILD}:{line}{wire.FEEDBACK_END}"
    )
    params = [
        wire.format_uint8(block_buffer_size - 1),
        wire.format_uint32(rx_buffer_size),
        wire.format_uint8(n_axis),
    ]
    if caps.tool_table:
        params.append(wire.format_uint8(caps.n_tools))
    opt = f"[OPT:{option_letters(caps)},{','.join(params)}{wire.FEEDBACK_END}"
    return ver + opt


def report_build_info(
    sink: OutputSink,
    line: str,
    capabilities: Capabilities | None = None,
    n_axis: int = cfg.N_AXIS,
    hal_info: str | None = None,
) -> None:
    """Write the [VER:] and [OPT:] lines; line is the user build info string."""
    sink.write(format_build_info(line, capabilities, n_axis, hal_info))
