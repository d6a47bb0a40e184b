"""
Runtime capability table.

Replaces compile time build options and driver capability bits with one
dataclass of named flags. Options are addressed by their field name, e.g.
``Capabilities.from_options(["variable_spindle", "mist_control"])``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Iterable

from grblreport import config as cfg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capabilities:
    # Driver capabilities
    variable_spindle: bool = False
    mist_control: bool = False
    software_debounce: bool = False
    spindle_sync: bool = False
    spindle_data: bool = False
    manual_tool_change: bool = False
    axis_current: bool = False

    # Build options
    corexy: bool = False
    parking: bool = False
    homing_force_set_origin: bool = False
    homing_single_axis_commands: bool = False
    limits_two_switches_on_axes: bool = False
    allow_feed_override_during_probe: bool = False
    spindle_enable_off_with_zero_speed: bool = False
    parking_override_control: bool = False
    homing_init_lock: bool = True
    safety_door_input_pin: bool = False
    restore_eeprom_wipe_all: bool = True
    restore_eeprom_default_settings: bool = True
    restore_eeprom_clear_parameters: bool = True
    build_info_write_command: bool = True
    force_buffer_sync_during_wco_change: bool = True

    # Tool table size; 0 means no tool table
    n_tools: int = 0

    @property
    def tool_table(self) -> bool:
        return self.n_tools > 0

    @classmethod
    def option_names(cls) -> list[str]:
        """Names of all recognized boolean options."""
        return [f.name for f in fields(cls) if f.type in ("bool", bool)]

    @classmethod
    def from_options(cls, names: Iterable[str], n_tools: int = 0) -> Capabilities:
        """
        Build a capability table enabling the named options.

        A name prefixed with ``no_`` disables an option that defaults to on.

        Raises:
            ValueError: If a name is not a recognized option
        """
        known = set(cls.option_names())
        values: dict[str, bool] = {}
        for raw in names:
            name = raw.strip().lower()
            if not name:
                continue
            enabled = True
            if name not in known and name.startswith("no_"):
                name = name[3:]
                enabled = False
            if name not in known:
                raise ValueError(f"Unknown capability option: {raw!r}")
            values[name] = enabled
        return cls(n_tools=n_tools, **values)

    @classmethod
    def from_env(cls) -> Capabilities:
        """Capabilities listed in GRBLREPORT_CAPS, tool count from GRBLREPORT_N_TOOLS."""
        names = cfg.env_capability_names()
        try:
            n_tools = int(os.getenv("GRBLREPORT_N_TOOLS", "0"))
        except ValueError:
            n_tools = 0
        caps = cls.from_options(names, n_tools=n_tools)
        logger.debug(f"Capabilities from environment: {names} n_tools={n_tools}")
        return caps

    def with_options(self, **changes) -> Capabilities:
        return replace(self, **changes)
