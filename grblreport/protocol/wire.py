"""
Wire protocol helpers for the Grbl text report format.

This module centralizes number formatting and line framing so every encoder
produces byte-identical output to the legacy firmware.
"""

import logging
from collections.abc import Sequence

import numpy as np

from grblreport import config as cfg

logger = logging.getLogger(__name__)

LINE_END = "\r\n"
FEEDBACK_END = "]\r\n"

__all__ = [
    "LINE_END",
    "FEEDBACK_END",
    "format_uint8",
    "format_uint32",
    "format_float",
    "format_coord",
    "format_rate",
    "format_rpm",
    "axis_values",
    "uint_setting",
    "float_setting",
]

_F100 = np.float32(100.0)
_F10 = np.float32(10.0)
_HALF = np.float32(0.5)


def format_uint8(value: int) -> str:
    """Unsigned 8-bit decimal, wrapping like the firmware's uint8 casts."""
    return str(int(value) & 0xFF)


def format_uint32(value: int) -> str:
    return str(int(value) & 0xFFFFFFFF)


def format_float(value: float, n_decimal: int) -> str:
    """
    Format a float with a fixed number of decimals the way the firmware does.

    The magnitude is scaled in single precision, 0.5 is added and the result
    truncated, so rounding is half-up on the float32 value. The sign is
    written before the magnitude, hence tiny negatives print as ``-0.000``.
    """
    n = np.float32(value)
    if not np.isfinite(n):
        logger.debug(f"format_float: non-finite value {value!r} printed as zero")
        n = np.float32(0.0)
    sign = ""
    if n < 0:
        sign = "-"
        n = -n
    decimals = n_decimal
    while decimals >= 2:
        n = n * _F100
        decimals -= 2
    if decimals:
        n = n * _F10
    n = n + _HALF
    digits = str(int(n) & 0xFFFFFFFF).rjust(n_decimal + 1, "0")
    if n_decimal == 0:
        return sign + digits
    return f"{sign}{digits[:-n_decimal]}.{digits[-n_decimal:]}"


def format_coord(value: float, inches: bool = False) -> str:
    """Position value in mm (3 decimals) or converted to inches (4 decimals)."""
    if inches:
        return format_float(value * cfg.INCH_PER_MM, cfg.N_DECIMAL_COORDVALUE_INCH)
    return format_float(value, cfg.N_DECIMAL_COORDVALUE_MM)


def format_rate(value: float, inches: bool = False) -> str:
    """Feed rate in mm/min (0 decimals) or in/min (1 decimal)."""
    if inches:
        return format_float(value * cfg.INCH_PER_MM, cfg.N_DECIMAL_RATEVALUE_INCH)
    return format_float(value, cfg.N_DECIMAL_RATEVALUE_MM)


def format_rpm(value: float) -> str:
    return format_float(value, cfg.N_DECIMAL_RPMVALUE)


def axis_values(values: Sequence[float] | np.ndarray, inches: bool = False) -> str:
    """
    X,Y,Z[,A,B,C]
    Exactly one value per axis, comma separated, no trailing comma.
    """
    return ",".join(format_coord(v, inches) for v in values)


def uint_setting(setting_id: int, value: int) -> str:
    """$n=value line for an integer setting."""
    return f"${format_uint8(setting_id)}={format_uint32(value)}{LINE_END}"


def float_setting(setting_id: int, value: float, n_decimal: int) -> str:
    """$n=value line for a float setting at the given precision."""
    return f"${format_uint8(setting_id)}={format_float(value, n_decimal)}{LINE_END}"
