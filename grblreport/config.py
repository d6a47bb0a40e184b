"""
Central configuration for grblreport tunables and shared constants.
"""

import logging
import os

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")
# Add Logger.trace if missing
if not hasattr(logging.Logger, "trace"):

    def _trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    logging.Logger.trace = _trace  # type: ignore[attr-defined]
    logging.TRACE = TRACE  # type: ignore[attr-defined]

TRACE_ENABLED = str(os.getenv("GRBLREPORT_TRACE", "0")).lower() in ("1", "true", "yes", "on")

logger = logging.getLogger(__name__)

# Firmware identification printed by the build info and welcome lines
GRBL_VERSION: str = "1.1f"
GRBL_VERSION_BUILD: str = "20180906"
HAL_INFO_DEFAULT: str = "HAL"

# Machine geometry (3..6 axes)
AXIS_LETTERS: str = "XYZABC"


def _parse_n_axis() -> int:
    raw = os.getenv("GRBLREPORT_N_AXIS")
    if not raw:
        return 3
    try:
        n = int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid GRBLREPORT_N_AXIS={raw!r}")
        return 3
    if not 1 <= n <= len(AXIS_LETTERS):
        logger.warning(f"GRBLREPORT_N_AXIS={n} out of range, using 3")
        return 3
    return n


N_AXIS: int = _parse_n_axis()


def _env_number(name: str, default, cast=int):
    """Read a numeric env var, falling back to default when it is malformed."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


# Buffers reported by Bf: and [OPT:]
BLOCK_BUFFER_SIZE: int = _env_number("GRBLREPORT_BLOCK_BUFFER_SIZE", 36)
RX_BUFFER_SIZE: int = _env_number("GRBLREPORT_RX_BUFFER_SIZE", 1024)

# Coordinate data slots: G54..G59, G59.1..G59.3, then G28 and G30
N_COORDINATE_SYSTEM: int = 9
SETTING_INDEX_G28: int = N_COORDINATE_SYSTEM
SETTING_INDEX_G30: int = N_COORDINATE_SYSTEM + 1
SETTING_INDEX_NCOORD: int = N_COORDINATE_SYSTEM + 2

# Decimal places per value category
N_DECIMAL_COORDVALUE_MM: int = 3
N_DECIMAL_COORDVALUE_INCH: int = 4
N_DECIMAL_RATEVALUE_MM: int = 0
N_DECIMAL_RATEVALUE_INCH: int = 1
N_DECIMAL_SETTINGVALUE: int = 3
N_DECIMAL_RPMVALUE: int = 0
N_DECIMAL_PIDVALUE: int = 3
INCH_PER_MM: float = 0.0393701

# Status report refresh intervals, counted in frames
REPORT_OVR_REFRESH_BUSY_COUNT: int = 20
REPORT_OVR_REFRESH_IDLE_COUNT: int = 10
REPORT_WCO_REFRESH_BUSY_COUNT: int = 30
REPORT_WCO_REFRESH_IDLE_COUNT: int = 10

# Delay after an ALARM line so it clears the serial buffer before output stops
ALARM_DELAY_MS: int = 500

# Axis setting layout: $100.. steps/mm, $110.. max rate, $120.. accel, ...
AXIS_SETTINGS_BASE: int = 100
AXIS_SETTINGS_INCREMENT: int = 10

# Serial/runtime defaults (overridable by env/CLI in the simulator)
SERIAL_BAUD: int = _env_number("GRBLREPORT_BAUD", 115200)
SERIAL_PORT: str = os.getenv("GRBLREPORT_SERIAL", "")
STATUS_RATE_HZ: float = _env_number("GRBLREPORT_STATUS_RATE_HZ", 10.0, float)
LOG_LEVEL_DEFAULT: str = os.getenv("GRBLREPORT_LOG_LEVEL", "WARNING").upper()


def _env_bool_optional(name: str) -> bool | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    s = raw.strip().lower()
    if s in ("1", "true", "yes", "on"):
        return True
    if s in ("0", "false", "no", "off"):
        return False
    return None


def env_capability_names() -> list[str]:
    """
    Capability option names listed in GRBLREPORT_CAPS (comma separated).

    Returns:
        List of stripped, lower-cased option names (may be empty)
    """
    raw = os.getenv("GRBLREPORT_CAPS", "")
    return [p.strip().lower() for p in raw.split(",") if p.strip()]
