"""
Report encoders for the Grbl text protocol.

Each encoder writes through an OutputSink; only StatusFrameEncoder keeps
state between calls, and that state lives in an explicit ReportState.
"""

from .build_info import report_build_info
from .diagnostics import PidLog, report_pid_log
from .messages import (
    report_alarm_message,
    report_echo_line_received,
    report_execute_startup_message,
    report_feedback_message,
    report_grbl_help,
    report_init_message,
    report_startup_line,
    report_status_message,
)
from .modal import report_gcode_modes
from .parameters import report_ngc_parameters, report_probe_parameters
from .refresh import RefreshIntervals, RefreshScheduler, ReportState
from .settings_dump import report_grbl_settings
from .status import StatusFrameEncoder

__all__ = [
    "StatusFrameEncoder",
    "RefreshScheduler",
    "RefreshIntervals",
    "ReportState",
    "PidLog",
    "report_status_message",
    "report_alarm_message",
    "report_feedback_message",
    "report_init_message",
    "report_grbl_help",
    "report_startup_line",
    "report_execute_startup_message",
    "report_echo_line_received",
    "report_grbl_settings",
    "report_gcode_modes",
    "report_ngc_parameters",
    "report_probe_parameters",
    "report_build_info",
    "report_pid_log",
]
