"""
Acknowledgment, alarm and feedback message encoders.

Every executed input line is answered by exactly one ``ok`` or
``error:<n>`` line, in execution order. Alarms and feedback messages are
asynchronous and never replace that acknowledgment.
"""

import logging

from grblreport import config as cfg
from grblreport.protocol import wire
from grblreport.protocol.types import MessageCode, OutputSink, StatusCode

logger = logging.getLogger(__name__)

FEEDBACK_MESSAGES: dict[int, str] = {
    MessageCode.CRITICAL_EVENT: "Reset to continue",
    MessageCode.ALARM_LOCK: "'$H'|'$X' to unlock",
    MessageCode.ALARM_UNLOCK: "Caution: Unlocked",
    MessageCode.ENABLED: "Enabled",
    MessageCode.DISABLED: "Disabled",
    MessageCode.SAFETY_DOOR_AJAR: "Check Door",
    MessageCode.CHECK_LIMITS: "Check Limits",
    MessageCode.PROGRAM_END: "Pgm End",
    MessageCode.RESTORE_DEFAULTS: "Restoring defaults",
    MessageCode.SPINDLE_RESTORE: "Restoring spindle",
    MessageCode.SLEEP_MODE: "Sleeping",
    MessageCode.ESTOP: "Emergency stop",
}

HELP_TEXT = "$$ $# $G $I $N $x=val $Nx=line $J=line $SLP $C $X $H $B ~ ! ? ctrl-x"


def format_status_message(status_code: int) -> str:
    """ok / error:<n> line for one executed input line."""
    if int(status_code) == StatusCode.OK:
        return "ok" + wire.LINE_END
    return f"error:{wire.format_uint8(status_code)}{wire.LINE_END}"


def report_status_message(sink: OutputSink, status_code: int) -> None:
    sink.write(format_status_message(status_code))


def report_alarm_message(sink: OutputSink, alarm_code: int) -> None:
    """
    ALARM:<n> followed by a fixed delay.

    The delay lets the line drain from the serial buffer before the alarm
    state transition can suspend output. It is the only blocking call in
    the reporting layer.
    """
    sink.write(f"ALARM:{wire.format_uint8(alarm_code)}{wire.LINE_END}")
    logger.warning(f"Alarm {int(alarm_code)} reported")
    sink.delay_ms(cfg.ALARM_DELAY_MS)


def feedback_text(message_code: int) -> str:
    """Catalog text for a message code, empty for unknown codes."""
    return FEEDBACK_MESSAGES.get(int(message_code), "")


def report_feedback_message(sink: OutputSink, message_code: int) -> None:
    sink.write(f"[MSG:{feedback_text(message_code)}{wire.FEEDBACK_END}")


def report_init_message(sink: OutputSink) -> None:
    sink.write(f"{wire.LINE_END}GrblHAL {cfg.GRBL_VERSION} ['$' for help]{wire.LINE_END}")


def report_grbl_help(sink: OutputSink) -> None:
    sink.write(f"[HLP:{HELP_TEXT}{wire.FEEDBACK_END}")


def report_startup_line(sink: OutputSink, n: int, line: str) -> None:
    """$N<n>=<line> echo of a stored startup block."""
    sink.write(f"$N{wire.format_uint8(n)}={line}{wire.LINE_END}")


def report_execute_startup_message(sink: OutputSink, line: str, status_code: int) -> None:
    """><line>:ok|error:<n> after running a startup block."""
    sink.write(f">{line}:")
    report_status_message(sink, status_code)


def report_echo_line_received(sink: OutputSink, line: str) -> None:
    sink.write(f"[echo: {line}{wire.FEEDBACK_END}")
