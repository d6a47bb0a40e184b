"""
Spindle sync PID log dump ([PID:...]).

Only available when the spindle sync capability is present; the samples are
collected by the spindle controller and handed over as a finished log.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from grblreport import config as cfg
from grblreport.protocol import wire
from grblreport.protocol.types import OutputSink


@dataclass
class PidLog:
    setpoint: float = 0.0
    t_sample: float = 0.0
    target: list[float] = field(default_factory=list)
    actual: list[float] = field(default_factory=list)


def format_pid_log(log: PidLog) -> str:
    """
    [PID:<setpoint>,<t_sample>,2|t0,a0,t1,a1,...]
    2 is the number of values per sample.
    """
    n = cfg.N_DECIMAL_PIDVALUE
    samples = ",".join(
        f"{wire.format_float(t, n)},{wire.format_float(a, n)}"
        for t, a in zip(log.target, log.actual)
    )
    return (
        f"[PID:{wire.format_float(log.setpoint, n)},{wire.format_float(log.t_sample, n)},2|"
        f"{samples}{wire.FEEDBACK_END}"
    )


def report_pid_log(sink: OutputSink, log: PidLog) -> None:
    sink.write(format_pid_log(log))
