"""
grblreport Python Package

Grbl/grblHAL compatible report generation: status frames, acknowledgments,
alarms, feedback messages and the `$` query blocks, written to a serial
port or an in-memory sink.

Key components:
- Reporter: Facade binding sink, machine state, settings and capabilities
- StatusFrameEncoder: Builds `<...>` realtime status frames
- ReportState: Cross-frame refresh counters and one-shot flags
- Capabilities: Runtime driver/build options
- Settings: Persisted `$` settings snapshot
- dispatch_line: Answers query lines (`?`, `$$`, `$#`, `$G`, `$I`, `$N`, `$`)
"""

from ._version import __version__
from .capabilities import Capabilities
from .report.refresh import ReportState
from .report.status import StatusFrameEncoder
from .server.command_registry import dispatch_line
from .server.reporter import Reporter
from .server.transports import MockSerialTransport, SerialTransport, create_transport
from .settings import Settings

__all__ = [
    "__version__",
    "Capabilities",
    "Settings",
    "ReportState",
    "StatusFrameEncoder",
    "Reporter",
    "dispatch_line",
    "SerialTransport",
    "MockSerialTransport",
    "create_transport",
]
