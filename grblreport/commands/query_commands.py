"""
Query commands that return report blocks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from grblreport.commands.base import QueryCommand
from grblreport.protocol.types import StatusCode
from grblreport.server.command_registry import register_command

if TYPE_CHECKING:
    from grblreport.server.reporter import Reporter


@register_command("?")
class StatusReportCommand(QueryCommand):
    """Realtime status poll; answered by one frame, never acknowledged."""
    __slots__ = ()
    realtime = True

    def execute(self, reporter: Reporter) -> StatusCode | None:
        reporter.realtime_status()
        return None


@register_command("$")
class HelpCommand(QueryCommand):
    __slots__ = ()

    def execute(self, reporter: Reporter) -> StatusCode | None:
        reporter.help_message()
        return StatusCode.OK


@register_command("$$")
class SettingsCommand(QueryCommand):
    """Dump every persisted setting."""
    __slots__ = ()

    def execute(self, reporter: Reporter) -> StatusCode | None:
        reporter.settings_report()
        return StatusCode.OK


@register_command("$#")
class ParametersCommand(QueryCommand):
    """Coordinate systems, offsets and the last probe result."""
    __slots__ = ()

    def execute(self, reporter: Reporter) -> StatusCode | None:
        status = reporter.ngc_parameters()
        # A read failure has already been acknowledged with error:7
        return StatusCode.OK if status == StatusCode.OK else None


@register_command("$G")
class GcodeModesCommand(QueryCommand):
    __slots__ = ()

    def execute(self, reporter: Reporter) -> StatusCode | None:
        reporter.gcode_modes()
        return StatusCode.OK


@register_command("$I")
class BuildInfoCommand(QueryCommand):
    __slots__ = ()

    def execute(self, reporter: Reporter) -> StatusCode | None:
        reporter.build_info()
        return StatusCode.OK


@register_command("$N")
class StartupLinesCommand(QueryCommand):
    __slots__ = ()

    def execute(self, reporter: Reporter) -> StatusCode | None:
        reporter.startup_line_report()
        return StatusCode.OK
