"""
Unit tests for query command registration and lookup.
"""

import pytest
from grblreport.commands.base import QueryCommand
from grblreport.commands.query_commands import GcodeModesCommand, StatusReportCommand
from grblreport.protocol.types import StatusCode
from grblreport.server.command_registry import (
    CommandRegistry,
    create_command,
    get_command_class,
    list_registered_commands,
    register_command,
)


def test_registry_is_singleton():
    assert CommandRegistry() is CommandRegistry()


def test_all_queries_registered():
    assert {"?", "$", "$$", "$#", "$G", "$I", "$N"} <= set(list_registered_commands())


def test_lookup_is_case_insensitive():
    assert get_command_class("$g") is GcodeModesCommand
    assert get_command_class("$G") is GcodeModesCommand


def test_create_command_strips_line():
    cmd = create_command("  $G\r\n")
    assert isinstance(cmd, GcodeModesCommand)
    assert cmd.line == "$G"


@pytest.mark.parametrize("line", ["G0 X1", "$X", "$J=G91X1F100", "", "$N0=G20"])
def test_non_query_lines_not_claimed(line):
    assert create_command(line) is None


def test_realtime_flag():
    assert StatusReportCommand.realtime
    assert not GcodeModesCommand.realtime
    assert StatusReportCommand._registered_name == "?"


def test_duplicate_name_rejected():
    with pytest.raises(ValueError, match="already registered"):
        @register_command("$G")
        class OtherModes(QueryCommand):
            def execute(self, reporter):
                return StatusCode.OK


def test_reregistering_same_class_is_allowed():
    CommandRegistry().register("$G", GcodeModesCommand)
    assert get_command_class("$G") is GcodeModesCommand


def test_decorator_requires_query_command():
    with pytest.raises(TypeError):
        @register_command("$Z")
        class NotACommand:
            pass
