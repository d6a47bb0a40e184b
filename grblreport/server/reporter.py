"""
Reporter facade.

Binds the output sink, the machine state provider, the settings store, the
capability table and the cross-frame ReportState, and exposes one method per
report. This is what the command loop and the status poll call into.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

import numpy as np

from grblreport.capabilities import Capabilities
from grblreport.config import TRACE
from grblreport.protocol.types import (
    DriverExtension,
    MachineStateProvider,
    OutputSink,
    SettingsStore,
    StatusCode,
)
from grblreport.report import build_info, diagnostics, messages, modal, parameters, settings_dump
from grblreport.report.refresh import DEFAULT_INTERVALS, RefreshIntervals, ReportState
from grblreport.report.status import StatusFrameEncoder
from grblreport.settings import Settings

logger = logging.getLogger(__name__)


class Reporter:
    """
    One reporter per host connection.

    The ReportState is owned here and mutated only by realtime_status() and
    the request/mark helpers. Calls are serialized with an RLock so a poll
    thread and the command loop can share the reporter; each call runs to
    completion.
    """

    def __init__(
        self,
        sink: OutputSink,
        provider: MachineStateProvider,
        store: SettingsStore,
        settings: Settings | None = None,
        capabilities: Capabilities | None = None,
        extension: DriverExtension | None = None,
        intervals: RefreshIntervals = DEFAULT_INTERVALS,
        build_info_line: str = "",
        startup_lines: Sequence[str] = ("", ""),
        hal_info: str | None = None,
    ) -> None:
        self.sink = sink
        self.provider = provider
        self.store = store
        self.settings = settings or Settings()
        self.capabilities = capabilities or Capabilities()
        self.extension = extension
        self.build_info_line = build_info_line
        self.startup_lines = list(startup_lines)
        self.hal_info = hal_info
        self.report_state = ReportState()

        self._intervals = intervals
        self._lock = threading.RLock()
        self._status = StatusFrameEncoder(
            self.settings.steps_per_mm, self.capabilities, intervals, extension
        )
        logger.info(
            f"Reporter ready: axes={self.settings.n_axis} sink={type(sink).__name__} "
            f"status_mask={self.settings.status_report.mask}"
        )

    @property
    def inches(self) -> bool:
        return self.settings.report_inches

    def update_settings(self, settings: Settings) -> None:
        """Swap the settings snapshot (e.g. after a $x=val write)."""
        with self._lock:
            self.settings = settings
            self._status = StatusFrameEncoder(
                settings.steps_per_mm, self.capabilities, self._intervals, self.extension
            )
            # Offsets may be shown in different units now
            self.report_state.request_wco()

    # ---- acknowledgments and messages ----

    def status_message(self, status_code: int) -> None:
        with self._lock:
            messages.report_status_message(self.sink, status_code)
            logger.log(TRACE, "ack status=%d", int(status_code))

    def alarm_message(self, alarm_code: int) -> None:
        with self._lock:
            messages.report_alarm_message(self.sink, alarm_code)

    def feedback_message(self, message_code: int) -> None:
        with self._lock:
            messages.report_feedback_message(self.sink, message_code)

    def init_message(self) -> None:
        with self._lock:
            messages.report_init_message(self.sink)

    def help_message(self) -> None:
        with self._lock:
            messages.report_grbl_help(self.sink)

    def echo_line_received(self, line: str) -> None:
        with self._lock:
            messages.report_echo_line_received(self.sink, line)

    def startup_line_report(self) -> None:
        """$N: echo every stored startup block."""
        with self._lock:
            for n, line in enumerate(self.startup_lines):
                messages.report_startup_line(self.sink, n, line)

    def execute_startup_message(self, line: str, status_code: int) -> None:
        with self._lock:
            messages.report_execute_startup_message(self.sink, line, status_code)

    # ---- query reports ----

    def realtime_status(self) -> None:
        """Write exactly one status frame."""
        with self._lock:
            self._status.encode(
                self.sink,
                self.provider.snapshot(),
                self.settings.status_report,
                self.provider.modal(),
                self.provider.overrides(),
                self.report_state,
                inches=self.inches,
            )

    def settings_report(self) -> None:
        with self._lock:
            settings_dump.report_grbl_settings(self.sink, self.settings, self.capabilities, self.extension)

    def gcode_modes(self) -> None:
        with self._lock:
            modal.report_gcode_modes(self.sink, self.provider.modal(), self.capabilities, self.inches)

    def ngc_parameters(self) -> StatusCode:
        """Write the $# block; returns SETTING_READ_FAIL if it was aborted."""
        with self._lock:
            snapshot = self.provider.snapshot()
            tools = None
            if self.capabilities.tool_table:
                n_tools = self.capabilities.n_tools
                tools = list(self.provider.tool_table())[:n_tools]
                # Every configured tool gets a line, unset ones read as zero
                while len(tools) < n_tools:
                    tools.append(np.zeros(self.settings.n_axis, dtype=np.float32))
            return parameters.report_ngc_parameters(
                self.sink,
                self.store,
                self.provider.modal(),
                self._status.steps_to_mpos(snapshot.probe_position),
                snapshot.probe_succeeded,
                tool_table=tools,
                inches=self.inches,
            )

    def probe_parameters(self) -> None:
        """[PRB:] alone, sent after a probe cycle completes."""
        with self._lock:
            snapshot = self.provider.snapshot()
            parameters.report_probe_parameters(
                self.sink,
                self._status.steps_to_mpos(snapshot.probe_position),
                snapshot.probe_succeeded,
                self.inches,
            )

    def build_info(self) -> None:
        with self._lock:
            build_info.report_build_info(
                self.sink,
                self.build_info_line,
                self.capabilities,
                n_axis=self.settings.n_axis,
                hal_info=self.hal_info,
            )

    def pid_log(self, log: diagnostics.PidLog) -> None:
        with self._lock:
            diagnostics.report_pid_log(self.sink, log)

    # ---- refresh state helpers ----

    def request_wco(self) -> None:
        with self._lock:
            self.report_state.request_wco()

    def request_overrides(self, force_accessory: bool = False) -> None:
        with self._lock:
            self.report_state.request_overrides(force_accessory)

    def mark_scaling_changed(self) -> None:
        with self._lock:
            self.report_state.mark_scaling_changed()

    def mark_mpg_changed(self) -> None:
        with self._lock:
            self.report_state.mark_mpg_changed()

    def reset(self) -> None:
        """Soft reset: refresh state back to startup values."""
        with self._lock:
            self.report_state.reset()
            logger.debug("Report state reset")
