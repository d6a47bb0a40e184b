"""
NGC parameters encoder ($#): coordinate systems, G92, tool table, TLO, probe.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from grblreport import config as cfg
from grblreport.protocol import wire
from grblreport.protocol.types import ModalState, OutputSink, SettingsStore, StatusCode
from grblreport.report.messages import report_status_message
from grblreport.report.modal import coord_system_word
from grblreport.utils.errors import SettingReadError

logger = logging.getLogger(__name__)


def coord_label(idx: int) -> str:
    if idx == cfg.SETTING_INDEX_G28:
        return "28"
    if idx == cfg.SETTING_INDEX_G30:
        return "30"
    return coord_system_word(idx)


def report_probe_parameters(
    sink: OutputSink,
    probe_position_mm: Sequence[float] | np.ndarray,
    probe_succeeded: bool,
    inches: bool = False,
) -> None:
    """[PRB:x,y,z:<0|1>] in machine coordinates. Not persistent."""
    sink.write(f"[PRB:{wire.axis_values(probe_position_mm, inches)}:{1 if probe_succeeded else 0}{wire.FEEDBACK_END}")


def report_ngc_parameters(
    sink: OutputSink,
    store: SettingsStore,
    modal: ModalState,
    probe_position_mm: Sequence[float] | np.ndarray,
    probe_succeeded: bool,
    tool_table: Sequence[np.ndarray] | None = None,
    inches: bool = False,
) -> StatusCode:
    """
    Write the parameter block.

    Coordinate data is read slot by slot. A failed read emits
    ``error:7`` and stops: lines already written for earlier slots stay,
    nothing after the failure is written.

    Args:
        tool_table: Offsets for tools 1..n, or None when there is no tool table

    Returns:
        StatusCode.OK, or SETTING_READ_FAIL when the block was aborted (the
        error line has already been written)
    """
    for idx in range(cfg.SETTING_INDEX_NCOORD):
        try:
            coord_data = store.read_coord_data(idx)
        except SettingReadError as e:
            logger.warning(f"Parameter report aborted: {e}")
            report_status_message(sink, StatusCode.SETTING_READ_FAIL)
            return StatusCode.SETTING_READ_FAIL
        sink.write(f"[G{coord_label(idx)}:{wire.axis_values(coord_data, inches)}{wire.FEEDBACK_END}")

    sink.write(f"[G92:{wire.axis_values(modal.g92_coord_offset, inches)}{wire.FEEDBACK_END}")

    if tool_table is not None:
        for tool, offset in enumerate(tool_table, start=1):
            sink.write(f"[T{wire.format_uint8(tool)}:{wire.axis_values(offset, inches)}{wire.FEEDBACK_END}")

    sink.write(f"[TLO:{wire.axis_values(modal.tool_length_offset, inches)}{wire.FEEDBACK_END}")

    report_probe_parameters(sink, probe_position_mm, probe_succeeded, inches)
    return StatusCode.OK
