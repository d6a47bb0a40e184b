"""
Pytest configuration and shared fixtures for the grblreport tests.

Provides markers, an in-memory output sink, default settings and machine
snapshots, a simulated machine and a reporter wired to all of them.
"""

import logging
import os
import sys

import numpy as np
import pytest

# Add the parent directory to Python path so we can import the package
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from grblreport.capabilities import Capabilities
from grblreport.protocol.types import MachineSnapshot, ModalState, OverrideState, ReportMask
from grblreport.report.refresh import ReportState
from grblreport.server.reporter import Reporter
from grblreport.server.simulation import SimulatedMachine
from grblreport.server.transports import MockSerialTransport
from grblreport.settings import Settings

logger = logging.getLogger(__name__)

N_AXIS = 3


# ============================================================================
# SINK AND STATE FIXTURES
# ============================================================================

@pytest.fixture
def sink() -> MockSerialTransport:
    """Connected in-memory transport collecting every written report."""
    transport = MockSerialTransport()
    transport.connect()
    return transport


@pytest.fixture
def settings() -> Settings:
    """Default 3-axis settings with every status field switched off."""
    s = Settings(
        steps_per_mm=np.full((N_AXIS,), 250.0, dtype=np.float32),
        max_rate=np.full((N_AXIS,), 500.0, dtype=np.float32),
        acceleration=np.full((N_AXIS,), 36000.0, dtype=np.float32),
        max_travel=np.full((N_AXIS,), -200.0, dtype=np.float32),
        current=np.full((N_AXIS,), 500.0, dtype=np.float32),
        homing_cycle=[4, 3, 0],
    )
    s.status_report = ReportMask(position_type=True)
    return s


@pytest.fixture
def snapshot() -> MachineSnapshot:
    """Idle machine at the origin."""
    return MachineSnapshot(
        position=np.zeros((N_AXIS,), dtype=np.int32),
        limit_pins=[False] * N_AXIS,
        probe_position=np.zeros((N_AXIS,), dtype=np.int32),
    )


@pytest.fixture
def modal() -> ModalState:
    return ModalState(
        coord_system_offset=np.zeros((N_AXIS,), dtype=np.float32),
        g92_coord_offset=np.zeros((N_AXIS,), dtype=np.float32),
        tool_length_offset=np.zeros((N_AXIS,), dtype=np.float32),
    )


@pytest.fixture
def overrides() -> OverrideState:
    return OverrideState()


@pytest.fixture
def report_state() -> ReportState:
    return ReportState()


@pytest.fixture
def machine() -> SimulatedMachine:
    """Simulated 3-axis machine, idle at the origin."""
    m = SimulatedMachine(n_axis=N_AXIS, steps_per_mm=250.0)
    m.state.position = np.zeros((N_AXIS,), dtype=np.int32)
    m.state.probe_position = np.zeros((N_AXIS,), dtype=np.int32)
    m.state.limit_pins = [False] * N_AXIS
    m.modal_state.coord_system_offset = np.zeros((N_AXIS,), dtype=np.float32)
    m.modal_state.g92_coord_offset = np.zeros((N_AXIS,), dtype=np.float32)
    m.modal_state.tool_length_offset = np.zeros((N_AXIS,), dtype=np.float32)
    return m


@pytest.fixture
def capabilities() -> Capabilities:
    return Capabilities()


@pytest.fixture
def reporter(sink, machine, settings, capabilities) -> Reporter:
    """Reporter writing to the mock sink, backed by the simulated machine."""
    return Reporter(sink, machine, machine, settings=settings, capabilities=capabilities)


# ============================================================================
# PYTEST CONFIGURATION HOOKS
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual encoders in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that drive the reporter through query dispatch"
    )


def pytest_collection_modifyitems(config, items):
    """Mark tests by directory so -m unit / -m integration select them."""
    for item in items:
        path = str(item.fspath)
        if f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)
        elif f"{os.sep}integration{os.sep}" in path:
            item.add_marker(pytest.mark.integration)
