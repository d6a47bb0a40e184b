"""
Transport modules for grblreport.

This package provides the OutputSink implementations the reporter writes
through: a real serial port and an in-memory mock.
"""

from .mock_serial_transport import MockSerialTransport
from .serial_transport import SerialTransport
from .transport_factory import create_and_connect_transport, create_transport, is_simulation_mode

__all__ = [
    "SerialTransport",
    "MockSerialTransport",
    "create_transport",
    "create_and_connect_transport",
    "is_simulation_mode",
]
