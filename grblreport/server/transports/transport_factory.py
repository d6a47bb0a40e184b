"""
Picks the report sink: a real serial port, or the in-memory mock when
GRBLREPORT_FAKE_SERIAL is set.
"""

import logging
from typing import Optional, Union

from grblreport import config as cfg
from grblreport.server.transports.mock_serial_transport import MockSerialTransport
from grblreport.server.transports.serial_transport import SerialTransport
from grblreport.utils.errors import TransportError

logger = logging.getLogger(__name__)

Transport = Union[SerialTransport, MockSerialTransport]

_TRANSPORTS = {
    "serial": SerialTransport,
    "mock": MockSerialTransport,
}


def is_simulation_mode() -> bool:
    """True when GRBLREPORT_FAKE_SERIAL asks for the in-memory sink."""
    return bool(cfg._env_bool_optional("GRBLREPORT_FAKE_SERIAL"))


def create_transport(
    transport_type: Optional[str] = None,
    port: Optional[str] = None,
    baudrate: int = cfg.SERIAL_BAUD,
    **kwargs,
) -> Transport:
    """
    Build an unconnected transport.

    Args:
        transport_type: 'serial' or 'mock'; None chooses from the environment
        port: Device name for the serial transport
        baudrate: Line speed
        **kwargs: Passed through to the transport constructor

    Raises:
        ValueError: For an unknown transport type
    """
    if transport_type is None:
        transport_type = "mock" if is_simulation_mode() else "serial"
    try:
        cls = _TRANSPORTS[transport_type]
    except KeyError:
        raise ValueError(f"Unknown transport type: {transport_type}") from None
    logger.info(f"Report transport: {transport_type} port={port}")
    return cls(port=port, baudrate=baudrate, **kwargs)


def create_and_connect_transport(
    transport_type: Optional[str] = None,
    port: Optional[str] = None,
    baudrate: int = cfg.SERIAL_BAUD,
    **kwargs,
) -> Optional[Transport]:
    """
    Build a transport and open it.

    The serial port falls back to GRBLREPORT_SERIAL when none is given.

    Returns:
        The open transport, or None if it could not be opened
        or pyserial rejected the port settings
    """
    if transport_type is None and is_simulation_mode():
        transport_type = "mock"
    if transport_type != "mock":
        port = port or cfg.SERIAL_PORT or None

    transport = create_transport(transport_type, port=port, baudrate=baudrate, **kwargs)
    try:
        if transport.connect():
            return transport
    except TransportError as e:
        logger.error(f"Report transport rejected: {e}")
        return None
    logger.warning(f"Could not open report transport on {port}")
    return None
