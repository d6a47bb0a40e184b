"""
Serial transport implementation for the report output.

The reporter only ever writes towards the host, so this side of the link is
write-only: report text goes out as ASCII, nothing is read back here.
"""

import logging
import time
from typing import Optional

import serial

from grblreport import config as cfg
from grblreport.config import TRACE
from grblreport.utils.errors import TransportError

logger = logging.getLogger(__name__)


class SerialTransport:
    """
    OutputSink over a pyserial port.

    Writes made while the port is closed are counted and dropped; the
    caller decides when to call auto_reconnect(). Reconnect attempts back
    off from RECONNECT_MIN_S up to RECONNECT_MAX_S while the port stays
    unavailable.
    """

    RECONNECT_MIN_S = 0.5
    RECONNECT_MAX_S = 8.0

    def __init__(
        self,
        port: Optional[str] = None,
        baudrate: int = cfg.SERIAL_BAUD,
        write_timeout: Optional[float] = 1.0,
    ):
        """
        Args:
            port: Device name, e.g. '/dev/ttyACM0' or 'COM3'
            baudrate: Line speed towards the host
            write_timeout: Seconds a blocked write may wait (None blocks forever)
        """
        self.port = port
        self.baudrate = baudrate
        self.write_timeout = write_timeout
        self.serial: Optional[serial.Serial] = None

        self._next_attempt = 0.0
        self._backoff = self.RECONNECT_MIN_S
        self._tx_bytes = 0
        self._dropped_writes = 0

    def _open(self) -> serial.Serial:
        try:
            return serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                write_timeout=self.write_timeout,
            )
        except ValueError as e:
            # pyserial validates baud rate and timeouts before touching the port
            raise TransportError(f"Invalid serial parameters for {self.port}: {e}") from e

    def connect(self, port: Optional[str] = None) -> bool:
        """
        Open the port, closing any previous handle first.

        Returns:
            True once the port is open

        Raises:
            TransportError: If pyserial rejects the port settings
        """
        self.port = port or self.port
        if not self.port:
            logger.warning("SerialTransport.connect called without a port")
            return False

        self.disconnect()
        try:
            handle = self._open()
        except serial.SerialException as e:
            logger.error(f"Cannot open {self.port}: {e}")
            return False

        if not handle.is_open:
            logger.error(f"{self.port} did not open")
            return False

        self.serial = handle
        self._backoff = self.RECONNECT_MIN_S
        logger.info(f"Report output on {self.port} @ {self.baudrate} baud")
        return True

    def disconnect(self) -> None:
        handle, self.serial = self.serial, None
        if handle is None:
            return
        try:
            if handle.is_open:
                handle.close()
            logger.info(f"Closed {self.port}")
        except serial.SerialException as e:
            logger.error(f"Closing {self.port} failed: {e}")

    def is_connected(self) -> bool:
        return self.serial is not None and self.serial.is_open

    def auto_reconnect(self) -> bool:
        """
        Try to reopen a lost port, at most once per backoff period.

        Returns:
            True if the port is open after the call
        """
        if self.is_connected():
            return True
        now = time.monotonic()
        if now < self._next_attempt or not self.port:
            return False

        logger.info(f"Reconnecting to {self.port} (backoff {self._backoff:.1f}s)")
        ok = self.connect()
        if not ok:
            self._next_attempt = now + self._backoff
            self._backoff = min(self._backoff * 2, self.RECONNECT_MAX_S)
        return ok

    def write(self, text: str) -> None:
        """
        Write report text to the host.

        There is no retry: a failed write closes the port and the text is
        lost.
        """
        handle = self.serial
        if handle is None or not handle.is_open:
            self._dropped_writes += 1
            if self._dropped_writes == 1 or self._dropped_writes % 100 == 0:
                logger.warning(f"Serial not connected, dropped {self._dropped_writes} writes")
            return
        data = text.encode("ascii", errors="replace")
        try:
            handle.write(data)
        except serial.SerialException as e:
            logger.error(f"Write to {self.port} failed: {e}")
            self.disconnect()
            return
        self._tx_bytes += len(data)
        logger.log(TRACE, "serial_tx bytes=%d", len(data))

    def delay_ms(self, ms: int) -> None:
        """Drain pending output, then block for ms milliseconds."""
        handle = self.serial
        if handle is not None and handle.is_open:
            try:
                handle.flush()
            except serial.SerialException as e:
                logger.error(f"Flush of {self.port} failed: {e}")
        time.sleep(ms / 1000.0)

    def get_info(self) -> dict:
        return {
            "port": self.port,
            "baudrate": self.baudrate,
            "connected": self.is_connected(),
            "tx_bytes": self._tx_bytes,
            "dropped_writes": self._dropped_writes,
        }
