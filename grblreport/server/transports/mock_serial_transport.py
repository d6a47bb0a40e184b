"""
In-memory report sink used by the simulator and the tests.

Everything the encoders write is kept in order so it can be inspected as
raw text or as CRLF lines. Alarm delays are recorded and only slept when
asked to.
"""

import logging
import time

logger = logging.getLogger(__name__)


class MockSerialTransport:
    """
    Drop-in replacement for SerialTransport that captures output.

    Use ``getvalue()`` for the raw text and ``lines()`` for the complete
    lines written so far.
    """

    def __init__(self, port: str | None = None, baudrate: int = 115200, sleep: bool = False, **_ignored):
        """
        Args:
            port: Name reported by get_info(); no device is opened
            baudrate: Reported by get_info() only
            sleep: Really sleep in delay_ms() instead of just recording it
        """
        self.port = port or "MOCK_SERIAL"
        self.baudrate = baudrate
        self._sleep = sleep

        self._chunks: list[str] = []
        self.delays: list[int] = []
        self._open = False
        self._writes = 0

        logger.debug(f"Capturing report output in memory as {self.port}")

    def connect(self, port: str | None = None) -> bool:
        self.port = port or self.port
        self._open = True
        return True

    def disconnect(self) -> None:
        self._open = False

    def is_connected(self) -> bool:
        return self._open

    def auto_reconnect(self) -> bool:
        return self.connect()

    def write(self, text: str) -> None:
        self._chunks.append(text)
        self._writes += 1

    def delay_ms(self, ms: int) -> None:
        self.delays.append(ms)
        if self._sleep:
            time.sleep(ms / 1000.0)

    # ---- inspection helpers ----

    def getvalue(self) -> str:
        return "".join(self._chunks)

    def lines(self) -> list[str]:
        """Complete CRLF-terminated lines written so far, without terminators."""
        return self.getvalue().split("\r\n")[:-1]

    def clear(self) -> None:
        self._chunks.clear()
        self.delays.clear()

    @property
    def write_count(self) -> int:
        return self._writes

    def get_info(self) -> dict:
        return {
            "port": self.port,
            "baudrate": self.baudrate,
            "connected": self._open,
            "tx_bytes": len(self.getvalue()),
            "dropped_writes": 0,
        }
