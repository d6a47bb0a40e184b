"""
Base abstractions for system query commands.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from grblreport.protocol.types import StatusCode

if TYPE_CHECKING:
    from grblreport.server.reporter import Reporter


class QueryCommand(ABC):
    """
    A system command answered entirely by the reporting layer.

    execute() writes the report block and returns the status to acknowledge
    the line with, or None when the command already wrote its own ack.
    Realtime commands are never acknowledged.
    """

    __slots__ = ("line",)

    realtime: ClassVar[bool] = False
    _registered_name: ClassVar[str] = ""

    def __init__(self) -> None:
        self.line = ""

    def match(self, line: str) -> bool:
        """Claim the line; subclasses parse arguments here."""
        self.line = line
        return True

    @abstractmethod
    def execute(self, reporter: Reporter) -> StatusCode | None:
        ...
