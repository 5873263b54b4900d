"""Narration events: the only output the engine produces."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

SEPARATOR = "—" * 40


class Style(StrEnum):
    SYSTEM = "system"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INPUT_ECHO = "input-echo"
    PLAIN = "plain"


@dataclass(frozen=True)
class NarrationEvent:
    text: str
    style: Style = Style.PLAIN
    multiline: bool = False


class Narrator:
    """Collects narration events in order and owns the disable-input signal."""

    def __init__(self) -> None:
        self.events: list[NarrationEvent] = []
        self.input_disabled = False
        self._disable_callbacks: list[Callable[[], None]] = []

    def line(self, text: str, style: Style = Style.PLAIN) -> None:
        self.events.append(NarrationEvent(text, style))

    def multiline(self, text: str, style: Style = Style.PLAIN) -> None:
        self.events.append(NarrationEvent(text, style, multiline=True))

    def separator(self) -> None:
        self.line(SEPARATOR, Style.SYSTEM)

    def since(self, mark: int) -> list[NarrationEvent]:
        """Events emitted after the first ``mark`` events."""
        return self.events[mark:]

    def on_disable_input(self, callback: Callable[[], None]) -> None:
        self._disable_callbacks.append(callback)

    def disable_input(self) -> None:
        """Fire the disable-input signal. Only the first call has any effect."""
        if self.input_disabled:
            return
        self.input_disabled = True
        for callback in self._disable_callbacks:
            callback()
