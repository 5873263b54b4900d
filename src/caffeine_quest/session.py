"""Session layer bridging the game engine, the player registry and the database."""

import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any

from sqlmodel import Session

from .engine.commands import (
    get_exits,
    get_floor_items,
    get_inventory,
    get_visible_characters,
    handle_command,
    start_game,
)
from .engine.narration import NarrationEvent
from .engine.state import GameState, new_game_state
from .logging import get_logger
from .models import Player
from .records import record_game

logger = get_logger(__name__)


def render_narration(events: list[NarrationEvent]) -> str:
    """Flatten narration events into text, one paragraph per event."""
    return "\n\n".join(event.text.rstrip("\n") for event in events)


@dataclass
class Day:
    """One player's game in progress. Hold ``lock`` while touching ``state``."""

    state: GameState
    opening: list[NarrationEvent]
    recorded: bool = False
    needs_record: bool = False
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)


class DayRegistry:
    """In-memory games keyed by certificate fingerprint.

    Days are never written to disk; restarting the server starts everyone over.
    At most ``max_days`` days are kept; the least recently used one is dropped
    first.
    """

    def __init__(self, world_data: dict[str, Any], max_days: int = 1000):
        if max_days < 1:
            raise ValueError("max_days must be at least 1")
        self.world_data = world_data
        self.max_days = max_days
        self._days: OrderedDict[str, Day] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._days)

    def get(self, fingerprint: str) -> Day | None:
        with self._lock:
            day = self._days.get(fingerprint)
            if day is not None:
                self._days.move_to_end(fingerprint)
            return day

    def get_or_start(self, fingerprint: str) -> tuple[Day, bool]:
        """The player's day, starting one if needed; the flag is True for a new day."""
        with self._lock:
            day = self._days.get(fingerprint)
            if day is not None:
                self._days.move_to_end(fingerprint)
                return day, False
            return self._start(fingerprint), True

    def start(self, fingerprint: str) -> Day:
        """Begin a fresh day, replacing any current one."""
        with self._lock:
            return self._start(fingerprint)

    def _start(self, fingerprint: str) -> Day:
        state = new_game_state(self.world_data)
        day = Day(state=state, opening=start_game(state))

        def _mark_finished() -> None:
            day.needs_record = True

        state.narrator.on_disable_input(_mark_finished)
        self._days[fingerprint] = day
        self._days.move_to_end(fingerprint)
        while len(self._days) > self.max_days:
            evicted, _ = self._days.popitem(last=False)
            logger.info("day_evicted", fingerprint=evicted)
        logger.info("new_game_started", fingerprint=fingerprint)
        return day


class OfficeSession:
    """Wraps a Player + their Day for the duration of one request."""

    def __init__(self, db_session: Session, player: Player, day: Day, is_new: bool):
        self.db_session = db_session
        self.player = player
        self.day = day
        self.is_new = is_new

    @classmethod
    def load_or_create(
        cls,
        db_session: Session,
        player: Player,
        registry: DayRegistry,
    ) -> "OfficeSession":
        """Resume the player's day or start one."""
        day, is_new = registry.get_or_start(player.fingerprint)
        return cls(db_session, player, day, is_new)

    @property
    def state(self) -> GameState:
        return self.day.state

    def opening_text(self) -> str:
        return render_narration(self.day.opening)

    def process_command(self, raw_input: str) -> str:
        """Run a command and return its narration as text."""
        with self.day.lock:
            events = handle_command(self.state, raw_input)
            self._record_if_finished()
        return render_narration(events)

    def _record_if_finished(self) -> None:
        if self.day.needs_record and not self.day.recorded:
            record_game(self.db_session, self.player, self.state)
            self.day.recorded = True

    def get_exits(self) -> list[tuple[str, str]]:
        return get_exits(self.state)

    def get_visible_characters(self) -> list[str]:
        return get_visible_characters(self.state)

    def get_floor_items(self) -> list[str]:
        return get_floor_items(self.state)

    def get_inventory(self) -> list[str]:
        return get_inventory(self.state)

    def reset(self, registry: DayRegistry) -> None:
        """Throw the current day away and start a new one."""
        self.day = registry.start(self.player.fingerprint)
        self.is_new = True
        logger.info("game_reset", fingerprint=self.player.fingerprint)
