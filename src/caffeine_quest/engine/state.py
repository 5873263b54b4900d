"""Mutable per-player game state.

One GameState is one day at the office: its own World instance, the player's
current location, and the narration produced so far. Nothing here is
persisted; a new day starts from freshly built world data.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .loader import build_world
from .narration import Narrator
from .world import Character, Location, World


class Outcome(StrEnum):
    WON = "won"
    LOST = "lost"
    QUIT = "quit"


@dataclass
class GameState:
    """All mutable state of one playthrough."""

    world: World
    current_location: str
    narrator: Narrator = field(default_factory=Narrator)
    turns: int = 0
    is_finished: bool = False
    outcome: Outcome | None = None

    @property
    def player(self) -> Character:
        return self.world.player

    @property
    def location(self) -> Location:
        return self.world.location(self.current_location)


def new_game_state(world_data: dict[str, Any]) -> GameState:
    """Create a fresh game with everything in its starting place."""
    world = build_world(world_data)
    return GameState(world=world, current_location=world.start)
