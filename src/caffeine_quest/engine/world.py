"""Data structures for the Caffeine Quest world.

A fresh World is built from the packaged data file for every new game, so
characters and locations can be mutated freely by the session that owns them.
Items and characters compare by identity: two items sharing a name are still
different items.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypeVar

from .narration import Narrator, Style

T = TypeVar("T")


def index_named(
    things: Iterable[T],
    name: str,
    where: Callable[[T], bool] | None = None,
) -> int:
    """Index of the first thing whose name matches ``name`` ignoring case, or -1."""
    wanted = name.lower()
    for i, thing in enumerate(things):
        if thing.name.lower() == wanted and (where is None or where(thing)):
            return i
    return -1


def find_named(
    things: Iterable[T],
    name: str,
    where: Callable[[T], bool] | None = None,
) -> T | None:
    """First thing whose name matches ``name`` ignoring case, or None."""
    things = list(things)
    i = index_named(things, name, where)
    return things[i] if i >= 0 else None


class ItemKind(StrEnum):
    HEALING = "healing"
    WEAPON = "weapon"
    QUEST = "quest"
    INERT = "inert"


@dataclass(frozen=True, eq=False)
class Item:
    """A pickable object."""

    name: str
    kind: ItemKind
    magnitude: int = 0


@dataclass(frozen=True)
class TalkLine:
    """A scripted line a character says when talked to."""

    text: str
    style: Style = Style.PLAIN
    multiline: bool = False


@dataclass(eq=False)
class Character:
    """An actor: the player or an NPC."""

    name: str
    health: int
    attack_power: int
    inventory: list[Item] = field(default_factory=list)
    talk: TalkLine | None = None

    def is_alive(self) -> bool:
        return self.health > 0

    def attack(self, target: "Character", out: Narrator) -> None:
        damage = self.attack_power
        out.line(
            f"{self.name} attacks {target.name} for {damage} damage!",
            Style.WARNING,
        )
        target.take_damage(damage, out)

    def take_damage(self, amount: int, out: Narrator) -> None:
        self.health = max(0, self.health - amount)
        out.line(
            f"{self.name} takes {amount} damage. Health is now {self.health}.",
            Style.ERROR,
        )

    def pick_up_item(self, item: Item, out: Narrator) -> None:
        self.inventory.append(item)
        out.line(f"{self.name} picked up {item.name}.", Style.SUCCESS)

    def view_inventory(self, out: Narrator) -> None:
        if not self.inventory:
            out.line(f"{self.name}'s inventory is empty.")
            return
        lines = "\n".join(
            f"{i}. {item.name} ({item.kind})"
            for i, item in enumerate(self.inventory, start=1)
        )
        out.multiline(f"{self.name}'s Inventory:\n{lines}", Style.SYSTEM)

    def use_item(self, item_name: str, out: Narrator) -> None:
        """Use the first inventory item named ``item_name``.

        Healing items are consumed and restore health. Weapons stay in the
        inventory and raise attack power again on every use.
        """
        index = index_named(self.inventory, item_name)
        if index < 0:
            out.line(f'You don\'t have "{item_name}".', Style.ERROR)
            return

        item = self.inventory[index]
        match item.kind:
            case ItemKind.HEALING:
                self.health += item.magnitude
                del self.inventory[index]
                out.line(
                    f"{self.name} drinks {item.name} and recovers "
                    f"{item.magnitude} energy! Health is now {self.health}.",
                    Style.SUCCESS,
                )
            case ItemKind.WEAPON:
                self.attack_power += item.magnitude
                out.line(
                    f"{self.name} equips {item.name}. "
                    f"Attack power is now {self.attack_power}.",
                    Style.SUCCESS,
                )
            case _:
                out.line(f"{item.name} can't be used right now.", Style.ERROR)


@dataclass
class Location:
    """A room. Neighbours are referenced by key through the World arena."""

    key: str
    name: str
    description: str = ""
    occupants: list[Character] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)
    exits: list[str] = field(default_factory=list)

    def connect(self, other: "Location") -> None:
        """Link both ways. Connecting twice changes nothing."""
        if other.key not in self.exits:
            self.exits.append(other.key)
        if self.key not in other.exits:
            other.exits.append(self.key)

    def add_occupant(self, character: Character) -> None:
        if not any(c is character for c in self.occupants):
            self.occupants.append(character)

    def remove_occupant(self, character: Character) -> None:
        self.occupants = [c for c in self.occupants if c is not character]

    def others(self, viewer: Character) -> list[Character]:
        """Living occupants other than ``viewer``."""
        return [c for c in self.occupants if c is not viewer and c.is_alive()]


@dataclass
class World:
    """Everything one game plays with, wired together."""

    locations: dict[str, Location]
    player: Character
    start: str
    boss: Character
    quest_item: Item
    intro: str = ""
    boss_message: str = ""
    quest_message: str = ""

    def location(self, key: str) -> Location:
        return self.locations[key]

    def neighbors(self, location: Location) -> list[Location]:
        return [self.locations[key] for key in location.exits]

    def all_items(self) -> list[Item]:
        """Every item in every container, floors first."""
        items = [item for loc in self.locations.values() for item in loc.items]
        for loc in self.locations.values():
            for character in loc.occupants:
                items.extend(character.inventory)
        return items
