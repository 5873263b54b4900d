"""Parse the world data file (TOML) and build fresh World instances from it.

The file is read once at startup. Every new game calls build_world() on the
parsed data so that no two sessions share a mutable character or location.

Sections:
  [intro]            text shown when a day starts
  [player]           key of the player character
  [[items]]          key, name, kind, magnitude
  [[characters]]     key, name, health, attack_power, optional [talk]
  [[locations]]      key, name, description, characters, items
  connections        list of [location_key, location_key] pairs
  [win]              boss, boss_message, quest_item, quest_message
"""

import tomllib
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

from .narration import Style
from .world import Character, Item, ItemKind, Location, TalkLine, World


class WorldDataError(ValueError):
    """The world data file is malformed or references something undefined."""


def _require(table: dict[str, Any], key: str, where: str) -> Any:
    try:
        return table[key]
    except KeyError:
        raise WorldDataError(f"{where}: missing '{key}'") from None


def _lookup(registry: dict[str, Any], key: str, where: str) -> Any:
    if key not in registry:
        raise WorldDataError(f"{where}: unknown reference '{key}'")
    return registry[key]


def _int(table: dict[str, Any], key: str, default: int, where: str) -> int:
    value = table.get(key, default)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise WorldDataError(f"{where}: '{key}' must be an integer, got {value!r}")


def _parse_item(entry: dict[str, Any]) -> Item:
    name = _require(entry, "name", "item")
    kind = entry.get("kind", ItemKind.INERT)
    try:
        kind = ItemKind(kind)
    except ValueError:
        raise WorldDataError(f"item {name!r}: unknown kind {kind!r}") from None
    magnitude = _int(entry, "magnitude", 0, f"item {name!r}")
    return Item(name=name, kind=kind, magnitude=magnitude)


def _parse_talk(talk: dict[str, Any] | None, where: str) -> TalkLine | None:
    if talk is None:
        return None
    try:
        style = Style(talk.get("style", Style.PLAIN))
    except ValueError:
        raise WorldDataError(f"{where}: unknown talk style") from None
    return TalkLine(
        text=_require(talk, "text", where),
        style=style,
        multiline=bool(talk.get("multiline", False)),
    )


def _parse_character(entry: dict[str, Any]) -> Character:
    name = _require(entry, "name", "character")
    health = _int(entry, "health", 1, f"character {name!r}")
    attack_power = _int(entry, "attack_power", 0, f"character {name!r}")
    if health < 0 or attack_power < 0:
        raise WorldDataError(f"character {name!r}: negative stats")
    return Character(
        name=name,
        health=health,
        attack_power=attack_power,
        talk=_parse_talk(entry.get("talk"), f"character {name!r}"),
    )


def _keyed(entries: list[dict[str, Any]], section: str) -> dict[str, dict[str, Any]]:
    keyed: dict[str, dict[str, Any]] = {}
    for entry in entries:
        key = _require(entry, "key", section)
        if key in keyed:
            raise WorldDataError(f"{section}: duplicate key '{key}'")
        keyed[key] = entry
    return keyed


def build_world(data: dict[str, Any]) -> World:
    """Build a fresh, fully wired World from parsed world data."""
    items = {k: _parse_item(e) for k, e in _keyed(data.get("items", []), "items").items()}
    characters = {
        k: _parse_character(e)
        for k, e in _keyed(data.get("characters", []), "characters").items()
    }

    locations: dict[str, Location] = {}
    placed_items: set[str] = set()
    placed_characters: set[str] = set()
    for key, entry in _keyed(data.get("locations", []), "locations").items():
        location = Location(
            key=key,
            name=_require(entry, "name", f"location {key!r}"),
            description=entry.get("description", "").strip(),
        )
        for char_key in entry.get("characters", []):
            if char_key in placed_characters:
                raise WorldDataError(f"character '{char_key}' placed twice")
            placed_characters.add(char_key)
            location.add_occupant(_lookup(characters, char_key, f"location {key!r}"))
        for item_key in entry.get("items", []):
            if item_key in placed_items:
                raise WorldDataError(f"item '{item_key}' placed twice")
            placed_items.add(item_key)
            location.items.append(_lookup(items, item_key, f"location {key!r}"))
        locations[key] = location

    for pair in data.get("connections", []):
        if len(pair) != 2:
            raise WorldDataError(f"connection {pair!r} must name two locations")
        a, b = (_lookup(locations, key, "connections") for key in pair)
        a.connect(b)

    player_key = _require(_require(data, "player", "world"), "key", "player")
    player = _lookup(characters, player_key, "player")
    if player_key not in placed_characters:
        raise WorldDataError(f"player '{player_key}' is not placed in any location")
    start = next(loc.key for loc in locations.values() if player in loc.occupants)

    win = _require(data, "win", "world")
    return World(
        locations=locations,
        player=player,
        start=start,
        boss=_lookup(characters, _require(win, "boss", "win"), "win"),
        quest_item=_lookup(items, _require(win, "quest_item", "win"), "win"),
        intro=data.get("intro", {}).get("text", "").strip(),
        boss_message=win.get("boss_message", "").strip(),
        quest_message=win.get("quest_message", "").strip(),
    )


def load_world_data(data_path: Path | Traversable) -> dict[str, Any]:
    """Read the world data file and check that it builds."""
    try:
        with data_path.open("rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise WorldDataError(f"{data_path}: {exc}") from exc
    build_world(data)
    return data
