"""Command dispatch and handler functions.

handle_command(state, raw_input) -> list[NarrationEvent] is the main entry
point. It tokenizes, dispatches to a handler, and runs the end-of-turn
defeat check. Handlers mutate state in place and narrate through
state.narrator; no handler raises for anything a player can type.
"""

from collections.abc import Callable

from ..logging import get_logger
from .narration import NarrationEvent, Style
from .state import GameState, Outcome
from .world import Character, Location, find_named, index_named

logger = get_logger(__name__)

GAME_IS_OVER = "The day is over. Go home. (Start a new day to restart.)"
CAFFEINE_GONE = "The ritual caffeine no longer responds to mortals."

HELP_TEXT = (
    "Commands:\n"
    "- look\n"
    "- search\n"
    "- move [location name]\n"
    "- pickup [item name]\n"
    "- inventory\n"
    "- use [item name]\n"
    "- attack [target name]\n"
    "- talk [character name]\n"
    "- help\n"
    "- quit"
)

# Secret "coffee" buff
COFFEE_HEALTH = 20
COFFEE_ATTACK = 3


def describe_location(state: GameState, location: Location | None = None) -> str:
    """Compose the view of a location as seen by the player."""
    location = location or state.location
    message = f"=== {location.name} ===\n{location.description}\n"

    others = location.others(state.player)
    if others:
        message += "\nYou see:\n"
        for character in others:
            message += f" - {character.name} (HP: {character.health})\n"

    if location.items:
        message += "\nOn the desk / floor:\n"
        for item in location.items:
            message += f" - {item.name} [{item.kind}]\n"

    neighbors = state.world.neighbors(location)
    if neighbors:
        message += "\nExits:\n"
        for neighbor in neighbors:
            message += f" - {neighbor.name}\n"

    return message


def get_exits(state: GameState) -> list[tuple[str, str]]:
    """(key, name) of every location reachable from here."""
    return [(loc.key, loc.name) for loc in state.world.neighbors(state.location)]


def get_visible_characters(state: GameState) -> list[str]:
    return [
        f"{c.name} (HP: {c.health})" for c in state.location.others(state.player)
    ]


def get_floor_items(state: GameState) -> list[str]:
    return [f"{item.name} [{item.kind}]" for item in state.location.items]


def get_inventory(state: GameState) -> list[str]:
    return [f"{item.name} ({item.kind})" for item in state.player.inventory]


def _enter_location(state: GameState, location: Location) -> None:
    state.narrator.multiline(describe_location(state, location), Style.SYSTEM)


def _search_location(state: GameState, location: Location) -> None:
    out = state.narrator
    if not location.items:
        out.line("You search around but only find stress and crumbs.")
        return
    names = ", ".join(item.name for item in location.items)
    out.line(f"You search the area and find: {names}", Style.SYSTEM)


def _move(state: GameState, here: Location, target_name: str) -> Location:
    """Find a neighbour by name. Returns ``here`` when there is none."""
    out = state.narrator
    target = find_named(state.world.neighbors(here), target_name)
    if target is None:
        out.line(f'You can\'t go to "{target_name}" from here.', Style.ERROR)
        return here
    out.line(f"You drag yourself to {target.name}...", Style.SYSTEM)
    _enter_location(state, target)
    return target


def _find_other(state: GameState, name: str) -> Character | None:
    """A living occupant of the current location other than the player."""
    player = state.player
    return find_named(
        state.location.occupants,
        name,
        where=lambda c: c is not player and c.is_alive(),
    )


def _end_game(state: GameState, outcome: Outcome) -> None:
    """Finish the day. Runs at most once per game."""
    if state.is_finished:
        return
    state.is_finished = True
    state.outcome = outcome
    out = state.narrator
    out.disable_input()
    out.separator()
    out.line("GAME OVER. Start a new day to play again.", Style.SYSTEM)
    logger.info("game_over", outcome=str(outcome), turns=state.turns)


def _check_for_win(state: GameState, defeated: Character | None = None) -> None:
    """End the game if the boss just fell or the quest item is carried."""
    world = state.world
    if defeated is not None and defeated is world.boss:
        state.narrator.multiline(world.boss_message, Style.SUCCESS)
        _end_game(state, Outcome.WON)
        return

    if any(item is world.quest_item for item in state.player.inventory):
        state.narrator.multiline(world.quest_message, Style.SUCCESS)
        _end_game(state, Outcome.WON)


def _check_defeat(state: GameState) -> None:
    """End the game if the player has run out of health."""
    if state.player.is_alive() or state.is_finished:
        return
    state.narrator.line(
        "Your vision fades... You pass out under your desk.", Style.ERROR,
    )
    _end_game(state, Outcome.LOST)


def _cmd_help(state: GameState, arg: str) -> None:
    state.narrator.multiline(HELP_TEXT, Style.SYSTEM)


def _cmd_look(state: GameState, arg: str) -> None:
    _enter_location(state, state.location)


def _cmd_search(state: GameState, arg: str) -> None:
    _search_location(state, state.location)


def _cmd_pickup(state: GameState, arg: str) -> None:
    """Handle PICKUP/PICK: move an item from the floor into the inventory."""
    out = state.narrator
    if not arg:
        out.line("Pick up what?", Style.ERROR)
        return

    floor = state.location.items
    index = index_named(floor, arg)
    if index < 0:
        out.line(f'There is no "{arg}" here.', Style.ERROR)
        return

    item = floor.pop(index)
    state.player.pick_up_item(item, out)
    _check_for_win(state)


def _cmd_inventory(state: GameState, arg: str) -> None:
    state.player.view_inventory(state.narrator)


def _cmd_use(state: GameState, arg: str) -> None:
    if not arg:
        state.narrator.line("Use what?", Style.ERROR)
        return
    state.player.use_item(arg, state.narrator)
    _check_for_win(state)


def _cmd_attack(state: GameState, arg: str) -> None:
    """Handle ATTACK: the player strikes, then a surviving target strikes back."""
    out = state.narrator
    if not arg:
        out.line("Attack who?", Style.ERROR)
        return

    enemy = _find_other(state, arg)
    if enemy is None:
        out.line(f'No target "{arg}" to attack here.', Style.ERROR)
        return

    player = state.player
    player.attack(enemy, out)
    if not enemy.is_alive():
        out.line(f"{enemy.name} is defeated!", Style.SUCCESS)
        _check_for_win(state, defeated=enemy)
        return

    enemy.attack(player, out)


def _cmd_talk(state: GameState, arg: str) -> None:
    out = state.narrator
    if not arg:
        out.line("Talk to who?", Style.ERROR)
        return

    npc = _find_other(state, arg)
    if npc is None:
        out.line(f'No one named "{arg}" is here to talk to.', Style.ERROR)
        return

    if npc.talk is None:
        out.line(f"{npc.name} has nothing useful to say right now.")
    elif npc.talk.multiline:
        out.multiline(npc.talk.text, npc.talk.style)
    else:
        out.line(npc.talk.text, npc.talk.style)


def _cmd_move(state: GameState, arg: str) -> None:
    """Handle MOVE/GO: walk to a neighbouring location by name."""
    if not arg:
        state.narrator.line("Move where?", Style.ERROR)
        return

    here = state.location
    there = _move(state, here, arg)
    if there is here:
        return
    here.remove_occupant(state.player)
    there.add_occupant(state.player)
    state.current_location = there.key


def _cmd_coffee(state: GameState, arg: str) -> None:
    """Secret buff. Repeatable until the day is over."""
    out = state.narrator
    if state.is_finished:
        out.line(CAFFEINE_GONE, Style.WARNING)
        return

    player = state.player
    player.health += COFFEE_HEALTH
    player.attack_power += COFFEE_ATTACK
    out.multiline(
        "You whisper the forbidden word: 'coffee'.\n"
        "A divine warmth floods your veins. Your eyelids stop twitching.\n"
        "Max focus engaged. You feel UNSTOPPABLE.",
        Style.SUCCESS,
    )
    out.line(
        f"Health is now {player.health}. "
        f"Attack Power is now {player.attack_power}.",
        Style.SUCCESS,
    )


def _cmd_stats(state: GameState, arg: str) -> None:
    """Hidden debug dump of the session."""
    player = state.player
    if player.inventory:
        inventory = ", ".join(f"{it.name} [{it.kind}]" for it in player.inventory)
    else:
        inventory = "(empty)"
    state.narrator.multiline(
        "=== DEBUG STATS ===\n"
        f"Location: {state.location.name}\n"
        f"Health: {player.health}\n"
        f"Attack Power: {player.attack_power}\n"
        f"Inventory: {inventory}\n"
        f"Game Over: {str(state.is_finished).lower()}\n"
        "(shh... you're not supposed to see this)",
        Style.WARNING,
    )


def _cmd_quit(state: GameState, arg: str) -> None:
    state.narrator.line(
        "You close the laptop. You accept your fate. "
        "You will answer emails tomorrow.",
        Style.WARNING,
    )
    _end_game(state, Outcome.QUIT)


_VERB_DISPATCH: dict[str, Callable[[GameState, str], None]] = {
    "help": _cmd_help,
    "look": _cmd_look,
    "search": _cmd_search,
    **dict.fromkeys(("pickup", "pick"), _cmd_pickup),
    "inventory": _cmd_inventory,
    "use": _cmd_use,
    "attack": _cmd_attack,
    "talk": _cmd_talk,
    **dict.fromkeys(("move", "go"), _cmd_move),
    "coffee": _cmd_coffee,
    "stats": _cmd_stats,
    **dict.fromkeys(("quit", "exit"), _cmd_quit),
}


def start_game(state: GameState) -> list[NarrationEvent]:
    """Narrate the intro, the starting location and the command list."""
    out = state.narrator
    mark = len(out.events)
    if state.world.intro:
        out.multiline(state.world.intro + "\n", Style.SYSTEM)
    _enter_location(state, state.location)
    _cmd_help(state, "")
    return out.since(mark)


def handle_command(state: GameState, raw_input: str) -> list[NarrationEvent]:
    """Process one line of input and return the narration it produced."""
    out = state.narrator
    mark = len(out.events)
    text = raw_input.strip()
    words = text.split()
    verb = words[0].lower() if words else ""

    if state.is_finished:
        if verb == "coffee":
            _cmd_coffee(state, "")
        else:
            out.line(GAME_IS_OVER, Style.ERROR)
        return out.since(mark)

    if not text:
        return []

    out.line(f"> {text}", Style.INPUT_ECHO)
    state.turns += 1

    handler = _VERB_DISPATCH.get(verb)
    if handler is None:
        out.line(
            "I don't understand that command. Type 'help' for options.",
            Style.ERROR,
        )
    else:
        handler(state, " ".join(words[1:]))

    _check_defeat(state)
    logger.debug(
        "command_handled",
        verb=verb,
        turns=state.turns,
        location=state.current_location,
        finished=state.is_finished,
    )
    return out.since(mark)
