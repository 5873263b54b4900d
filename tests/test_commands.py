"""Tests for the command interpreter."""

from caffeine_quest.engine.commands import (
    CAFFEINE_GONE,
    GAME_IS_OVER,
    describe_location,
    get_exits,
    get_floor_items,
    get_inventory,
    handle_command,
    start_game,
)
from caffeine_quest.engine.narration import SEPARATOR, Style
from caffeine_quest.engine.state import GameState, Outcome
from caffeine_quest.engine.world import Character, Item, ItemKind


def _texts(events) -> list[str]:
    return [event.text for event in events]


def _run(state: GameState, *commands: str) -> list[str]:
    texts: list[str] = []
    for command in commands:
        texts.extend(_texts(handle_command(state, command)))
    return texts


def test_input_is_echoed_first(state: GameState):
    events = handle_command(state, "  look  ")
    assert events[0].text == "> look"
    assert events[0].style == Style.INPUT_ECHO
    assert state.turns == 1


def test_empty_input_is_ignored(state: GameState):
    assert handle_command(state, "   ") == []
    assert state.turns == 0
    assert state.narrator.events == []


def test_look(state: GameState):
    events = handle_command(state, "LOOK")
    view = events[1]
    assert view.multiline
    assert view.style == Style.SYSTEM
    assert view.text.startswith("=== Open Office ===\nRows of desks.")
    assert " - Intern (Unpaid) (HP: 15)" in view.text
    assert " - Cold Coffee [healing]" in view.text
    assert "Exits:\n - Break Room\n" in view.text
    assert "Exhausted Dev" not in view.text


def test_search(state: GameState):
    assert _run(state, "search")[-1] == "You search the area and find: Cold Coffee"
    _run(state, "pickup cold coffee")
    assert _run(state, "search")[-1] == (
        "You search around but only find stress and crumbs."
    )


def test_help_lists_documented_commands(state: GameState):
    text = _run(state, "help")[-1]
    assert text.startswith("Commands:\n- look")
    assert "coffee" not in text
    assert "stats" not in text


def test_unknown_command(state: GameState):
    events = handle_command(state, "dance wildly")
    assert events[-1].text == (
        "I don't understand that command. Type 'help' for options."
    )
    assert events[-1].style == Style.ERROR


def test_missing_arguments_prompt(state: GameState):
    prompts = {
        "pickup": "Pick up what?",
        "pick": "Pick up what?",
        "use": "Use what?",
        "attack": "Attack who?",
        "talk": "Talk to who?",
        "move": "Move where?",
        "go": "Move where?",
    }
    for verb, prompt in prompts.items():
        assert _run(state, verb)[-1] == prompt
    assert state.current_location == "open-office"


def test_pickup_cold_coffee_and_use_it(state: GameState):
    texts = _run(state, "pickup cold coffee")
    assert "Exhausted Dev picked up Cold Coffee." in texts
    assert state.location.items == []
    assert get_inventory(state) == ["Cold Coffee (healing)"]

    texts = _run(state, "use cold coffee")
    assert state.player.health == 35
    assert state.player.inventory == []
    assert texts[-1] == (
        "Exhausted Dev drinks Cold Coffee and recovers 10 energy! "
        "Health is now 35."
    )


def test_pickup_collapses_extra_spaces_and_case(state: GameState):
    _run(state, "PICK   cold   COFFEE")
    assert [item.name for item in state.player.inventory] == ["Cold Coffee"]


def test_pickup_absent_item(state: GameState):
    assert _run(state, "pickup motivational mug")[-1] == (
        'There is no "motivational mug" here.'
    )
    assert state.player.inventory == []


def test_pickup_conserves_items(state: GameState):
    before = state.world.all_items()
    _run(
        state,
        "pickup cold coffee",
        "go break room",
        "pickup motivational mug",
        "pickup motivational mug",
    )
    after = state.world.all_items()
    assert len(after) == len(before) == 3
    assert {id(item) for item in after} == {id(item) for item in before}
    assert len(state.player.inventory) == 2


def test_inventory(state: GameState):
    assert _run(state, "inventory")[-1] == "Exhausted Dev's inventory is empty."
    _run(state, "pickup cold coffee")
    assert _run(state, "inventory")[-1] == (
        "Exhausted Dev's Inventory:\n1. Cold Coffee (healing)"
    )


def test_move_to_break_room(state: GameState):
    texts = _run(state, "move Break Room")
    assert "You drag yourself to Break Room..." in texts
    assert texts[-1].startswith("=== Break Room ===")
    assert state.current_location == "break-room"
    assert state.player in state.location.occupants
    assert state.player not in state.world.locations["open-office"].occupants


def test_move_nowhere(state: GameState):
    office = state.location
    texts = _run(state, "move nowhere")
    assert texts[-1] == 'You can\'t go to "nowhere" from here.'
    assert state.location is office
    assert state.player in office.occupants
    assert all(
        state.player not in loc.occupants
        for key, loc in state.world.locations.items()
        if key != "open-office"
    )


def test_move_requires_adjacency(state: GameState):
    _run(state, "go server room")
    assert state.current_location == "open-office"


def test_exits_helpers(state: GameState):
    assert get_exits(state) == [("break-room", "Break Room")]
    assert get_floor_items(state) == ["Cold Coffee [healing]"]
    _run(state, "go break room")
    assert get_exits(state) == [
        ("open-office", "Open Office"),
        ("server-room", "Server Room"),
    ]


def test_talk_to_npcs(state: GameState):
    events = handle_command(state, "talk INTERN (UNPAID)")
    assert events[-1].multiline
    assert events[-1].style == Style.SYSTEM
    assert events[-1].text.startswith("Intern whispers:")

    _run(state, "go break room")
    events = handle_command(state, "talk bitter sales guy")
    assert events[-1].style == Style.WARNING
    assert "rants about quotas" in events[-1].text


def test_talk_to_nobody(state: GameState):
    assert _run(state, "talk exhausted dev")[-1] == (
        'No one named "exhausted dev" is here to talk to.'
    )
    assert _run(state, "talk bitter sales guy")[-1] == (
        'No one named "bitter sales guy" is here to talk to.'
    )


def test_talk_without_script(state: GameState):
    state.location.add_occupant(Character("Plant", health=1, attack_power=0))
    assert _run(state, "talk plant")[-1] == (
        "Plant has nothing useful to say right now."
    )


def test_talk_changes_nothing(state: GameState):
    intern = state.location.occupants[1]
    _run(state, "talk intern (unpaid)")
    assert intern.health == 15
    assert state.player.health == 25
    assert not state.is_finished


def test_attack_missing_target(state: GameState):
    assert _run(state, "attack espresso demon")[-1] == (
        'No target "espresso demon" to attack here.'
    )


def test_attack_counter_attack(state: GameState):
    _run(state, "go break room")
    texts = _run(state, "attack bitter sales guy")
    assert texts[1:] == [
        "Exhausted Dev attacks Bitter Sales Guy for 4 damage!",
        "Bitter Sales Guy takes 4 damage. Health is now 12.",
        "Bitter Sales Guy attacks Exhausted Dev for 3 damage!",
        "Exhausted Dev takes 3 damage. Health is now 22.",
    ]


def test_defeat_sales_guy(state: GameState):
    _run(state, "move break room")
    sales_guy = state.location.occupants[0]
    for _ in range(3):
        _run(state, "attack bitter sales guy")
    assert sales_guy.health == 4
    assert state.player.health == 16

    texts = _run(state, "attack bitter sales guy")
    assert sales_guy.health == 0
    assert not sales_guy.is_alive()
    assert texts[-1] == "Bitter Sales Guy is defeated!"
    assert state.player.health == 16
    assert not state.is_finished

    assert _run(state, "attack bitter sales guy")[-1] == (
        'No target "bitter sales guy" to attack here.'
    )
    assert "Bitter Sales Guy" not in describe_location(state)


def test_sacred_espresso_wins(state: GameState):
    _run(state, "go break room", "go server room")
    events = handle_command(state, "pickup sacred espresso shot")
    texts = _texts(events)
    assert "YOU WIN." in texts[-3]
    assert texts[-2] == SEPARATOR
    assert texts[-1] == "GAME OVER. Start a new day to play again."
    assert state.is_finished
    assert state.outcome == Outcome.WON
    assert state.narrator.input_disabled

    events = handle_command(state, "look")
    assert _texts(events) == [GAME_IS_OVER]
    assert events[0].style == Style.ERROR
    assert _texts(handle_command(state, "")) == [GAME_IS_OVER]


def test_quest_win_matches_identity_not_name(state: GameState):
    fake = Item("Sacred Espresso Shot", ItemKind.QUEST)
    state.location.items.append(fake)
    _run(state, "pickup sacred espresso shot")
    assert state.player.inventory == [fake]
    assert not state.is_finished


def test_coffee_before_and_after_game_over(state: GameState):
    texts = _run(state, "coffee")
    assert state.player.health == 45
    assert state.player.attack_power == 7
    assert texts[-1] == "Health is now 45. Attack Power is now 7."

    _run(state, "coffee")
    assert (state.player.health, state.player.attack_power) == (65, 10)

    _run(state, "quit")
    events = handle_command(state, "COFFEE")
    assert _texts(events) == [CAFFEINE_GONE]
    assert events[0].style == Style.WARNING
    assert (state.player.health, state.player.attack_power) == (65, 10)


def test_stats(state: GameState):
    _run(state, "pickup cold coffee")
    text = _run(state, "stats")[-1]
    assert text == (
        "=== DEBUG STATS ===\n"
        "Location: Open Office\n"
        "Health: 25\n"
        "Attack Power: 4\n"
        "Inventory: Cold Coffee [healing]\n"
        "Game Over: false\n"
        "(shh... you're not supposed to see this)"
    )


def test_stats_empty_inventory(state: GameState):
    assert "Inventory: (empty)" in _run(state, "stats")[-1]


def test_quit_and_exit(state: GameState):
    texts = _run(state, "exit")
    assert texts[1] == (
        "You close the laptop. You accept your fate. "
        "You will answer emails tomorrow."
    )
    assert state.is_finished
    assert state.outcome == Outcome.QUIT
    assert _run(state, "quit") == [GAME_IS_OVER]


def test_disable_input_fires_once(state: GameState):
    calls: list[bool] = []
    state.narrator.on_disable_input(lambda: calls.append(True))
    _run(state, "quit", "quit", "look", "coffee")
    assert calls == [True]


def test_defeat_by_damage_from_any_source(state: GameState):
    state.player.health = 0
    texts = _run(state, "look")
    assert "Your vision fades... You pass out under your desk." in texts
    assert state.is_finished
    assert state.outcome == Outcome.LOST


def test_start_game(state: GameState):
    events = start_game(state)
    texts = _texts(events)
    assert texts[0].startswith("Welcome to Caffeine Quest.")
    assert texts[1].startswith("=== Open Office ===")
    assert texts[2].startswith("Commands:")
    assert all(event.multiline for event in events)
    assert state.turns == 0
