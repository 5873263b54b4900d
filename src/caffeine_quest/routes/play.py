"""Gameplay routes."""

from contextlib import contextmanager

from sqlmodel import Session
from xitzin import Redirect, Request, Xitzin
from xitzin.auth import get_identity, require_certificate

from ..records import get_or_create_player, get_tally
from ..session import OfficeSession


@contextmanager
def _player_session(request: Request):
    """Yield (db_session, player) for the request's certificate, then close."""
    identity = get_identity(request)
    db_session = Session(request.app.state.engine)
    try:
        yield db_session, get_or_create_player(db_session, identity.fingerprint)
    finally:
        db_session.close()


@contextmanager
def _office_session(request: Request):
    """Load the player's day and hold its lock until the response is rendered."""
    with _player_session(request) as (db_session, player):
        game = OfficeSession.load_or_create(
            db_session, player, request.app.state.days,
        )
        with game.day.lock:
            yield game


def _render_play(app: Xitzin, game: OfficeSession, message: str = ""):
    """Render the main play view."""
    state = game.state
    return app.template(
        "play.gmi",
        location=state.location.name,
        health=state.player.health,
        attack_power=state.player.attack_power,
        characters=game.get_visible_characters(),
        items=game.get_floor_items(),
        exits=game.get_exits(),
        message=message,
        turns=state.turns,
        is_finished=state.is_finished,
        input_disabled=state.narrator.input_disabled,
    )


def _register_action_routes(app: Xitzin) -> None:
    """Register command and movement routes."""

    @app.gemini("/play", name="play")
    @require_certificate
    def play(request: Request):
        """Main game view. A brand new day opens with the intro."""
        with _office_session(request) as game:
            message = game.opening_text() if game.is_new else ""
            return _render_play(app, game, message=message)

    @app.gemini("/go/{key}", name="go")
    @require_certificate
    def go(request: Request, key: str):
        """Movement via clickable exit link."""
        with _office_session(request) as game:
            names = dict(game.get_exits())
            if game.state.is_finished or key not in names:
                message = game.process_command(f"go {key}")
            else:
                message = game.process_command(f"go {names[key]}")
            return _render_play(app, game, message=message)

    @app.input("/cmd", prompt="What do you do?", name="cmd")
    @require_certificate
    def cmd(request: Request, query: str):
        """Freeform command entry."""
        with _office_session(request) as game:
            message = game.process_command(query)
            return _render_play(app, game, message=message)

    @app.gemini("/look", name="look")
    @require_certificate
    def look(request: Request):
        with _office_session(request) as game:
            message = game.process_command("look")
            return _render_play(app, game, message=message)

    @app.gemini("/inventory", name="inventory")
    @require_certificate
    def inventory(request: Request):
        with _office_session(request) as game:
            message = game.process_command("inventory")
            return _render_play(app, game, message=message)


def _register_day_routes(app: Xitzin) -> None:
    """Register the record and new-day routes."""

    @app.gemini("/record", name="record")
    @require_certificate
    def record(request: Request):
        """Show how past days went. Looking does not start a day."""
        with _player_session(request) as (db_session, player):
            tally = get_tally(db_session, player)
            return app.template(
                "record.gmi",
                won=tally["won"],
                lost=tally["lost"],
                quit=tally["quit"],
                total=sum(tally.values()),
            )

    @app.input(
        "/new",
        prompt="Abandon today and start a new day? Type YES to confirm:",
        name="new_game",
    )
    @require_certificate
    def new_game(request: Request, query: str):
        """Reset the day with confirmation."""
        with _office_session(request) as game:
            if query.strip().upper() == "YES":
                game.reset(request.app.state.days)
                with game.day.lock:
                    return _render_play(app, game, message=game.opening_text())
            return Redirect("/play")


def register_routes(app: Xitzin) -> None:
    """Register gameplay routes."""
    _register_action_routes(app)
    _register_day_routes(app)
