"""Player identities and finished-day records."""

import datetime as dt
from collections import Counter

from sqlmodel import Session, select

from .engine.state import GameState
from .logging import get_logger
from .models import GameRecord, Player

logger = get_logger(__name__)


def get_or_create_player(session: Session, fingerprint: str) -> Player:
    """Get existing player or create new one from certificate fingerprint."""
    player = session.exec(
        select(Player).where(Player.fingerprint == fingerprint)
    ).first()

    if player:
        player.last_seen = dt.datetime.now(dt.UTC)
        logger.debug("player_accessed", fingerprint=fingerprint)
    else:
        player = Player(fingerprint=fingerprint)
        session.add(player)
        logger.info("player_created", fingerprint=fingerprint)

    session.commit()
    session.refresh(player)
    return player


def record_game(session: Session, player: Player, state: GameState) -> GameRecord:
    """Store the outcome of a finished day."""
    if not state.is_finished or state.outcome is None:
        raise ValueError("only finished games can be recorded")
    record = GameRecord(
        player_id=player.id,
        outcome=str(state.outcome),
        turns=state.turns,
    )
    session.add(record)
    session.commit()
    logger.info(
        "game_recorded",
        fingerprint=player.fingerprint,
        outcome=record.outcome,
        turns=record.turns,
    )
    return record


def get_tally(session: Session, player: Player) -> Counter[str]:
    """Count finished days by outcome."""
    outcomes = session.exec(
        select(GameRecord.outcome).where(GameRecord.player_id == player.id)
    ).all()
    return Counter(outcomes)
