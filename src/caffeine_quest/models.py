"""Database models for Caffeine Quest.

Only players and the outcome of finished days are stored. A day in
progress lives in memory and is gone after a restart.
"""

import datetime as dt

from sqlmodel import Field, SQLModel


def _now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class Player(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    fingerprint: str = Field(unique=True, index=True)
    created_at: dt.datetime = Field(default_factory=_now)
    last_seen: dt.datetime = Field(default_factory=_now)


class GameRecord(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    player_id: int = Field(foreign_key="player.id", index=True)
    outcome: str  # engine.state.Outcome value
    turns: int = 0
    finished_at: dt.datetime = Field(default_factory=_now)
