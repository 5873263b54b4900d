"""Shared test fixtures for Caffeine Quest."""

from pathlib import Path
from typing import Any

import pytest
from sqlmodel import Session, SQLModel, create_engine

from caffeine_quest.app import _get_data_path, create_app
from caffeine_quest.config import Config
from caffeine_quest.engine.loader import load_world_data
from caffeine_quest.engine.state import GameState, new_game_state
from caffeine_quest.models import Player


@pytest.fixture(scope="session")
def world_data() -> dict[str, Any]:
    return load_world_data(_get_data_path())


@pytest.fixture
def state(world_data: dict[str, Any]) -> GameState:
    return new_game_state(world_data)


@pytest.fixture
def db_engine(tmp_path: Path):
    db_url = f"sqlite:///{tmp_path}/test.db"
    engine = create_engine(db_url)
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def test_player(db_session: Session) -> Player:
    player = Player(fingerprint="test-fingerprint-abc123")
    db_session.add(player)
    db_session.commit()
    db_session.refresh(player)
    return player


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    return Config(database_url=f"sqlite:///{tmp_path}/test.db")


@pytest.fixture
def app(test_config: Config):
    return create_app(test_config)


@pytest.fixture
def client(app):
    from xitzin.testing import test_app

    with test_app(app) as client:
        yield client


@pytest.fixture
def auth_client(client):
    return client.with_certificate("test-fingerprint-abc123")
