"""Xitzin application factory for Caffeine Quest."""

from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

from sqlmodel import SQLModel, create_engine
from xitzin import Xitzin

from .config import Config
from .engine.loader import load_world_data
from .logging import get_logger
from .session import DayRegistry

logger = get_logger(__name__)


def _get_data_path() -> Traversable:
    """Locate the packaged office.toml (works when installed in a venv)."""
    return resources.files("caffeine_quest.data").joinpath("office.toml")


def create_app(config: Config | None = None) -> Xitzin:
    """Create and configure the Xitzin application."""
    config = config or Config.from_env()

    app = Xitzin(
        title="Caffeine Quest",
        version="0.1.0",
        templates_dir=Path(__file__).parent / "templates",
    )

    engine = create_engine(config.database_url)
    app.state.engine = engine
    app.state.config = config

    @app.on_startup
    async def startup():
        """Initialize database and load the office."""
        SQLModel.metadata.create_all(engine)
        logger.debug("database_setup_complete")

        data_path = config.world_file or _get_data_path()
        world_data = load_world_data(data_path)
        app.state.days = DayRegistry(world_data, max_days=config.max_days)
        logger.info(
            "world_loaded",
            source=str(data_path),
            locations=len(world_data.get("locations", [])),
            characters=len(world_data.get("characters", [])),
            items=len(world_data.get("items", [])),
        )
        logger.info("startup_complete")

    from .routes import home, play

    home.register_routes(app)
    play.register_routes(app)

    return app
