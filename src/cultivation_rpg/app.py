"""Main application bootstrap — wires storage, systems and the console together."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.toml"


def _load_config(path: Path | None = None) -> dict[str, Any]:
    """Load config.toml; a missing file means all defaults."""
    import tomllib

    config_path = path or DEFAULT_CONFIG_PATH
    if config_path.exists():
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    return {}


def _setup_logging(config: dict[str, Any]) -> None:
    log_cfg = config.get("logging", {})
    log_file = Path(log_cfg.get("file", "saves/cultivation.log"))
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(log_file),
        level=getattr(logging, str(log_cfg.get("level", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class GameApp:
    """Main application class that bootstraps and runs the game."""

    def __init__(self, config_path: Path | None = None):
        self.config = _load_config(config_path)
        _setup_logging(self.config)

        self._db = None
        self._catalog = None
        self._registry = None
        self._dispatcher = None
        self._display = None

    # -- Component initialization (lazy) --

    @property
    def db(self):
        if self._db is None:
            from cultivation_rpg.storage.database import Database

            db_path = self.config.get("database", {}).get("path", "saves/cultivation.db")
            self._db = Database(db_path)
            self._db.initialize()
        return self._db

    @property
    def catalog(self):
        if self._catalog is None:
            from cultivation_rpg.content.catalog import get_catalog

            self._catalog = get_catalog()
        return self._catalog

    @property
    def registry(self):
        if self._registry is None:
            from cultivation_rpg.engine.system_registry import SystemRegistry

            self._registry = SystemRegistry()
            self._registry.register_defaults()
        return self._registry

    @property
    def dispatcher(self):
        if self._dispatcher is None:
            from cultivation_rpg.engine.action_dispatcher import ActionDispatcher

            self._dispatcher = ActionDispatcher(self.registry)
        return self._dispatcher

    @property
    def display(self):
        if self._display is None:
            from cultivation_rpg.cli.display import ConsoleDisplay

            self._display = ConsoleDisplay(self.catalog)
        return self._display

    def _get_repos(self) -> dict[str, Any]:
        from cultivation_rpg.storage.repos import ChatRepo, MarketRepo, PlayerRepo, SectRepo

        return {
            "player": PlayerRepo(self.db),
            "market": MarketRepo(self.db),
            "sect": SectRepo(self.db),
            "chat": ChatRepo(self.db),
        }

    def build_session(self):
        from cultivation_rpg.engine.session import GameSession
        from cultivation_rpg.systems.base import GameContext

        repos = self._get_repos()
        self.registry.inject_all(repos=repos, config=self.config)
        context = GameContext(self.catalog, self.display, config=self.config)
        return GameSession(
            context,
            self.registry,
            self.dispatcher,
            repos,
            chat_history=self.config.get("game", {}).get("chat_history", 50),
        )

    def run(self) -> None:
        """Menu loop until the player quits with Ctrl-C/EOF at the main prompt."""
        session = self.build_session()
        session.start()
        logger.info("Session started")
        try:
            while True:
                choice = self.display.read_choice()
                if choice is None:
                    if self.display.get_modal_input("Quit the game? (yes/no)") == "yes":
                        break
                    session.show_menu()
                    continue
                session.choose(choice)
        finally:
            session.close()
            self.db.close()
            logger.info("Session closed")
