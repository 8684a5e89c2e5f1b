"""Home directory discovery and configuration.

The home directory holds everything teamkeys keeps on disk:

    <home>/config.yaml      settings
    <home>/db.json          event database
    <home>/teams/           one subdirectory per team
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from teamkeys.exceptions import HomeNotInitializedError

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "TEAMKEYS_HOME"
DEFAULT_HOME = Path("~/.teamkeys")
CONFIG_FILENAME = "config.yaml"
DATABASE_FILENAME = "db.json"
TEAMS_FOLDER = "teams"


class HomeService:
    """Service for locating the home directory and reading its configuration."""

    def __init__(self, home_path: Path | None = None) -> None:
        """Initialize the home service.

        Args:
            home_path: Optional explicit home directory. If not provided, it is
                       discovered from the environment.
        """
        self._home_path = home_path

    @property
    def home_path(self) -> Path:
        """Get the home directory, discovering it if necessary.

        Search order:
        1. Explicit path given to the constructor
        2. TEAMKEYS_HOME environment variable
        3. ~/.teamkeys
        """
        if self._home_path is None:
            env_path = os.environ.get(HOME_ENV_VAR)
            if env_path:
                self._home_path = Path(env_path).expanduser()
            else:
                self._home_path = DEFAULT_HOME.expanduser()
            logger.debug("Using home directory %s", self._home_path)
        return self._home_path

    @property
    def config_path(self) -> Path:
        """Get the config file path."""
        return self.home_path / CONFIG_FILENAME

    @property
    def database_path(self) -> Path:
        """Get the event database path."""
        return self.home_path / DATABASE_FILENAME

    def teams_folder(self) -> Path:
        """Get the folder that holds one subdirectory per team."""
        return self.home_path / TEAMS_FOLDER

    def is_initialized(self) -> bool:
        """Check if the home directory has been set up."""
        return self.teams_folder().is_dir()

    def ensure_initialized(self) -> None:
        """Ensure the home directory is set up.

        Raises:
            HomeNotInitializedError: If ``initialize`` hasn't been run.
        """
        if not self.is_initialized():
            raise HomeNotInitializedError(
                f"teamkeys is not initialized. Run 'teamkeys --home {self.home_path} init'"
            )

    def initialize(self) -> Path:
        """Create the home directory structure and a default config.

        Returns:
            Path to the home directory.
        """
        home = self.home_path
        self.teams_folder().mkdir(parents=True, exist_ok=True)

        if not self.config_path.exists():
            self.set_config({"signing": {"key": None}})

        logger.info("Initialized teamkeys home at %s", home)
        return home

    def get_config(self) -> dict[str, Any]:
        """Read the configuration.

        Returns:
            Configuration dictionary, empty if there is no config file.
        """
        if self.config_path.exists():
            with open(self.config_path, encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        return {}

    def set_config(self, config: dict[str, Any]) -> None:
        """Write the configuration.

        Args:
            config: Configuration dictionary to write.
        """
        self.home_path.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(config, f, default_flow_style=False)

    def signing_key_path(self) -> Path | None:
        """Get the default signing key path from the config, if set."""
        value = (self.get_config().get("signing") or {}).get("key")
        if not value:
            return None
        return Path(value).expanduser()
