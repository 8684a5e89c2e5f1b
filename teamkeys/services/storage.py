"""On-disk layout of team rosters.

Each team lives in its own subdirectory of the teams folder, named after the
team and its UUID:

    <teams>/<slug>-<uuid>/roster.toml        the roster document
    <teams>/<slug>-<uuid>/roster.toml.asc    detached signature over roster.toml

Only the UUID identifies a team; the slug is there for humans browsing the
folder. A subdirectory missing either file is not a team and is skipped.
"""

import logging
from pathlib import Path

from teamkeys.exceptions import InvalidTeamError, RosterParseError, StorageError
from teamkeys.models.team import Team
from teamkeys.services.roster import load_team
from teamkeys.utils import slugify

logger = logging.getLogger(__name__)

ROSTER_FILENAME = "roster.toml"
SIGNATURE_FILENAME = "roster.toml.asc"


def team_directory(team: Team, root: Path) -> Path:
    """Get the directory a team is stored in.

    Args:
        team: The team.
        root: The teams folder.

    Returns:
        ``root/<slug>-<uuid>``, or ``root/<uuid>`` when the name has no slug.

    Raises:
        InvalidTeamError: If the team has no UUID.
    """
    if team.uuid is None or team.uuid.int == 0:
        raise InvalidTeamError("invalid UUID")

    slug = slugify(team.name)
    if slug:
        return root / f"{slug}-{team.uuid}"
    return root / str(team.uuid)


def find_team_subdirectories(root: Path) -> list[Path]:
    """Find the subdirectories of ``root`` that hold a roster and its signature.

    Args:
        root: The teams folder.

    Returns:
        Matching directories sorted by name. Empty if ``root`` doesn't exist.

    Raises:
        StorageError: If ``root`` can't be listed.
    """
    if not root.exists():
        logger.debug("Teams folder %s does not exist", root)
        return []

    try:
        entries = sorted(root.iterdir())
    except OSError as e:
        raise StorageError(root, f"couldn't list directory: {e}") from e

    subdirectories: list[Path] = []
    for entry in entries:
        if not entry.is_dir():
            continue
        if (entry / ROSTER_FILENAME).is_file() and (entry / SIGNATURE_FILENAME).is_file():
            subdirectories.append(entry)
        else:
            logger.debug("Skipping %s: no roster and signature pair", entry)
    return subdirectories


def load_teams(root: Path) -> list[Team]:
    """Load every team stored under ``root``.

    The stored roster and signature of each team are the exact file contents.

    Args:
        root: The teams folder.

    Returns:
        The teams, in directory name order.

    Raises:
        StorageError: If a roster can't be read or parsed.
    """
    teams: list[Team] = []
    for subdirectory in find_team_subdirectories(root):
        teams.append(load_team_directory(subdirectory))
    return teams


def load_team_directory(directory: Path) -> Team:
    """Load the team stored in a single directory.

    Raises:
        StorageError: If the files can't be read or the roster can't be parsed.
    """
    roster_path = directory / ROSTER_FILENAME
    signature_path = directory / SIGNATURE_FILENAME

    roster = _read_text(roster_path)
    signature = _read_text(signature_path)
    try:
        return load_team(roster, signature)
    except RosterParseError as e:
        raise StorageError(roster_path, str(e)) from e


class RosterSaver:
    """Writes a roster and its signature into a team directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def save(self, roster: str, signature: str) -> None:
        """Write both files, replacing any previous contents.

        The roster is written first. Each file is written to a temporary
        sibling and renamed into place.

        Raises:
            StorageError: If either file can't be written.
        """
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(self.directory, f"couldn't create directory: {e}") from e

        _write_text(self.directory / ROSTER_FILENAME, roster)
        _write_text(self.directory / SIGNATURE_FILENAME, signature)
        logger.info("Saved roster to %s", self.directory)


def save_team(team: Team, root: Path) -> Path:
    """Save a team's signed roster into its directory under ``root``.

    Args:
        team: A team that has been signed with ``Team.update_roster``.
        root: The teams folder.

    Returns:
        The team directory.

    Raises:
        StorageError: If the team has never been signed or can't be written.
    """
    directory = team_directory(team, root)
    roster, signature = team.roster()
    if not roster or not signature:
        raise StorageError(directory, "team has no signed roster to save")

    RosterSaver(directory).save(roster, signature)
    return directory


def _read_text(path: Path) -> str:
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise StorageError(path, f"couldn't read file: {e}") from e


def _write_text(path: Path, content: str) -> None:
    temp_path = path.with_name(path.name + ".tmp")
    try:
        with open(temp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        temp_path.replace(path)
    except OSError as e:
        raise StorageError(path, f"couldn't write file: {e}") from e
