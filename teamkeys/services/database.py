"""Local event database.

A small JSON file recording things the local user has done: which keys were
imported into their keyring, which teams they asked to join, and when an
action (a verb such as ``"fetched"``) was last performed on a key or a team.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError

from teamkeys.exceptions import DatabaseError
from teamkeys.models.request import RequestToJoinTeam
from teamkeys.models.team import Team
from teamkeys.utils.fingerprint import Fingerprint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyItem:
    """A key that events can be recorded against."""

    fingerprint: Fingerprint

    def item_key(self) -> str:
        return f"key:{self.fingerprint.uri()}"


@dataclass(frozen=True)
class TeamItem:
    """A team that events can be recorded against."""

    uuid: UUID

    @classmethod
    def for_team(cls, team: Team) -> "TeamItem":
        if team.uuid is None:
            raise DatabaseError(f"team {team.name!r} has no UUID")
        return cls(team.uuid)

    def item_key(self) -> str:
        return f"team:{self.uuid}"


Item = KeyItem | TeamItem


class DatabaseContents(BaseModel):
    """Everything stored in the database file."""

    keys_imported_into_keyring: list[str] = Field(default_factory=list)
    requests_to_join_teams: list[RequestToJoinTeam] = Field(default_factory=list)
    event_times: dict[str, datetime] = Field(default_factory=dict)


class Database:
    """Reads and writes the event database file."""

    def __init__(self, path: Path) -> None:
        """Initialize the database.

        Args:
            path: Path to the JSON file. It is created on first write.
        """
        self.path = path

    def record_fingerprint_imported(self, fingerprint: Fingerprint) -> None:
        """Record that a key was imported into the local keyring."""
        contents = self._load()
        if fingerprint.hex() not in contents.keys_imported_into_keyring:
            contents.keys_imported_into_keyring.append(fingerprint.hex())
        self._save(contents)

    def get_fingerprints_imported(self) -> list[Fingerprint]:
        """Get the fingerprints of keys imported into the local keyring."""
        return [Fingerprint.parse(value) for value in self._load().keys_imported_into_keyring]

    def record_request_to_join_team(
        self, team_uuid: UUID, team_name: str, fingerprint: Fingerprint, now: datetime
    ) -> None:
        """Record that the user asked to join a team with the given key.

        An earlier request for the same team and key is superseded.
        """
        contents = self._load()
        contents.requests_to_join_teams.append(
            RequestToJoinTeam(
                team_uuid=team_uuid,
                team_name=team_name,
                fingerprint=fingerprint,
                requested_at=now,
            )
        )
        contents.requests_to_join_teams = _deduplicate_requests(contents.requests_to_join_teams)
        self._save(contents)

    def get_requests_to_join_teams(self) -> list[RequestToJoinTeam]:
        """Get pending requests to join teams, newest first."""
        return _deduplicate_requests(self._load().requests_to_join_teams)

    def get_existing_request_to_join_team(
        self, team_uuid: UUID, fingerprint: Fingerprint
    ) -> RequestToJoinTeam | None:
        """Get the request to join a team with the given key, if there is one."""
        for request in self.get_requests_to_join_teams():
            if request.team_uuid == team_uuid and request.fingerprint == fingerprint:
                return request
        return None

    def delete_request_to_join_team(self, team_uuid: UUID, fingerprint: Fingerprint) -> None:
        """Delete all requests to join a team with the given key."""
        contents = self._load()
        remaining = []
        for request in contents.requests_to_join_teams:
            if request.team_uuid == team_uuid and request.fingerprint == fingerprint:
                logger.debug("Deleting request to join team %s", request.team_uuid)
                continue
            remaining.append(request)
        contents.requests_to_join_teams = remaining
        self._save(contents)

    def record_last(self, verb: str, item: Item, now: datetime) -> None:
        """Record when ``verb`` was last done to ``item``.

        Raises:
            DatabaseError: If the verb is empty.
        """
        if not verb:
            raise DatabaseError("verb can't be empty")

        contents = self._load()
        contents.event_times[_event_key(verb, item)] = now
        self._save(contents)

    def get_last(self, verb: str, item: Item) -> datetime | None:
        """Get when ``verb`` was last done to ``item``, or None if never."""
        return self._load().event_times.get(_event_key(verb, item))

    def is_older_than(self, verb: str, item: Item, age: timedelta, now: datetime) -> bool:
        """Check whether ``verb`` was last done to ``item`` more than ``age`` ago.

        Something that was never done counts as older than any age.
        """
        last = self.get_last(verb, item)
        if last is None:
            return True
        return now - last > age

    def _load(self) -> DatabaseContents:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return DatabaseContents()
        except OSError as e:
            raise DatabaseError(f"couldn't open '{self.path}': {e}") from e

        try:
            return DatabaseContents.model_validate_json(raw)
        except ValidationError as e:
            raise DatabaseError(f"error loading json from '{self.path}': {e}") from e

    def _save(self, contents: DatabaseContents) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(contents.model_dump_json(indent=4), encoding="utf-8")
        except OSError as e:
            raise DatabaseError(f"couldn't write '{self.path}': {e}") from e


def _event_key(verb: str, item: Item) -> str:
    return f"{verb}:{item.item_key()}"


def _deduplicate_requests(requests: list[RequestToJoinTeam]) -> list[RequestToJoinTeam]:
    """Keep only the newest request per (team, key) pair, newest first."""
    newest: dict[tuple[UUID, Fingerprint], RequestToJoinTeam] = {}
    for request in requests:
        pair = (request.team_uuid, request.fingerprint)
        if pair not in newest or request.requested_at > newest[pair].requested_at:
            newest[pair] = request
    return sorted(newest.values(), key=lambda r: r.requested_at, reverse=True)
