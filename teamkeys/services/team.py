"""Team service for operations on the teams stored in the home directory."""

import logging
from datetime import datetime, timezone
from difflib import SequenceMatcher
from pathlib import Path
from uuid import UUID, uuid4

from teamkeys.exceptions import AmbiguousMatchError, TeamNotFoundError
from teamkeys.models.person import Person
from teamkeys.models.team import Team, UpsertWarning
from teamkeys.services.database import Database, TeamItem
from teamkeys.services.home import HomeService
from teamkeys.services.signing import SigningKey, VerificationKey, verify_roster
from teamkeys.services.storage import load_teams, save_team

logger = logging.getLogger(__name__)

# Event database verb for a successful roster verification
VERIFIED = "verified"


class TeamService:
    """Service for team operations."""

    def __init__(self, home_service: HomeService) -> None:
        """Initialize the team service.

        Args:
            home_service: The home service locating the teams folder.
        """
        self.home = home_service
        self.database = Database(home_service.database_path)

    def list_all(self) -> list[Team]:
        """Load every stored team."""
        self.home.ensure_initialized()
        return load_teams(self.home.teams_folder())

    def find(self, query: str) -> Team:
        """Find a team by UUID or name substring.

        Args:
            query: A team UUID, or part of a team's name.

        Returns:
            The matching team.

        Raises:
            TeamNotFoundError: If no team matches.
            AmbiguousMatchError: If more than one team matches.
        """
        teams = self.list_all()

        try:
            wanted = UUID(query)
        except ValueError:
            wanted = None
        if wanted is not None:
            for team in teams:
                if team.uuid == wanted:
                    return team

        query_lower = query.lower()
        matches = [team for team in teams if query_lower in team.name.lower()]
        if not matches:
            raise TeamNotFoundError(query, self._find_similar(query, teams))
        if len(matches) > 1:
            raise AmbiguousMatchError(query, [str(team.uuid) for team in matches])
        return matches[0]

    def _find_similar(self, query: str, teams: list[Team], max_suggestions: int = 3) -> list[str]:
        query_lower = query.lower()
        scored: list[tuple[float, str]] = []
        for team in teams:
            ratio = SequenceMatcher(None, query_lower, team.name.lower()).ratio()
            if ratio > 0.4:
                scored.append((ratio, team.name))
        scored.sort(key=lambda x: x[0], reverse=True)
        return [name for _, name in scored[:max_suggestions]]

    def create(self, name: str, email: str, signing_key: SigningKey) -> tuple[Team, Path]:
        """Create a team whose only member and admin owns ``signing_key``.

        Args:
            name: Display name of the new team.
            email: Email address of the admin.
            signing_key: The admin's key, used to sign the first roster.

        Returns:
            The signed team and the directory it was saved to.
        """
        self.home.ensure_initialized()

        team = Team(
            name=name,
            uuid=uuid4(),
            people=[Person(email=email, fingerprint=signing_key.fingerprint(), is_admin=True)],
        )
        team.update_roster(signing_key)
        directory = save_team(team, self.home.teams_folder())
        logger.info("Created team %s (%s)", team.name, team.uuid)
        return team, directory

    def upsert_person(
        self, team: Team, person: Person, signing_key: SigningKey
    ) -> tuple[UpsertWarning | None, Path]:
        """Add or replace a person, then re-sign and save the roster.

        The team is only modified in memory if signing succeeds.

        Returns:
            The merge classification and the team directory.
        """
        updated = team.model_copy(deep=True)
        warning = updated.upsert_person(person)
        updated.update_roster(signing_key)

        directory = save_team(updated, self.home.teams_folder())

        team.people = updated.people
        team.version = updated.version
        team._roster, team._signature = updated.roster()
        return warning, directory

    def verify(
        self, team: Team, keys: list[VerificationKey], now: datetime | None = None
    ) -> None:
        """Verify a team's stored roster against the admins among ``keys``.

        Keys whose fingerprints aren't admins of the team are ignored. A
        successful verification is recorded in the event database.

        Raises:
            SignatureError: If no admin key made the stored signature.
        """
        roster, signature = team.roster()
        admin_keys = [key for key in keys if team.is_admin(key.fingerprint())]
        logger.debug(
            "Verifying team %s with %d of %d keys", team.uuid, len(admin_keys), len(keys)
        )
        verify_roster(roster, signature, admin_keys)
        if team.uuid is None:
            return
        if now is None:
            now = datetime.now(timezone.utc)
        self.database.record_last(VERIFIED, TeamItem.for_team(team), now)

    def last_verified(self, team: Team) -> datetime | None:
        """Get when the team's roster was last verified, or None if never."""
        if team.uuid is None:
            return None
        return self.database.get_last(VERIFIED, TeamItem.for_team(team))
