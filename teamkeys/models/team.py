"""Team model for teamkeys.

A team is an ordered list of people plus the signed roster document that
vouches for them. The roster text and its detached signature are kept exactly
as they were produced (or loaded) and are only ever replaced together, by
``Team.update_roster``.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, Field, PrivateAttr

from teamkeys.exceptions import (
    InvalidTeamError,
    NotAnAdminError,
    PersonNotFoundError,
    UpdateRosterError,
)
from teamkeys.models.person import Person
from teamkeys.utils.fingerprint import Fingerprint

if TYPE_CHECKING:
    from teamkeys.services.signing import SigningKey

logger = logging.getLogger(__name__)


class UpsertWarning(str, Enum):
    """How upserting a person would change an existing roster."""

    KEY_WOULD_BE_UPDATED = "key_would_be_updated"
    EMAIL_WOULD_BE_UPDATED = "email_would_be_updated"
    PERSON_WOULD_NOT_BE_CHANGED = "person_would_not_be_changed"
    PERSON_WOULD_BE_DEMOTED_AS_ADMIN = "person_would_be_demoted_as_admin"
    PERSON_WOULD_BE_PROMOTED_TO_ADMIN = "person_would_be_promoted_to_admin"

    @property
    def message(self) -> str:
        """Human readable description of the change."""
        return _UPSERT_MESSAGES[self]


_UPSERT_MESSAGES = {
    UpsertWarning.KEY_WOULD_BE_UPDATED: "the key for this email address would be replaced",
    UpsertWarning.EMAIL_WOULD_BE_UPDATED: "the email address for this key would be replaced",
    UpsertWarning.PERSON_WOULD_NOT_BE_CHANGED: "this person is already in the team",
    UpsertWarning.PERSON_WOULD_BE_DEMOTED_AS_ADMIN: "this person would no longer be an admin",
    UpsertWarning.PERSON_WOULD_BE_PROMOTED_TO_ADMIN: "this person would become an admin",
}


class Team(BaseModel):
    """A team of people who vouch for each other's keys."""

    name: str = Field(default="", description="Display name, not unique")
    uuid: UUID | None = Field(default=None, description="Permanent identity of the team")
    version: int = Field(default=0, description="Incremented every time the roster is signed")
    people: list[Person] = Field(default_factory=list)

    _roster: str = PrivateAttr(default="")
    _signature: str = PrivateAttr(default="")

    def roster(self) -> tuple[str, str]:
        """Return the stored roster text and its detached signature."""
        return self._roster, self._signature

    def admins(self) -> list[Person]:
        """Return the people who are admins, in roster order."""
        return [person for person in self.people if person.is_admin]

    def contains(self, fingerprint: Fingerprint) -> bool:
        """Check whether anyone in the team has the given fingerprint."""
        return any(person.fingerprint == fingerprint for person in self.people)

    def is_admin(self, fingerprint: Fingerprint) -> bool:
        """Check whether the person with the given fingerprint is an admin."""
        return any(
            person.fingerprint == fingerprint and person.is_admin for person in self.people
        )

    def get_person_for_fingerprint(self, fingerprint: Fingerprint) -> Person:
        """Get the team member with the given fingerprint.

        Raises:
            PersonNotFoundError: If nobody in the team has that fingerprint.
        """
        for person in self.people:
            if person.fingerprint == fingerprint:
                return person
        raise PersonNotFoundError()

    def get_upsert_person_warnings(self, person: Person) -> UpsertWarning | None:
        """Classify what upserting ``person`` would change, without changing anything.

        The existing entry is found by fingerprint first and then by email. When
        the fingerprint matches one person and the email matches another, the
        fingerprint match wins.

        Args:
            person: The desired state of a team member.

        Returns:
            None for a brand new person, otherwise the kind of change.
        """
        existing = self._match(person)
        if existing is None:
            return None

        if existing.fingerprint != person.fingerprint:
            return UpsertWarning.KEY_WOULD_BE_UPDATED
        if existing.email != person.email:
            return UpsertWarning.EMAIL_WOULD_BE_UPDATED
        if existing.is_admin == person.is_admin:
            return UpsertWarning.PERSON_WOULD_NOT_BE_CHANGED
        if existing.is_admin:
            return UpsertWarning.PERSON_WOULD_BE_DEMOTED_AS_ADMIN
        return UpsertWarning.PERSON_WOULD_BE_PROMOTED_TO_ADMIN

    def upsert_person(self, person: Person) -> UpsertWarning | None:
        """Insert ``person``, replacing anyone who shares their email or fingerprint.

        The change is always applied; the returned warning is advisory. A
        replaced person keeps their position in the roster, a new person is
        appended.

        Args:
            person: The desired state of a team member.

        Returns:
            The same classification as ``get_upsert_person_warnings``.
        """
        warning = self.get_upsert_person_warnings(person)

        people: list[Person] = []
        inserted = False
        for existing in self.people:
            if existing.fingerprint == person.fingerprint or existing.email == person.email:
                if not inserted:
                    people.append(person)
                    inserted = True
                continue
            people.append(existing)
        if not inserted:
            people.append(person)

        self.people = people
        logger.debug("Upserted %s into team %s (%s)", person.email, self.uuid, warning)
        return warning

    def _match(self, person: Person) -> Person | None:
        for existing in self.people:
            if existing.fingerprint == person.fingerprint:
                return existing
        for existing in self.people:
            if existing.email == person.email:
                return existing
        return None

    def preview_roster(self) -> str:
        """Serialize the roster that the next ``update_roster`` would sign.

        Nothing is signed and the team is not modified.
        """
        from teamkeys.services.roster import serialize_roster

        return serialize_roster(self, version=self.version + 1)

    def update_roster(self, signing_key: "SigningKey") -> None:
        """Bump the version, then serialize and sign the roster with an admin's key.

        The roster text, signature and version are replaced together, and only
        once signing has succeeded.

        Args:
            signing_key: Key of an admin of this team.

        Raises:
            UpdateRosterError: If the team is invalid.
            NotAnAdminError: If the key doesn't belong to an admin of the team.
        """
        from teamkeys.services.roster import serialize_roster
        from teamkeys.services.signing import sign_roster

        try:
            validate_team(self)
        except InvalidTeamError as e:
            raise UpdateRosterError(e) from e

        fingerprint = signing_key.fingerprint()
        if not self.is_admin(fingerprint):
            raise NotAnAdminError(fingerprint)

        version = self.version + 1
        roster = serialize_roster(self, version=version)
        signature = sign_roster(roster, signing_key)

        self.version = version
        self._roster = roster
        self._signature = signature
        logger.info("Signed version %d of team %s with key %s", version, self.uuid, fingerprint)


def validate_team(team: Team) -> None:
    """Check a team against the roster invariants.

    The checks run in a fixed order and the first failure is raised.

    Args:
        team: The team to check.

    Raises:
        InvalidTeamError: With one of the fixed messages describing the problem.
    """
    if team.uuid is None or team.uuid.int == 0:
        raise InvalidTeamError("invalid UUID")

    if not team.people:
        raise InvalidTeamError("team has no members")

    emails: set[str] = set()
    fingerprints: set[Fingerprint] = set()
    for person in team.people:
        if person.email in emails:
            raise InvalidTeamError(f"email listed more than once: {person.email}")
        emails.add(person.email)

    for person in team.people:
        if person.fingerprint in fingerprints:
            raise InvalidTeamError(f"fingerprint listed more than once: {person.fingerprint}")
        fingerprints.add(person.fingerprint)

    if not team.admins():
        raise InvalidTeamError("team has no administrators")
