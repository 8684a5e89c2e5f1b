"""Canonical roster documents.

A roster is a small TOML document. It is written by hand, field by field, so
that serializing the same team always produces the same bytes: signatures are
made over those bytes, and any difference in formatting would invalidate them.
Parsing goes through a real TOML parser and accepts any valid document.
"""

import logging
import re
import tomllib
from typing import Any
from uuid import UUID

from teamkeys.exceptions import InvalidFingerprintError, RosterParseError
from teamkeys.models.person import Person
from teamkeys.models.team import Team
from teamkeys.utils.fingerprint import Fingerprint

logger = logging.getLogger(__name__)

ROSTER_HEADER = """\
# {name} team roster. Everyone in the team has a copy of this file.
#
# It is used to look up which key to use for an email address and fetch keys
# automatically.
"""

# TOML comments may not contain control characters other than tab
_COMMENT_UNSAFE = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


def serialize_roster(team: Team, version: int | None = None) -> str:
    """Serialize a team to its canonical roster document.

    Args:
        team: The team to serialize.
        version: Version number to write instead of ``team.version``.

    Returns:
        The roster text.
    """
    if version is None:
        version = team.version

    # The header is a comment, so the name must not break out of it
    header_name = _COMMENT_UNSAFE.sub(" ", " ".join(team.name.splitlines()))
    lines = [
        ROSTER_HEADER.format(name=header_name),
        f"uuid = {_quote(str(team.uuid) if team.uuid else '')}\n",
        f"version = {int(version)}\n",
        f"name = {_quote(team.name)}\n",
    ]

    for person in team.people:
        lines.append("\n")
        lines.append("[[person]]\n")
        lines.append(f"  email = {_quote(person.email)}\n")
        lines.append(f"  fingerprint = {_quote(person.fingerprint.hex())}\n")
        lines.append(f"  is_admin = {'true' if person.is_admin else 'false'}\n")

    return "".join(lines)


def parse_roster(roster: str) -> Team:
    """Parse a roster document into a team.

    The signature is not checked and the team is not validated: a parsed team
    may still break the roster invariants.

    Args:
        roster: The roster text.

    Returns:
        The parsed team, with no stored roster or signature.

    Raises:
        RosterParseError: If the document is malformed.
    """
    try:
        document = tomllib.loads(roster)
    except tomllib.TOMLDecodeError as e:
        raise RosterParseError(f"error parsing roster: {e}") from e

    team_uuid = _parse_uuid(document.get("uuid"))
    version = document.get("version", 0)
    if not isinstance(version, int) or isinstance(version, bool):
        raise RosterParseError(f"invalid version: {version!r}")
    name = document.get("name", "")
    if not isinstance(name, str):
        raise RosterParseError(f"invalid name: {name!r}")

    entries = document.get("person", [])
    if not isinstance(entries, list):
        raise RosterParseError("person must be an array of tables")

    people = [_parse_person(entry) for entry in entries]
    return Team(name=name, uuid=team_uuid, version=version, people=people)


def load_team(roster: str, signature: str) -> Team:
    """Parse a roster and attach the exact roster and signature texts to the team.

    Args:
        roster: Roster text as it was signed.
        signature: The armored detached signature over ``roster``.

    Returns:
        The parsed team.

    Raises:
        RosterParseError: If the roster is malformed.
    """
    team = parse_roster(roster)
    team._roster = roster
    team._signature = signature
    logger.debug("Loaded team %s version %d (%d people)", team.uuid, team.version, len(team.people))
    return team


def _parse_uuid(value: Any) -> UUID | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise RosterParseError(f"invalid UUID: {value!r}")
    try:
        return UUID(value)
    except ValueError as e:
        raise RosterParseError(f"invalid UUID: {value!r}") from e


def _parse_person(entry: Any) -> Person:
    if not isinstance(entry, dict):
        raise RosterParseError(f"invalid person: {entry!r}")

    email = entry.get("email")
    if not isinstance(email, str):
        raise RosterParseError(f"invalid email for person: {email!r}")

    raw_fingerprint = entry.get("fingerprint")
    if not isinstance(raw_fingerprint, str):
        raise RosterParseError(f"invalid fingerprint for {email}: {raw_fingerprint!r}")
    try:
        fingerprint = Fingerprint.parse(raw_fingerprint)
    except InvalidFingerprintError as e:
        raise RosterParseError(f"invalid fingerprint for {email}: {raw_fingerprint!r}") from e

    is_admin = entry.get("is_admin", False)
    if not isinstance(is_admin, bool):
        raise RosterParseError(f"invalid is_admin for {email}: {is_admin!r}")

    return Person(email=email, fingerprint=fingerprint, is_admin=is_admin)


def _quote(value: str) -> str:
    """Quote a string as a TOML basic string."""
    out = []
    for char in value:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\u{ord(char):04X}")
        else:
            out.append(char)
    return '"' + "".join(out) + '"'
