"""Core services: roster codec, signing, storage and the event database."""

from teamkeys.services.database import Database, KeyItem, TeamItem
from teamkeys.services.home import HomeService
from teamkeys.services.keys import Ed25519Key
from teamkeys.services.roster import load_team, parse_roster, serialize_roster
from teamkeys.services.signing import SigningKey, VerificationKey, sign_roster, verify_roster
from teamkeys.services.storage import (
    RosterSaver,
    find_team_subdirectories,
    load_teams,
    save_team,
    team_directory,
)
from teamkeys.services.team import TeamService

__all__ = [
    "Database",
    "Ed25519Key",
    "HomeService",
    "KeyItem",
    "RosterSaver",
    "SigningKey",
    "TeamItem",
    "TeamService",
    "VerificationKey",
    "find_team_subdirectories",
    "load_team",
    "load_teams",
    "parse_roster",
    "save_team",
    "serialize_roster",
    "sign_roster",
    "team_directory",
    "verify_roster",
]
