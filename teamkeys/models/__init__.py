"""Pydantic data models."""

from teamkeys.models.person import Person
from teamkeys.models.request import RequestToJoinTeam
from teamkeys.models.team import Team, UpsertWarning, validate_team

__all__ = ["Person", "Team", "UpsertWarning", "RequestToJoinTeam", "validate_team"]
