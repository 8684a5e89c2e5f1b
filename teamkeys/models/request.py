"""Request-to-join model for teamkeys."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

from teamkeys.utils.fingerprint import Fingerprint


class RequestToJoinTeam(BaseModel):
    """A request made by the local user to be added to a team's roster."""

    team_uuid: UUID
    team_name: str
    fingerprint: Fingerprint
    requested_at: datetime

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("fingerprint", mode="before")
    @classmethod
    def _parse_fingerprint(cls, value: object) -> object:
        if isinstance(value, str):
            return Fingerprint.parse(value)
        return value

    @field_serializer("fingerprint")
    def _serialize_fingerprint(self, fingerprint: Fingerprint) -> str:
        return fingerprint.hex()
