"""Person model for teamkeys."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from teamkeys.utils.fingerprint import Fingerprint


class Person(BaseModel):
    """A member of a team: an email address bound to a key fingerprint."""

    email: str = Field(description="Email address, unique within a team")
    fingerprint: Fingerprint = Field(description="Fingerprint of the person's key")
    is_admin: bool = Field(default=False, description="May sign a new roster")

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("fingerprint", mode="before")
    @classmethod
    def _parse_fingerprint(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Fingerprint.parse(value)
        return value

    def __str__(self) -> str:
        role = " (admin)" if self.is_admin else ""
        return f"{self.email} [{self.fingerprint}]{role}"
