"""Custom exceptions for teamkeys."""

from pathlib import Path


class TeamKeysError(Exception):
    """Base exception for teamkeys errors."""

    pass


class RosterParseError(TeamKeysError):
    """Raised when a roster document cannot be parsed."""

    pass


class InvalidFingerprintError(RosterParseError, ValueError):
    """Raised when a string is not a valid 160-bit fingerprint."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"invalid fingerprint: {value!r}")


class InvalidTeamError(TeamKeysError):
    """Raised when a team breaks one of the roster invariants."""

    pass


class UpdateRosterError(TeamKeysError):
    """Raised when a team is refused for signing because it is invalid."""

    def __init__(self, cause: InvalidTeamError) -> None:
        self.cause = cause
        super().__init__(f"invalid team: {cause}")


class NotAnAdminError(TeamKeysError):
    """Raised when signing with a key that isn't an admin of the team."""

    def __init__(self, fingerprint: object) -> None:
        self.fingerprint = fingerprint
        super().__init__(f"can't sign with key {fingerprint} that's not an admin of the team")


class SignatureError(TeamKeysError):
    """Base exception for signature verification failures."""

    pass


class EmptySignatureError(SignatureError):
    """Raised when asked to verify an empty signature."""

    def __init__(self) -> None:
        super().__init__("empty signature")


class SignatureMismatchError(SignatureError):
    """Raised when a signature doesn't match the signed text or the key."""

    pass


class PersonNotFoundError(TeamKeysError):
    """Raised when no person in a team has the requested fingerprint."""

    def __init__(self) -> None:
        super().__init__("person not found")


class TeamNotFoundError(TeamKeysError):
    """Raised when a team cannot be found by UUID or name."""

    def __init__(self, query: str, suggestions: list[str] | None = None) -> None:
        self.query = query
        self.suggestions = suggestions or []
        msg = f"Team not found: {query}"
        if self.suggestions:
            msg += "\n\nDid you mean?\n  - " + "\n  - ".join(self.suggestions)
        super().__init__(msg)


class AmbiguousMatchError(TeamKeysError):
    """Raised when a query matches multiple teams."""

    def __init__(self, query: str, matches: list[str]) -> None:
        self.query = query
        self.matches = matches
        super().__init__(f"Query '{query}' matches multiple teams: {', '.join(matches)}")


class StorageError(TeamKeysError):
    """Raised when a team directory or roster file cannot be read or written."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class DatabaseError(TeamKeysError):
    """Raised when the event database cannot be read or written."""

    pass


class HomeNotInitializedError(TeamKeysError):
    """Raised when the teamkeys home directory has not been initialized."""

    pass


class KeyLoadError(TeamKeysError):
    """Raised when a key file cannot be loaded."""

    pass
