"""160-bit OpenPGP-style key fingerprints.

Fingerprints are stored in roster documents as 40 uppercase hex characters and
displayed everywhere else in ten groups of four, with a double space in the
middle:

    AAAA BBBB AAAA BBBB AAAA  AAAA BBBB AAAA BBBB AAAA
"""

import re

from teamkeys.exceptions import InvalidFingerprintError

FINGERPRINT_BYTES = 20
HEX_PATTERN = re.compile(r"^[0-9A-F]{40}$")
URI_PREFIX = "OPENPGP4FPR:"


class Fingerprint:
    """An immutable 20-byte key fingerprint."""

    __slots__ = ("_bytes",)

    def __init__(self, raw: bytes) -> None:
        if len(raw) != FINGERPRINT_BYTES:
            raise InvalidFingerprintError(raw.hex())
        self._bytes = bytes(raw)

    @classmethod
    def parse(cls, value: str) -> "Fingerprint":
        """Parse a fingerprint from its hex form.

        Whitespace is ignored and case doesn't matter, so both the compact and
        the grouped display forms are accepted. An optional ``0x`` prefix is
        stripped.

        Args:
            value: The fingerprint string.

        Returns:
            The parsed fingerprint.

        Raises:
            InvalidFingerprintError: If the string isn't 40 hex characters.
        """
        if not isinstance(value, str):
            raise InvalidFingerprintError(repr(value))

        compact = "".join(value.split()).upper()
        if compact.startswith("0X"):
            compact = compact[2:]

        if not HEX_PATTERN.match(compact):
            raise InvalidFingerprintError(value)
        return cls(bytes.fromhex(compact))

    def hex(self) -> str:
        """Return the 40 character uppercase hex form used in roster documents."""
        return self._bytes.hex().upper()

    def uri(self) -> str:
        """Return the fingerprint as an ``OPENPGP4FPR:`` URI."""
        return URI_PREFIX + self.hex()

    def __bytes__(self) -> bytes:
        return self._bytes

    def __str__(self) -> str:
        groups = [self.hex()[i : i + 4] for i in range(0, 40, 4)]
        return " ".join(groups[:5]) + "  " + " ".join(groups[5:])

    def __repr__(self) -> str:
        return f"Fingerprint({self.hex()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fingerprint):
            return NotImplemented
        return self._bytes == other._bytes

    def __hash__(self) -> int:
        return hash(self._bytes)

    # Immutable, so copies can share the instance
    def __copy__(self) -> "Fingerprint":
        return self

    def __deepcopy__(self, memo: dict) -> "Fingerprint":
        return self
