"""Detached signatures over roster documents.

Signatures are made over the exact UTF-8 bytes of a roster and stored next to
it as ASCII armor:

    -----BEGIN TEAMKEYS SIGNATURE-----
    Fingerprint: 5C78E71F6FEFB55829654CC5343CC240D350C30C
    Hash: SHA256

    <base64 payload>
    -----END TEAMKEYS SIGNATURE-----

The payload is a two byte hash tag (the leftmost 16 bits of the SHA-256 digest
of the signed bytes) followed by the raw signature. The tag lets a tampered
roster be reported as such before any key is tried.

Which keys are trusted is up to the caller: ``verify_roster`` accepts the
signature if any of the candidate keys made it.
"""

import base64
import binascii
import hashlib
import logging
import textwrap
from collections.abc import Iterable
from typing import Protocol

from teamkeys.exceptions import EmptySignatureError, SignatureError, SignatureMismatchError
from teamkeys.utils.fingerprint import Fingerprint

logger = logging.getLogger(__name__)

ARMOR_BEGIN = "-----BEGIN TEAMKEYS SIGNATURE-----"
ARMOR_END = "-----END TEAMKEYS SIGNATURE-----"
HASH_ALGORITHM = "SHA256"
HASH_TAG_LENGTH = 2


class VerificationKey(Protocol):
    """A public key that can check signatures."""

    def fingerprint(self) -> Fingerprint:
        """Return the key's fingerprint."""
        ...

    def verify(self, data: bytes, signature: bytes) -> None:
        """Check a raw signature over ``data``.

        Raises:
            SignatureMismatchError: If this key didn't make the signature.
        """
        ...


class SigningKey(VerificationKey, Protocol):
    """A private key that can also make signatures."""

    def sign(self, data: bytes) -> bytes:
        """Return a raw signature over ``data``."""
        ...


def sign_roster(roster: str, signing_key: SigningKey) -> str:
    """Make an armored detached signature over a roster.

    Args:
        roster: The roster text, exactly as it will be stored.
        signing_key: The key to sign with.

    Returns:
        The armored signature.
    """
    data = roster.encode("utf-8")
    digest = hashlib.sha256(data).digest()
    payload = digest[:HASH_TAG_LENGTH] + signing_key.sign(data)

    body = textwrap.wrap(base64.b64encode(payload).decode("ascii"), 64)
    lines = [
        ARMOR_BEGIN,
        f"Fingerprint: {signing_key.fingerprint().hex()}",
        f"Hash: {HASH_ALGORITHM}",
        "",
        *body,
        ARMOR_END,
    ]
    return "\n".join(lines) + "\n"


def verify_roster(
    roster: str, armored_signature: str, verification_keys: Iterable[VerificationKey]
) -> None:
    """Check that one of the given keys signed the roster.

    Args:
        roster: The roster text as stored.
        armored_signature: The detached signature as stored.
        verification_keys: Candidate keys, usually the team's admins.

    Raises:
        EmptySignatureError: If the signature is empty.
        SignatureMismatchError: If the roster was changed after signing, or
            none of the keys made the signature.
        SignatureError: If the signature can't be read, or there are no keys.
    """
    if armored_signature == "":
        raise EmptySignatureError()

    _, payload = parse_armor(armored_signature)
    if len(payload) <= HASH_TAG_LENGTH:
        raise SignatureError("invalid signature: payload too short")

    data = roster.encode("utf-8")
    digest = hashlib.sha256(data).digest()
    if payload[:HASH_TAG_LENGTH] != digest[:HASH_TAG_LENGTH]:
        raise SignatureMismatchError("invalid signature: hash tag doesn't match")

    last_error: SignatureError = SignatureError("no keys to verify against")
    for key in verification_keys:
        try:
            key.verify(data, payload[HASH_TAG_LENGTH:])
        except SignatureMismatchError as e:
            logger.debug("Signature not made by %s: %s", key.fingerprint(), e)
            last_error = e
            continue
        logger.debug("Roster signature verified with %s", key.fingerprint())
        return

    raise last_error


def signer_fingerprint(armored_signature: str) -> Fingerprint | None:
    """Read the signer's fingerprint from the armor headers, if present.

    The header is not covered by the signature, so it is only a hint for
    display and must not be used to decide trust.
    """
    headers, _ = parse_armor(armored_signature)
    value = headers.get("Fingerprint")
    if value is None:
        return None
    return Fingerprint.parse(value)


def parse_armor(armored_signature: str) -> tuple[dict[str, str], bytes]:
    """Split an armored signature into its headers and decoded payload.

    Raises:
        SignatureError: If the armor is malformed.
    """
    lines = [line.strip() for line in armored_signature.strip().splitlines()]
    if len(lines) < 3 or lines[0] != ARMOR_BEGIN or lines[-1] != ARMOR_END:
        raise SignatureError("invalid signature: missing armor")

    inner = lines[1:-1]
    headers: dict[str, str] = {}
    while inner and inner[0]:
        key, sep, value = inner.pop(0).partition(":")
        if not sep:
            raise SignatureError("invalid signature: malformed armor header")
        headers[key.strip()] = value.strip()
    if headers.get("Hash", HASH_ALGORITHM) != HASH_ALGORITHM:
        raise SignatureError(f"invalid signature: unsupported hash {headers['Hash']}")

    try:
        payload = base64.b64decode("".join(inner), validate=True)
    except (binascii.Error, ValueError) as e:
        raise SignatureError(f"invalid signature: {e}") from e
    return headers, payload
