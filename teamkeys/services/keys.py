"""Ed25519 keys usable for signing and verifying rosters.

Key material is created and looked after elsewhere; this module only adapts
keys stored as PEM files to the ``SigningKey`` and ``VerificationKey``
protocols.
"""

import hashlib
from pathlib import Path

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

from teamkeys.exceptions import KeyLoadError, SignatureMismatchError
from teamkeys.utils.fingerprint import Fingerprint

# Domain separation prefix for fingerprint hashing
FINGERPRINT_PREFIX = b"teamkeys-ed25519:"


class Ed25519Key:
    """An Ed25519 public key, optionally with its private half."""

    def __init__(
        self,
        public_key: Ed25519PublicKey,
        private_key: Ed25519PrivateKey | None = None,
    ) -> None:
        self._public_key = public_key
        self._private_key = private_key

    @classmethod
    def from_private_key(cls, private_key: Ed25519PrivateKey) -> "Ed25519Key":
        """Wrap a private key."""
        return cls(private_key.public_key(), private_key)

    @classmethod
    def load(cls, path: Path, password: bytes | None = None) -> "Ed25519Key":
        """Load a PEM encoded private or public key from a file.

        Args:
            path: Path to the PEM file.
            password: Password for an encrypted private key.

        Returns:
            The loaded key.

        Raises:
            KeyLoadError: If the file can't be read or isn't an Ed25519 key.
        """
        try:
            data = path.read_bytes()
        except OSError as e:
            raise KeyLoadError(f"couldn't read key {path}: {e}") from e

        if b"PRIVATE KEY" in data:
            try:
                private_key = serialization.load_pem_private_key(data, password=password)
            except (ValueError, TypeError, UnsupportedAlgorithm) as e:
                raise KeyLoadError(f"couldn't load private key {path}: {e}") from e
            if not isinstance(private_key, Ed25519PrivateKey):
                raise KeyLoadError(f"not an Ed25519 key: {path}")
            return cls.from_private_key(private_key)

        try:
            public_key = serialization.load_pem_public_key(data)
        except (ValueError, UnsupportedAlgorithm) as e:
            raise KeyLoadError(f"couldn't load public key {path}: {e}") from e
        if not isinstance(public_key, Ed25519PublicKey):
            raise KeyLoadError(f"not an Ed25519 key: {path}")
        return cls(public_key)

    @property
    def has_private_key(self) -> bool:
        """Whether this key can sign."""
        return self._private_key is not None

    def public(self) -> "Ed25519Key":
        """Return the public half of this key."""
        return Ed25519Key(self._public_key)

    def public_bytes(self) -> bytes:
        """Return the raw 32 byte public key."""
        return self._public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    def public_pem(self) -> bytes:
        """Return the public key PEM encoded."""
        return self._public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def fingerprint(self) -> Fingerprint:
        """Return the 160-bit fingerprint of the public key."""
        return Fingerprint(hashlib.sha1(FINGERPRINT_PREFIX + self.public_bytes()).digest())

    def sign(self, data: bytes) -> bytes:
        """Sign ``data`` with the private key.

        Raises:
            KeyLoadError: If this is a public key only.
        """
        if self._private_key is None:
            raise KeyLoadError(f"key {self.fingerprint()} has no private key")
        return self._private_key.sign(data)

    def verify(self, data: bytes, signature: bytes) -> None:
        """Check a raw signature over ``data``.

        Raises:
            SignatureMismatchError: If this key didn't make the signature.
        """
        try:
            self._public_key.verify(signature, data)
        except InvalidSignature as e:
            raise SignatureMismatchError("invalid signature: signature doesn't match") from e

    def __repr__(self) -> str:
        return f"Ed25519Key({self.fingerprint().hex()!r})"
