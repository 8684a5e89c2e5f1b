"""Unit tests for detached roster signatures."""

import base64

import pytest

from teamkeys.exceptions import EmptySignatureError, SignatureError, SignatureMismatchError
from teamkeys.models.team import Team
from teamkeys.services.keys import Ed25519Key
from teamkeys.services.signing import (
    ARMOR_BEGIN,
    ARMOR_END,
    parse_armor,
    sign_roster,
    signer_fingerprint,
    verify_roster,
)

ROSTER = 'uuid = "74bb40b4-3510-11e9-968e-53c38df634be"\nversion = 1\nname = "Kiffix"\n'


class TestSignRoster:
    """Tests for sign_roster and the armor format."""

    def test_armor_layout(self, admin_key: Ed25519Key) -> None:
        """The signature should be armored with headers and a trailing newline."""
        signature = sign_roster(ROSTER, admin_key)
        lines = signature.split("\n")

        assert lines[0] == ARMOR_BEGIN
        assert lines[1] == f"Fingerprint: {admin_key.fingerprint().hex()}"
        assert lines[2] == "Hash: SHA256"
        assert lines[3] == ""
        assert lines[-2] == ARMOR_END
        assert lines[-1] == ""
        assert all(len(line) <= 64 for line in lines[4:-2])

    def test_parse_armor(self, admin_key: Ed25519Key) -> None:
        """parse_armor should return the headers and the decoded payload."""
        headers, payload = parse_armor(sign_roster(ROSTER, admin_key))

        assert headers == {"Fingerprint": admin_key.fingerprint().hex(), "Hash": "SHA256"}
        # two byte hash tag plus a 64 byte Ed25519 signature
        assert len(payload) == 66

    def test_signer_fingerprint(self, admin_key: Ed25519Key) -> None:
        """The signer's fingerprint should be readable from the armor."""
        assert signer_fingerprint(sign_roster(ROSTER, admin_key)) == admin_key.fingerprint()

    def test_signer_fingerprint_missing(self, admin_key: Ed25519Key) -> None:
        """Without a Fingerprint header there is no signer hint."""
        signature = sign_roster(ROSTER, admin_key)
        stripped = "\n".join(
            line for line in signature.split("\n") if not line.startswith("Fingerprint:")
        )
        assert signer_fingerprint(stripped) is None


class TestVerifyRoster:
    """Tests for verify_roster."""

    def test_valid_signature(self, admin_key: Ed25519Key) -> None:
        """A signature made by the key should verify."""
        verify_roster(ROSTER, sign_roster(ROSTER, admin_key), [admin_key.public()])

    def test_any_key_may_match(self, admin_key: Ed25519Key, member_key: Ed25519Key) -> None:
        """It's enough for one of the candidate keys to have signed."""
        signature = sign_roster(ROSTER, admin_key)
        verify_roster(ROSTER, signature, [member_key.public(), admin_key.public()])

    def test_tampered_roster(self, admin_key: Ed25519Key) -> None:
        """A roster changed after signing should fail on the hash tag."""
        signature = sign_roster(ROSTER, admin_key)
        tampered = ROSTER.replace("version = 1", "version = 2")

        with pytest.raises(SignatureMismatchError) as exc_info:
            verify_roster(tampered, signature, [admin_key.public()])
        assert str(exc_info.value) == "invalid signature: hash tag doesn't match"

    def test_empty_signature(self, admin_key: Ed25519Key) -> None:
        """An empty signature should be reported as such."""
        with pytest.raises(EmptySignatureError) as exc_info:
            verify_roster(ROSTER, "", [admin_key.public()])
        assert str(exc_info.value) == "empty signature"

    def test_wrong_key(self, admin_key: Ed25519Key, outsider_key: Ed25519Key) -> None:
        """A signature checked against a different key should fail."""
        signature = sign_roster(ROSTER, admin_key)

        with pytest.raises(SignatureMismatchError, match="signature doesn't match"):
            verify_roster(ROSTER, signature, [outsider_key.public()])

    def test_no_keys(self, admin_key: Ed25519Key) -> None:
        """With no candidate keys nothing can be verified."""
        with pytest.raises(SignatureError, match="no keys to verify against"):
            verify_roster(ROSTER, sign_roster(ROSTER, admin_key), [])

    @pytest.mark.parametrize(
        "armored",
        [
            "not a signature",
            f"{ARMOR_BEGIN}\nHash: SHA256\n\n!!!!\n{ARMOR_END}\n",
            f"{ARMOR_BEGIN}\nHash: MD5\n\nAAAA\n{ARMOR_END}\n",
            f"{ARMOR_BEGIN}\nHash: SHA256\n\nAAA=\n{ARMOR_END}\n",
        ],
        ids=["no armor", "bad base64", "unsupported hash", "payload too short"],
    )
    def test_malformed_signature(self, admin_key: Ed25519Key, armored: str) -> None:
        """A signature that can't be read should raise SignatureError."""
        with pytest.raises(SignatureError):
            verify_roster(ROSTER, armored, [admin_key.public()])

    def test_corrupted_signature_bytes(self, admin_key: Ed25519Key) -> None:
        """Flipping a signature byte, but keeping the hash tag, should fail on the key."""
        _, payload = parse_armor(sign_roster(ROSTER, admin_key))
        corrupted = payload[:10] + bytes([payload[10] ^ 0xFF]) + payload[11:]
        armored = "\n".join(
            [ARMOR_BEGIN, "", base64.b64encode(corrupted).decode("ascii"), ARMOR_END]
        )

        with pytest.raises(SignatureMismatchError):
            verify_roster(ROSTER, armored, [admin_key.public()])

    def test_signed_team_roster(self, signed_team: Team, admin_key: Ed25519Key) -> None:
        """A roster signed by update_roster should verify."""
        roster, signature = signed_team.roster()
        verify_roster(roster, signature, [admin_key])
