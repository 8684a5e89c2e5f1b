"""Pytest fixtures for teamkeys tests."""

from pathlib import Path
from uuid import UUID

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from teamkeys.models.person import Person
from teamkeys.models.team import Team
from teamkeys.services.home import HomeService
from teamkeys.services.keys import Ed25519Key

KIFFIX_UUID = UUID("74bb40b4-3510-11e9-968e-53c38df634be")


@pytest.fixture
def admin_key() -> Ed25519Key:
    """Generate a key belonging to a team admin."""
    return Ed25519Key.from_private_key(Ed25519PrivateKey.generate())


@pytest.fixture
def member_key() -> Ed25519Key:
    """Generate a key belonging to an ordinary team member."""
    return Ed25519Key.from_private_key(Ed25519PrivateKey.generate())


@pytest.fixture
def outsider_key() -> Ed25519Key:
    """Generate a key that isn't in any team."""
    return Ed25519Key.from_private_key(Ed25519PrivateKey.generate())


@pytest.fixture
def team(admin_key: Ed25519Key, member_key: Ed25519Key) -> Team:
    """A valid team with one admin and one member.

    Returns:
        An unsigned team.
    """
    return Team(
        name="Kiffix",
        uuid=KIFFIX_UUID,
        people=[
            Person(email="admin@example.com", fingerprint=admin_key.fingerprint(), is_admin=True),
            Person(email="member@example.com", fingerprint=member_key.fingerprint()),
        ],
    )


@pytest.fixture
def signed_team(team: Team, admin_key: Ed25519Key) -> Team:
    """The sample team with a signed roster."""
    team.update_roster(admin_key)
    return team


@pytest.fixture
def temp_home(tmp_path: Path) -> Path:
    """Create an initialized teamkeys home directory.

    Returns:
        Path to the home directory.
    """
    home = tmp_path / "home"
    HomeService(home).initialize()
    return home


@pytest.fixture
def home_service(temp_home: Path) -> HomeService:
    """Create a HomeService for the temporary home."""
    return HomeService(temp_home)


def write_private_key(path: Path, key: Ed25519PrivateKey) -> Path:
    """Write an unencrypted PEM private key."""
    path.write_bytes(
        key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    return path


@pytest.fixture
def admin_private_key() -> Ed25519PrivateKey:
    """A raw private key for tests that need PEM files."""
    return Ed25519PrivateKey.generate()


@pytest.fixture
def admin_key_file(tmp_path: Path, admin_private_key: Ed25519PrivateKey) -> Path:
    """PEM file holding the admin's private key."""
    return write_private_key(tmp_path / "admin.pem", admin_private_key)


@pytest.fixture
def admin_public_key_file(tmp_path: Path, admin_private_key: Ed25519PrivateKey) -> Path:
    """PEM file holding the admin's public key."""
    path = tmp_path / "admin.pub.pem"
    path.write_bytes(Ed25519Key.from_private_key(admin_private_key).public_pem())
    return path
