"""Unit tests for roster serialization and parsing."""

from uuid import UUID

import pytest

from teamkeys.exceptions import RosterParseError
from teamkeys.models.person import Person
from teamkeys.models.team import Team
from teamkeys.services.roster import load_team, parse_roster, serialize_roster
from teamkeys.utils.fingerprint import Fingerprint

SAMPLE_ROSTER = """\
# Kiffix team roster. Everyone in the team has a copy of this file.
#
# It is used to look up which key to use for an email address and fetch keys
# automatically.
uuid = "38be2a70-23d8-11e9-bafd-7f97f2e239a3"
name = "Kiffix"

[[person]]
email = "paul@example.com"
fingerprint = "B79F 0840 DEF1 2EBB A72F  F72D 7327 A44C 2157 A758"
is_admin = true

[[person]]
email = "ian@example.com"
fingerprint = "E63A F0E7 4EB5 DE3F B72D  C981 C991 7093 18EC BDE7"
is_admin = false

[[person]]
email = "ray@example.com"
fingerprint = "AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
# missing is_admin
"""

ROSTER_HEAD = """\
uuid = "38be2a70-23d8-11e9-bafd-7f97f2e239a3"
version = 1
name = "Kiffix"
"""


class TestSerializeRoster:
    """Tests for serialize_roster."""

    def test_canonical_form(self) -> None:
        """The roster should be written in its exact canonical form."""
        team = Team(
            name="Kiffix",
            uuid=UUID("74bb40b4-3510-11e9-968e-53c38df634be"),
            version=3,
            people=[
                Person(
                    email="test@example.com",
                    fingerprint="AAAABBBBAAAABBBBAAAAAAAABBBBAAAABBBBAAAA",
                    is_admin=True,
                ),
                Person(
                    email="another@example.com",
                    fingerprint="CCCCDDDDCCCCDDDDCCCCDDDDCCCCDDDDCCCCDDDD",
                ),
            ],
        )

        assert serialize_roster(team) == (
            "# Kiffix team roster. Everyone in the team has a copy of this file.\n"
            "#\n"
            "# It is used to look up which key to use for an email address and fetch keys\n"
            "# automatically.\n"
            'uuid = "74bb40b4-3510-11e9-968e-53c38df634be"\n'
            "version = 3\n"
            'name = "Kiffix"\n'
            "\n"
            "[[person]]\n"
            '  email = "test@example.com"\n'
            '  fingerprint = "AAAABBBBAAAABBBBAAAAAAAABBBBAAAABBBBAAAA"\n'
            "  is_admin = true\n"
            "\n"
            "[[person]]\n"
            '  email = "another@example.com"\n'
            '  fingerprint = "CCCCDDDDCCCCDDDDCCCCDDDDCCCCDDDDCCCCDDDD"\n'
            "  is_admin = false\n"
        )

    def test_version_override(self, team: Team) -> None:
        """An explicit version should be written instead of the team's own."""
        assert "version = 7\n" in serialize_roster(team, version=7)
        assert team.version == 0

    def test_deterministic(self, team: Team) -> None:
        """Serializing twice should give identical text."""
        assert serialize_roster(team) == serialize_roster(team)

    def test_quotes_special_characters(self, team: Team) -> None:
        """Quotes and backslashes in names should be escaped."""
        team.name = 'The "Quote" \\ Team'
        roster = serialize_roster(team)

        assert 'name = "The \\"Quote\\" \\\\ Team"\n' in roster
        assert parse_roster(roster).name == 'The "Quote" \\ Team'

    def test_multiline_name_keeps_header_a_comment(self, team: Team) -> None:
        """A name with a newline should not break out of the header comment."""
        team.name = "Two\nLines"
        roster = serialize_roster(team)

        assert roster.startswith("# Two Lines team roster.")
        assert parse_roster(roster).name == "Two\nLines"

    @pytest.mark.parametrize(
        "name",
        ["a\x00b", "a\x08b", "a\x1fb", "a\x7fb", "\n\000\037 \041\176\177\200\377\n"],
    )
    def test_control_characters_in_name(self, team: Team, name: str) -> None:
        """A name with control characters should still give a parseable roster."""
        team.name = name
        roster = serialize_roster(team)

        parsed = parse_roster(roster)
        assert parsed.name == name
        assert serialize_roster(parsed) == roster

    def test_preserves_person_order(self, team: Team) -> None:
        """People should be written in roster order."""
        roster = serialize_roster(team)
        assert roster.index("admin@example.com") < roster.index("member@example.com")


class TestParseRoster:
    """Tests for parse_roster."""

    def test_parse_sample(self) -> None:
        """A hand-written roster should parse, with grouped fingerprints and defaults."""
        team = parse_roster(SAMPLE_ROSTER)

        assert team.uuid == UUID("38be2a70-23d8-11e9-bafd-7f97f2e239a3")
        assert team.name == "Kiffix"
        assert team.version == 0
        assert team.people == [
            Person(
                email="paul@example.com",
                fingerprint=Fingerprint.parse("B79F0840DEF12EBBA72FF72D7327A44C2157A758"),
                is_admin=True,
            ),
            Person(
                email="ian@example.com",
                fingerprint=Fingerprint.parse("E63AF0E74EB5DE3FB72DC981C991709318ECBDE7"),
                is_admin=False,
            ),
            Person(
                email="ray@example.com",
                fingerprint=Fingerprint.parse("AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"),
                is_admin=False,
            ),
        ]

    def test_parse_has_no_stored_roster(self) -> None:
        """parse_roster should not attach the text to the team."""
        assert parse_roster(SAMPLE_ROSTER).roster() == ("", "")

    def test_round_trip(self, team: Team) -> None:
        """Parsing a serialized roster should give back the same team."""
        team.version = 4
        parsed = parse_roster(serialize_roster(team))

        assert parsed.uuid == team.uuid
        assert parsed.name == team.name
        assert parsed.version == 4
        assert parsed.people == team.people

    def test_no_people(self) -> None:
        """A roster without any person tables parses to an empty team."""
        team = parse_roster(ROSTER_HEAD)
        assert team.people == []
        assert team.version == 1

    def test_missing_uuid(self) -> None:
        """A missing UUID is left for validation to report."""
        assert parse_roster('name = "Kiffix"\n').uuid is None

    def test_invalid_toml(self) -> None:
        """Malformed TOML should raise RosterParseError."""
        with pytest.raises(RosterParseError, match="error parsing roster"):
            parse_roster("uuid = \n[[person")

    @pytest.mark.parametrize(
        "roster",
        [
            'uuid = "not-a-uuid"\n',
            "uuid = 42\n",
            ROSTER_HEAD.replace("version = 1", 'version = "one"'),
            ROSTER_HEAD.replace("version = 1", "version = true"),
            ROSTER_HEAD.replace('name = "Kiffix"', "name = 3"),
            ROSTER_HEAD + 'person = "nobody"\n',
        ],
        ids=["bad uuid", "uuid not a string", "version string", "version bool", "name", "person"],
    )
    def test_invalid_fields(self, roster: str) -> None:
        """Fields of the wrong type should raise RosterParseError."""
        with pytest.raises(RosterParseError):
            parse_roster(roster)

    @pytest.mark.parametrize(
        "person",
        [
            'fingerprint = "AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"\n',
            'email = "a@example.com"\n',
            'email = "a@example.com"\nfingerprint = "AAAA"\n',
            'email = "a@example.com"\n'
            'fingerprint = "AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"\n'
            'is_admin = "yes"\n',
        ],
        ids=["missing email", "missing fingerprint", "short fingerprint", "is_admin string"],
    )
    def test_invalid_person(self, person: str) -> None:
        """A person with missing or malformed fields should raise RosterParseError."""
        with pytest.raises(RosterParseError):
            parse_roster(ROSTER_HEAD + "\n[[person]]\n" + person)


class TestLoadTeam:
    """Tests for load_team."""

    def test_keeps_texts_verbatim(self) -> None:
        """The roster and signature should be stored exactly as given."""
        team = load_team(SAMPLE_ROSTER, "fake signature")

        assert team.roster() == (SAMPLE_ROSTER, "fake signature")
        assert team.name == "Kiffix"
        assert len(team.people) == 3

    def test_invalid_roster(self) -> None:
        """A malformed roster should raise RosterParseError."""
        with pytest.raises(RosterParseError):
            load_team("[[person]", "fake signature")
