##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
Tests for the `schema/loader.py` module.
"""

import pytest

from dbtable.exceptions import ConfigurationError
from dbtable.schema import load_descriptor
from tests.fixture_types import FixtureCallable


TEAM_YAML = """
table: team
unique_keys:
  - [id]
  - [name]
columns:
  id:
    immutable: true
    autoincrement: true
    default: "NULL"
  name:
    quoted: true
  city:
    quoted: true
    null: true
  member_count:
    special:
      select: COUNT(member.id) AS member_count
      join: LEFT JOIN member ON member.team_id = team.id
      groupby: team.id
related:
  Member:
    team_id: id
"""


class TestLoadDescriptor:
    """Tests for loading table descriptions from YAML files."""

    def test_load_descriptor(self, tmp_path, write_yaml: FixtureCallable):
        """
        Test that a YAML description becomes a `SchemaDescriptor`.

        Args:
            tmp_path: A temporary directory.
            write_yaml: A helper writing a file.
        """
        filepath = write_yaml(tmp_path, "team.yaml", TEAM_YAML)
        schema = load_descriptor(filepath)
        assert schema.table == "team"
        assert schema.unique_key_groups == (("id",), ("name",))
        assert schema.column("id").default == "NULL"
        assert schema.column("city").nullable
        assert schema.column("member_count").special.groupby == "team.id"
        assert schema.relations["Member"] == {"team_id": "id"}

    def test_missing_file(self, tmp_path):
        """
        Test that a missing file raises `ConfigurationError`.

        Args:
            tmp_path: A temporary directory.
        """
        with pytest.raises(ConfigurationError):
            load_descriptor(str(tmp_path / "nope.yaml"))

    def test_malformed_yaml(self, tmp_path, write_yaml: FixtureCallable):
        """
        Test that unparsable YAML raises `ConfigurationError`.

        Args:
            tmp_path: A temporary directory.
            write_yaml: A helper writing a file.
        """
        filepath = write_yaml(tmp_path, "bad.yaml", "table: team\ncolumns: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_descriptor(filepath)

    def test_invalid_description(self, tmp_path, write_yaml: FixtureCallable):
        """
        Test that a well-formed file with an invalid description is rejected.

        Args:
            tmp_path: A temporary directory.
            write_yaml: A helper writing a file.
        """
        filepath = write_yaml(tmp_path, "empty.yaml", "")
        with pytest.raises(ConfigurationError):
            load_descriptor(filepath)
