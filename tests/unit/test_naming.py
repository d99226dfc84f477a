"""Unit tests for Kubernetes name helpers."""

import pytest

from kubeprime_cli.bootstrap.naming import MAX_NAME_LENGTH, to_valid_name


@pytest.mark.cli_unit
class TestToValidName:
    """Tests for to_valid_name()."""

    def test_email_becomes_dns_label(self):
        assert to_valid_name("Jane.Doe@example.com") == "jane-doe-example-com"

    def test_runs_collapse_to_single_dash(self):
        assert to_valid_name("a__b..c") == "a-b-c"

    def test_leading_and_trailing_dashes_trimmed(self):
        assert to_valid_name("--admin--") == "admin"

    def test_already_valid_is_unchanged(self):
        assert to_valid_name("cluster-admin-binding") == "cluster-admin-binding"

    def test_truncated_to_max_length(self):
        name = to_valid_name("x" * 100)
        assert len(name) == MAX_NAME_LENGTH

    def test_truncation_does_not_leave_trailing_dash(self):
        name = to_valid_name("a" * 62 + "-b")
        assert not name.endswith("-")
