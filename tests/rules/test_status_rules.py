"""Tests for the status lattice and raw-outcome mapping rules."""

import itertools
from functools import reduce

import pytest

from gherkin_portal.backend.base import AUTOMATION_BUG, NOT_ISSUE
from gherkin_portal.rules.status import (
    build_issue_comment,
    issue_for,
    join_status,
    map_level,
    map_status,
)
from gherkin_portal.state.models import ItemStatus, LogLevel

PASSED, SKIPPED, FAILED = ItemStatus.PASSED, ItemStatus.SKIPPED, ItemStatus.FAILED


class TestJoinStatus:
    """Test the PASSED < SKIPPED < FAILED join."""

    @pytest.mark.parametrize("status", list(ItemStatus))
    def test_equal_statuses_unchanged(self, status):
        assert join_status(status, status) is status

    @pytest.mark.parametrize("current,new,expected", [
        (PASSED, SKIPPED, SKIPPED),
        (SKIPPED, PASSED, SKIPPED),
        (PASSED, FAILED, FAILED),
        (FAILED, PASSED, FAILED),
        (SKIPPED, FAILED, FAILED),
        (FAILED, SKIPPED, FAILED),
    ])
    def test_mismatched_statuses(self, current, new, expected):
        assert join_status(current, new) is expected

    def test_failed_is_absorbing(self):
        """Once FAILED, nothing lowers the status."""
        for sequence in itertools.product(list(ItemStatus), repeat=3):
            assert reduce(join_status, sequence, FAILED) is FAILED

    def test_order_independent(self):
        """The iterated join does not depend on result order."""
        outcomes = [PASSED, SKIPPED, PASSED, FAILED, SKIPPED]
        expected = reduce(join_status, outcomes, PASSED)
        for permutation in itertools.permutations(outcomes):
            assert reduce(join_status, permutation, PASSED) is expected


class TestOutcomeMapping:
    """Test raw outcome to status and level mapping."""

    @pytest.mark.parametrize("raw,status,level", [
        ("passed", PASSED, LogLevel.INFO),
        ("skipped", SKIPPED, LogLevel.WARN),
        ("failed", FAILED, LogLevel.ERROR),
        ("undefined", FAILED, LogLevel.ERROR),
        ("pending", FAILED, LogLevel.ERROR),
        ("ambiguous", FAILED, LogLevel.ERROR),
    ])
    def test_known_outcomes(self, raw, status, level):
        assert map_status(raw) is status
        assert map_level(raw) is level

    def test_case_insensitive(self):
        assert map_status("PASSED") is PASSED
        assert map_status("Skipped") is SKIPPED
        assert map_level("PaSsEd") is LogLevel.INFO

    def test_unknown_outcome_is_failure(self):
        assert map_status("exploded") is FAILED
        assert map_level("") is LogLevel.ERROR


class TestIssueRules:
    """Test issue commentary and close-time issue attachment."""

    def test_pending_and_undefined_comments(self):
        assert build_issue_comment("pending") == "Pending step"
        assert build_issue_comment("undefined") == "Undefined step"

    @pytest.mark.parametrize("raw", ["passed", "failed", "skipped", "ambiguous"])
    def test_no_comment_for_other_outcomes(self, raw):
        assert build_issue_comment(raw) is None

    @pytest.mark.parametrize("raw", ["PENDING", "Undefined"])
    def test_comment_match_is_case_sensitive(self, raw):
        assert build_issue_comment(raw) is None
        assert map_status(raw) is FAILED

    def test_skipped_gets_not_issue(self):
        issue = issue_for(SKIPPED, "Pending step")
        assert issue.issue_type == NOT_ISSUE
        assert issue.comment is None

    def test_comments_get_automation_bug(self):
        issue = issue_for(FAILED, "Undefined step")
        assert issue.issue_type == AUTOMATION_BUG
        assert issue.comment == "Undefined step"

    def test_no_issue_without_comments(self):
        assert issue_for(FAILED, "") is None
        assert issue_for(PASSED, "") is None
        assert issue_for(None, "") is None
