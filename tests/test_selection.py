"""
Selection Resolver Tests.

This module tests URL/candidate reconciliation for the pickers:
- Defaulting to the first candidate with a history replace
- Keeping a valid URL selection untouched
- Correcting stale ids, empty lists, pending and error states
- The at-most-one-rewrite guard
- Explicit selection with a history push
"""

from __future__ import annotations

import pytest

from cozy_mcp.constants import PROJECT_PARAM
from cozy_mcp.exceptions import CozyTransportError
from cozy_mcp.state import ResolutionStatus, SelectionResolver, UrlState
from tests.conftest import ProjectFactory

pytestmark = [pytest.mark.state, pytest.mark.unit]


@pytest.fixture
def resolver() -> SelectionResolver:
    return SelectionResolver(PROJECT_PARAM)


@pytest.fixture
def projects():
    return [ProjectFactory.create(id=i, name=f"Project {i}") for i in (1, 2, 3)]


# =============================================================================
# Defaulting
# =============================================================================


class TestDefaultSelection:
    """Tests for choosing a default when the URL has no usable id."""

    def test_no_param_selects_first_and_replaces(self, resolver, projects):
        """No projectId: project 1 is selected and written with replace."""
        url = UrlState("/tasks")

        result = resolver.resolve(url, projects)

        assert result.status == ResolutionStatus.SELECTED
        assert result.selected.id == 1
        assert result.rewrote_url
        assert url.url == "/tasks?projectId=1"
        assert [w.method for w in url.writes] == ["replace"]
        assert url.history == ["/tasks?projectId=1"]

    def test_unknown_id_falls_back_to_first(self, resolver, projects):
        """projectId=99 is not a candidate: fall back to 1 and correct the URL."""
        url = UrlState("/tasks?projectId=99")

        result = resolver.resolve(url, projects)

        assert result.selected.id == 1
        assert url.get(PROJECT_PARAM) == "1"
        assert url.writes_for("push") == []

    def test_default_ignores_server_order(self, resolver):
        """The default is the lowest id, whatever order the server used."""
        shuffled = [ProjectFactory.create(id=i) for i in (3, 1, 2)]
        url = UrlState("/tasks")

        result = resolver.resolve(url, shuffled)

        assert result.selected.id == 1

    def test_custom_sort_key(self, projects):
        """A sort key can change which candidate is the default."""
        resolver = SelectionResolver(PROJECT_PARAM, sort_key=lambda p: -p.id)
        url = UrlState("/tasks")

        assert resolver.resolve(url, projects).selected.id == 3

    @pytest.mark.parametrize("raw", ["abc", "", "1.5", "-1"])
    def test_malformed_id_falls_back(self, resolver, projects, raw):
        url = UrlState(f"/tasks?projectId={raw}")

        result = resolver.resolve(url, projects)

        assert result.selected.id == 1
        assert url.get(PROJECT_PARAM) == "1"


# =============================================================================
# Valid Selection
# =============================================================================


class TestExistingSelection:
    """Tests for a URL that already names a candidate."""

    def test_valid_param_is_kept(self, resolver, projects):
        """projectId=2 present: project 2 selected and the URL is untouched."""
        url = UrlState("/tasks?projectId=2")

        result = resolver.resolve(url, projects)

        assert result.selected.id == 2
        assert not result.rewrote_url
        assert url.writes == []
        assert resolver.last_resolved_id == "2"

    def test_repeated_passes_do_not_write(self, resolver, projects):
        """The selected id is stable across passes with unchanged inputs."""
        url = UrlState("/tasks")
        resolver.resolve(url, projects)

        for _ in range(3):
            result = resolver.resolve(url, projects)
            assert result.selected.id == 1
            assert not result.rewrote_url

        assert len(url.writes) == 1

    def test_back_navigation_is_respected(self, resolver, projects):
        """Going back to a previous valid id selects it without a write."""
        url = UrlState("/tasks?projectId=1")
        resolver.select(url, projects, 3)

        url.back()
        result = resolver.resolve(url, projects)

        assert result.selected.id == 1
        assert url.writes_for("replace") == []


# =============================================================================
# Empty / Pending / Error
# =============================================================================


class TestNonSelectedStates:
    """Tests for loading, error and empty candidate lists."""

    def test_pending_while_loading(self, resolver):
        url = UrlState("/tasks?projectId=2")

        result = resolver.resolve(url, None)

        assert result.status == ResolutionStatus.PENDING
        assert url.writes == []

    def test_error_does_not_touch_url(self, resolver, projects):
        url = UrlState("/tasks")
        error = CozyTransportError("connection refused")

        result = resolver.resolve(url, projects, error=error)

        assert result.status == ResolutionStatus.ERROR
        assert result.error is error
        assert url.writes == []

    def test_empty_list_clears_param(self, resolver):
        url = UrlState("/tasks?projectId=5")

        result = resolver.resolve(url, [])

        assert result.status == ResolutionStatus.EMPTY
        assert result.selected is None
        assert not url.has(PROJECT_PARAM)
        assert url.writes_for("replace")
        assert resolver.last_resolved_id is None

    def test_empty_list_without_param_writes_nothing(self, resolver):
        url = UrlState("/tasks")

        result = resolver.resolve(url, [])

        assert result.status == ResolutionStatus.EMPTY
        assert not result.rewrote_url
        assert url.writes == []


# =============================================================================
# Explicit Selection
# =============================================================================


class TestSelect:
    """Tests for a user picking a candidate."""

    def test_select_pushes(self, resolver, projects):
        url = UrlState("/tasks?projectId=1")

        project = resolver.select(url, projects, 2)

        assert project.id == 2
        assert url.get(PROJECT_PARAM) == "2"
        assert [w.method for w in url.writes] == ["push"]
        assert len(url.history) == 2

    def test_select_same_id_does_not_push(self, resolver, projects):
        url = UrlState("/tasks?projectId=2")

        resolver.select(url, projects, 2)

        assert url.writes == []

    def test_select_unknown_returns_none(self, resolver, projects):
        url = UrlState("/tasks?projectId=1")

        assert resolver.select(url, projects, 42) is None
        assert url.get(PROJECT_PARAM) == "1"

    def test_select_keeps_other_params(self, resolver, projects):
        url = UrlState("/calendar?calendars=1,2&projectId=1")

        resolver.select(url, projects, 3)

        assert url.get("calendars") == "1,2"
