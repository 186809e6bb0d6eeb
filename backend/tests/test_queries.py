"""Tests for JQL builders."""

from services import queries


class TestResolveRelease:
    """Test release lookup."""

    def test_known_release(self, reference_data):
        assert queries.resolve_release(reference_data, "May").name == "may"

    def test_unknown_release_uses_default(self, reference_data):
        assert queries.resolve_release(reference_data, "december").name == "april"
        assert queries.resolve_release(reference_data, None).name == "april"


class TestReleaseQueries:
    """Test single-window JQL."""

    def test_bugs_jql(self, reference_data):
        release = reference_data.get_release("july")
        jql = queries.bugs_jql(reference_data, release)

        assert jql == (
            'project in ("IO", "PRE", "DEVOPS") AND created >= 2025-05-21 '
            'AND created <= 2025-07-01 AND issuetype = Bug ORDER BY created DESC'
        )

    def test_triage_jql_checks_status_on_release_end(self, reference_data):
        release = reference_data.get_release("august")
        jql = queries.triage_jql(reference_data, release)

        assert jql.startswith('project in ("integrator.io", "PRE", "devops")')
        assert "created >= 2025-07-02 AND created <= 2025-08-12" in jql
        assert (
            'status was not in ("Closed", "Released", "Pending Release", "Cancelled", "Done") '
            'on 2025-08-12'
        ) in jql

    def test_backlog_all(self, reference_data):
        jql = queries.backlog_jql(reference_data)

        assert jql.startswith("issuetype = Bug AND status NOT IN (")
        assert '"Resolved"' in jql
        assert jql.endswith("ORDER BY priority DESC, created ASC")

    def test_backlog_release_cutoff_is_next_day(self, reference_data):
        release = reference_data.get_release("april")
        jql = queries.backlog_jql(reference_data, release)

        assert jql.startswith("createdDate <= 2025-04-08 AND issuetype = Bug")
        assert "BEFORE 2025-04-09" in jql


class TestTrendQueries:
    """Test trend window JQL."""

    def test_window_order(self, reference_data):
        names = list(queries.trend_queries(reference_data))

        assert names[:3] == ["beforeApril", "april", "aprilResolved"]
        assert names[-3:] == ["beforeAugust", "august", "augustResolved"]
        assert len(names) == 3 * len(reference_data.releases)

    def test_may_windows(self, reference_data):
        """May trend windows run from the day after April's cutoff."""
        trend = queries.trend_queries(reference_data)

        assert "created <= 2025-04-08" in trend["beforeMay"]
        assert "on 2025-04-09" in trend["beforeMay"]
        assert "created >= 2025-04-09 AND created <= 2025-05-20" in trend["may"]
        assert "on 2025-05-21" in trend["may"]
        assert "during (2025-04-09, 2025-05-20)" in trend["mayResolved"]
        assert "on 2025-04-09" in trend["mayResolved"]

    def test_window_names(self, reference_data):
        release = reference_data.get_release("july")
        assert queries.trend_window_names(release) == ("beforeJuly", "july", "julyResolved")
