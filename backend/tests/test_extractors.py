"""Tests for Jira field extractors."""

from services.extractors import (
    extract_assignee_id,
    extract_assignee_name,
    extract_facts,
    extract_manager_group,
    extract_project_key,
    extract_reporter_name,
    extract_team,
    extract_team_id,
)


class TestExtractTeam:
    """Test team custom field extraction."""

    def test_plain_string(self):
        """Should return a string team unchanged."""
        issue = {"fields": {"customfield_12000": "Core Flows"}}
        assert extract_team(issue) == "Core Flows"

    def test_object_with_value(self):
        """Should read value from an option object."""
        issue = {"fields": {"customfield_12000": {"value": "UI Experience", "name": "ignored"}}}
        assert extract_team(issue) == "UI Experience"

    def test_object_prefers_display_name_over_name(self):
        """Should fall back to displayName before name."""
        issue = {"fields": {"customfield_12000": {"displayName": "AI Assist", "name": "ai-assist"}}}
        assert extract_team(issue) == "AI Assist"

    def test_object_with_name_only(self):
        """Should fall back to name when nothing else is set."""
        issue = {"fields": {"customfield_12000": {"id": "42", "name": "QA Automation"}}}
        assert extract_team(issue) == "QA Automation"

    def test_missing_field(self):
        """Should return None when the field is absent."""
        assert extract_team({"fields": {}}) is None
        assert extract_team({}) is None

    def test_blank_string_is_absent(self):
        """Should treat whitespace-only team names as missing."""
        issue = {"fields": {"customfield_12000": "   "}}
        assert extract_team(issue) is None

    def test_does_not_normalize(self):
        """Should not trim or re-case the raw value."""
        issue = {"fields": {"customfield_12000": " core flows "}}
        assert extract_team(issue) == " core flows "


class TestExtractTeamId:
    """Test team identifier extraction."""

    def test_object_id(self):
        """Should prefer the object's id."""
        issue = {"fields": {"customfield_12000": {"id": "ec347d75", "name": "Core"}}}
        assert extract_team_id(issue) == "ec347d75"

    def test_falls_back_to_team_string(self):
        """Should use the team string when there is no id."""
        issue = {"fields": {"customfield_12000": "ec347d75-9818-4241-a555-1780ca88e974"}}
        assert extract_team_id(issue) == "ec347d75-9818-4241-a555-1780ca88e974"


class TestPersonAndProjectFields:
    """Test absent-safe reads of people and project fields."""

    def test_manager_group(self):
        issue = {"fields": {"customfield_15072": {"name": "Krishna_Reportees"}}}
        assert extract_manager_group(issue) == "Krishna_Reportees"

    def test_manager_group_not_an_object(self):
        issue = {"fields": {"customfield_15072": "Krishna_Reportees"}}
        assert extract_manager_group(issue) is None

    def test_null_assignee(self):
        """Should return None for unassigned issues."""
        issue = {"fields": {"assignee": None}}
        assert extract_assignee_id(issue) is None
        assert extract_assignee_name(issue) is None

    def test_assignee_and_reporter(self):
        issue = {"fields": {
            "assignee": {"accountId": "abc", "displayName": "Jordan Lee"},
            "reporter": {"displayName": "Pat Doe"},
        }}
        assert extract_assignee_id(issue) == "abc"
        assert extract_assignee_name(issue) == "Jordan Lee"
        assert extract_reporter_name(issue) == "Pat Doe"

    def test_project_key(self):
        assert extract_project_key({"fields": {"project": {"key": "PRE"}}}) == "PRE"
        assert extract_project_key({"fields": {"project": None}}) is None


class TestExtractFacts:
    """Test collecting every classification input."""

    def test_collects_all_facts(self, make_issue):
        """Should gather key, project, team, group and people."""
        issue = make_issue(
            key="IO-7", project="IO", team="Core Engine",
            manager_group="Ankur_Reportees", assignee="Jordan Lee",
            assignee_id="acc-1", reporter="Pat Doe",
        )
        facts = extract_facts(issue)

        assert facts.key == "IO-7"
        assert facts.project_key == "IO"
        assert facts.team == "Core Engine"
        assert facts.team_id == "Core Engine"
        assert facts.manager_group == "Ankur_Reportees"
        assert facts.assignee_id == "acc-1"
        assert facts.assignee_name == "Jordan Lee"
        assert facts.reporter_name == "Pat Doe"

    def test_empty_issue(self):
        """Should never raise on an empty payload."""
        facts = extract_facts({})
        assert facts.key == ""
        assert facts.team is None
        assert facts.manager_group is None
