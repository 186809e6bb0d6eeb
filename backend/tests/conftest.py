"""Shared fixtures for bug dashboard tests."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from services.reference_data import load_reference_data


@pytest.fixture
def mock_jira_credentials():
    """Mock Jira credentials for testing."""
    return {
        "server": "https://test.atlassian.net",
        "email": "test@example.com",
        "token": "test-token-123"
    }


@pytest.fixture
def jira_headers(mock_jira_credentials):
    """Request headers carrying Jira credentials."""
    return {
        "X-Jira-Server": mock_jira_credentials["server"],
        "X-Jira-Email": mock_jira_credentials["email"],
        "X-Jira-Token": mock_jira_credentials["token"],
    }


@pytest.fixture(scope="session")
def reference_data():
    """Reference tables shipped in backend/config."""
    return load_reference_data()


@pytest.fixture
def make_issue():
    """Factory for raw Jira issues as returned by /rest/api/3/search."""
    counter = {"n": 0}

    def _make(key=None, project="IO", team=None, manager_group=None,
              assignee=None, assignee_id=None, reporter=None,
              status="Open", category="To Do", priority="High",
              created="2025-03-01T10:00:00.000+0000", resolved=None):
        counter["n"] += 1
        fields = {
            "summary": f"Bug {counter['n']}",
            "status": {"name": status, "statusCategory": {"name": category}},
            "priority": {"name": priority, "iconUrl": ""} if priority else None,
            "assignee": None,
            "reporter": {"displayName": reporter, "emailAddress": "reporter@example.com"} if reporter else None,
            "created": created,
            "updated": created,
            "resolved": resolved,
            "labels": [],
            "components": [],
            "fixVersions": [],
            "project": {"key": project},
        }
        if assignee or assignee_id:
            fields["assignee"] = {
                "displayName": assignee,
                "emailAddress": "assignee@example.com",
                "avatarUrls": {"48x48": ""},
                "accountId": assignee_id,
            }
        if team is not None:
            fields["customfield_12000"] = team
        if manager_group is not None:
            fields["customfield_15072"] = {"name": manager_group}
        return {
            "id": str(10000 + counter["n"]),
            "key": key or f"{project.upper()}-{counter['n']}",
            "fields": fields,
        }

    return _make


@pytest.fixture
def app(reference_data):
    """Create Flask test app with no service account configured."""
    from app import create_app
    from app.config import Config

    app = create_app(config=Config(env={}), reference_data=reference_data)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()
