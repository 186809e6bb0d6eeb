"""Field extractors that normalize raw Jira issue JSON for classification."""

from dataclasses import dataclass
from typing import Optional

TEAM_FIELD = "customfield_12000"
MANAGER_GROUP_FIELD = "customfield_15072"


@dataclass(frozen=True)
class IssueFacts:
    """The classification inputs pulled out of one raw issue."""

    key: str = ""
    project_key: Optional[str] = None
    team: Optional[str] = None
    team_id: Optional[str] = None
    manager_group: Optional[str] = None
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None
    reporter_name: Optional[str] = None


def _fields(issue: dict) -> dict:
    fields = (issue or {}).get("fields")
    return fields if isinstance(fields, dict) else {}


def _obj(fields: dict, name: str) -> dict:
    value = fields.get(name)
    return value if isinstance(value, dict) else {}


def _text(value) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def extract_team(issue: dict, field_id: str = TEAM_FIELD) -> Optional[str]:
    """Return the raw team name from the team custom field.

    The field comes back as a plain string or as an object carrying one of
    ``value``, ``displayName`` or ``name``. The value is returned as-is; no
    mapping or fallback team is ever synthesized.
    """
    team_field = _fields(issue).get(field_id)
    if not team_field:
        return None
    if isinstance(team_field, str):
        return _text(team_field)
    if isinstance(team_field, dict):
        for attr in ("value", "displayName", "name"):
            value = _text(team_field.get(attr))
            if value:
                return value
    return None


def extract_team_id(issue: dict, field_id: str = TEAM_FIELD) -> Optional[str]:
    """Return the team identifier: the object's ``id`` or the raw team name."""
    team_field = _fields(issue).get(field_id)
    if isinstance(team_field, dict):
        team_id = team_field.get("id")
        if team_id:
            return str(team_id)
    return extract_team(issue, field_id)


def extract_manager_group(issue: dict, field_id: str = MANAGER_GROUP_FIELD) -> Optional[str]:
    group = _fields(issue).get(field_id)
    if isinstance(group, dict):
        return _text(group.get("name"))
    return None


def extract_assignee_id(issue: dict) -> Optional[str]:
    assignee = _obj(_fields(issue), "assignee")
    return assignee.get("accountId") or None


def extract_assignee_name(issue: dict) -> Optional[str]:
    assignee = _obj(_fields(issue), "assignee")
    return _text(assignee.get("displayName"))


def extract_reporter_name(issue: dict) -> Optional[str]:
    reporter = _obj(_fields(issue), "reporter")
    return _text(reporter.get("displayName"))


def extract_project_key(issue: dict) -> Optional[str]:
    project = _obj(_fields(issue), "project")
    return project.get("key") or None


def extract_facts(issue: dict, team_field: str = TEAM_FIELD,
                  manager_group_field: str = MANAGER_GROUP_FIELD) -> IssueFacts:
    """Collect every classification input from a raw issue."""
    return IssueFacts(
        key=(issue or {}).get("key") or "",
        project_key=extract_project_key(issue),
        team=extract_team(issue, team_field),
        team_id=extract_team_id(issue, team_field),
        manager_group=extract_manager_group(issue, manager_group_field),
        assignee_id=extract_assignee_id(issue),
        assignee_name=extract_assignee_name(issue),
        reporter_name=extract_reporter_name(issue),
    )
